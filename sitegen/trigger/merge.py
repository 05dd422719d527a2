"""Generation decisions for merged pull requests."""

from __future__ import annotations

from typing import Iterable

from ..models import GenerationType, MergeTriggerConfig, TriggerDecision, TriggerType


def decide_on_pr_merge(
    base_branch: str, labels: Iterable[str], config: MergeTriggerConfig | None = None
) -> TriggerDecision:
    """Decide whether a pull request merged into ``base_branch`` should generate.

    Rules are checked in order: manual mode, allowed base branches, then
    required labels (any one of them is enough).
    """
    config = config or MergeTriggerConfig()
    if config.manual:
        return TriggerDecision(
            should_generate=False,
            trigger_type=TriggerType.MANUAL,
            generation_type=GenerationType.FULL,
            reason="Manual trigger configured",
        )
    if config.allowed_branches and base_branch not in config.allowed_branches:
        return _skip(f"Branch {base_branch} not in allowed branches")
    if config.required_labels and not config.required_labels.intersection(labels):
        required = ", ".join(sorted(config.required_labels))
        return _skip(f"PR doesn't have required labels: {required}")
    return TriggerDecision(
        should_generate=True,
        trigger_type=TriggerType.AUTO,
        generation_type=GenerationType.FULL,
        reason="Config-based auto generation",
    )


def _skip(reason: str) -> TriggerDecision:
    return TriggerDecision(
        should_generate=False,
        trigger_type=TriggerType.AUTO,
        generation_type=GenerationType.FULL,
        reason=reason,
    )


__all__ = ["decide_on_pr_merge"]
