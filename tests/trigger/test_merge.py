"""Tests for merged pull request decisions."""

from __future__ import annotations

from sitegen.models import GenerationType, MergeTriggerConfig, TriggerType
from sitegen.trigger.merge import decide_on_pr_merge


def test_merge_generates_by_default() -> None:
    decision = decide_on_pr_merge("main", [])

    assert decision.should_generate is True
    assert decision.trigger_type is TriggerType.AUTO
    assert decision.generation_type is GenerationType.FULL
    assert decision.reason == "Config-based auto generation"


def test_manual_mode_skips_even_when_other_checks_pass() -> None:
    config = MergeTriggerConfig(
        manual=True, allowed_branches=frozenset({"main"}), required_labels=frozenset({"site"})
    )

    decision = decide_on_pr_merge("main", ["site"], config)

    assert decision.should_generate is False
    assert decision.trigger_type is TriggerType.MANUAL
    assert decision.reason == "Manual trigger configured"


def test_base_branch_outside_allowed_branches_is_skipped() -> None:
    config = MergeTriggerConfig(allowed_branches=frozenset({"main", "release"}))

    decision = decide_on_pr_merge("develop", [], config)

    assert decision.should_generate is False
    assert decision.reason == "Branch develop not in allowed branches"


def test_missing_required_labels_are_listed_sorted() -> None:
    config = MergeTriggerConfig(required_labels=frozenset({"site", "docs"}))

    decision = decide_on_pr_merge("main", ["bug"], config)

    assert decision.should_generate is False
    assert decision.reason == "PR doesn't have required labels: docs, site"


def test_any_required_label_is_enough() -> None:
    config = MergeTriggerConfig(
        allowed_branches=frozenset({"main"}), required_labels=frozenset({"site", "docs"})
    )

    decision = decide_on_pr_merge("main", ["docs", "bug"], config)

    assert decision.should_generate is True
