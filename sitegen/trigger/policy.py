"""Push trigger policy."""

from __future__ import annotations

from typing import AbstractSet, Iterable, Sequence, Set

from ..models import CommitChange, GenerationType, TriggerDecision, TriggerEvent, TriggerType

COMMIT_MARKER = "[skip sitegen]"


class TriggerPolicy:
    """Decides whether a push should produce a site generation run.

    The decision is a pure function of the event: the first matching rule wins
    and supplies the reason.
    """

    def decide(self, event: TriggerEvent) -> TriggerDecision:
        config = event.config
        if not config.enabled:
            return self._skip("Push trigger disabled")

        targets = self._target_branches(event)
        if event.branch_name not in targets:
            return self._skip(
                f"Branch {event.branch_name} not in target branches: {', '.join(sorted(targets))}"
            )

        changed = self._changed_paths(event.commits)
        prefixes = config.ignored_path_prefixes
        if changed and prefixes and all(_has_prefix(path, prefixes) for path in changed):
            return self._skip(f"All changes in ignored paths: {', '.join(sorted(prefixes))}")

        return TriggerDecision(
            should_generate=True,
            trigger_type=TriggerType.AUTO,
            generation_type=GenerationType.FULL,
            reason="Push trigger activated",
        )

    # ------------------------------------------------------------------
    # Internals

    @staticmethod
    def _target_branches(event: TriggerEvent) -> AbstractSet[str]:
        return event.config.target_branches or frozenset({event.default_branch})

    @staticmethod
    def _changed_paths(commits: Iterable[CommitChange]) -> Set[str]:
        changed: Set[str] = set()
        for commit in commits:
            changed.update(commit.paths())
        return changed

    @staticmethod
    def _skip(reason: str) -> TriggerDecision:
        return TriggerDecision(
            should_generate=False,
            trigger_type=TriggerType.AUTO,
            generation_type=GenerationType.FULL,
            reason=reason,
        )


def is_self_generated_push(commits: Sequence[CommitChange], marker: str = COMMIT_MARKER) -> bool:
    """Return True when every commit in the push carries the generated-commit marker."""
    if not commits:
        return False
    return all(marker in commit.message for commit in commits)


def _has_prefix(path: str, prefixes: Iterable[str]) -> bool:
    return any(path.startswith(prefix) for prefix in prefixes)


__all__ = ["COMMIT_MARKER", "TriggerPolicy", "is_self_generated_push"]
