"""Conversion of webhook push payloads into trigger events."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..models import CommitChange, TriggerConfig, TriggerEvent

_HEADS_PREFIX = "refs/heads/"


def event_from_push_payload(
    payload: Mapping[str, Any], config: Optional[TriggerConfig] = None
) -> TriggerEvent:
    """Build a TriggerEvent from a GitHub-style push payload.

    Missing keys become empty values; malformed commit entries are skipped.
    """
    ref = _as_str(payload.get("ref"))
    branch = ref[len(_HEADS_PREFIX):] if ref.startswith(_HEADS_PREFIX) else ref

    repository = payload.get("repository")
    default_branch = ""
    if isinstance(repository, Mapping):
        default_branch = _as_str(repository.get("default_branch"))

    commits = []
    raw_commits = payload.get("commits")
    if isinstance(raw_commits, list):
        for entry in raw_commits:
            if not isinstance(entry, Mapping):
                continue
            commits.append(
                CommitChange(
                    added=_as_paths(entry.get("added")),
                    modified=_as_paths(entry.get("modified")),
                    removed=_as_paths(entry.get("removed")),
                    message=_as_str(entry.get("message")),
                )
            )

    return TriggerEvent(
        branch_name=branch,
        default_branch=default_branch,
        commits=tuple(commits),
        config=config or TriggerConfig(),
    )


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_paths(value: Any) -> frozenset[str]:
    if not isinstance(value, list):
        return frozenset()
    return frozenset(item for item in value if isinstance(item, str) and item)


__all__ = ["event_from_push_payload"]
