from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, Sequence

import pytest

from sitegen.models import CommitChange, TriggerConfig, TriggerEvent
from tests._fixtures.fakes import FakeClock


@pytest.fixture(autouse=True)
def _reset_sitegen_logger() -> Iterator[None]:
    """Undo handler changes made by CLI runs so caplog keeps seeing records."""
    yield
    logger = logging.getLogger("sitegen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a clock whose sleeps return immediately."""
    return FakeClock()


@pytest.fixture
def make_event() -> Callable[..., TriggerEvent]:
    """Build push events from plain path lists."""

    def _make(
        *,
        branch: str = "main",
        default_branch: str = "main",
        commits: Sequence[Iterable[str]] = (("src/app.py",),),
        messages: Sequence[str] | None = None,
        config: TriggerConfig | None = None,
    ) -> TriggerEvent:
        changes = []
        for index, paths in enumerate(commits):
            message = messages[index] if messages else f"commit {index}"
            changes.append(CommitChange(modified=frozenset(paths), message=message))
        return TriggerEvent(
            branch_name=branch,
            default_branch=default_branch,
            commits=tuple(changes),
            config=config or TriggerConfig(),
        )

    return _make
