"""Deployment guard that keeps generation runs from overlapping deployments."""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Optional, TypeVar

from .logging import get_logger
from .models import DeploymentState

T = TypeVar("T")

DeploymentProbe = Callable[[], DeploymentState]


class ProbeErrorKind(str, Enum):
    """Classification of deployment status lookup failures."""

    AUTH = "auth"
    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    OTHER = "other"


def classify_status(status: Optional[int]) -> ProbeErrorKind:
    """Map an HTTP status code from the status API onto a failure class."""
    if status in (401, 403):
        return ProbeErrorKind.AUTH
    if status == 429:
        return ProbeErrorKind.RATE_LIMITED
    if status is not None and 500 <= status <= 599:
        return ProbeErrorKind.TRANSIENT
    return ProbeErrorKind.OTHER


class StatusProbeError(RuntimeError):
    """Raised by a deployment probe when the status source cannot be read."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status
        self.kind = classify_status(status)


class DeploymentGuard:
    """Waits for an in-flight deployment before running a generation action.

    The guard never blocks forever and never fails the caller: probe failures
    count as ``unknown`` and a wait that exceeds ``max_wait`` proceeds anyway.
    Only errors raised by the action itself propagate.
    """

    DEFAULT_MAX_WAIT = 300.0
    DEFAULT_INTERVAL = 10.0

    def __init__(
        self,
        *,
        max_wait: float = DEFAULT_MAX_WAIT,
        interval: float = DEFAULT_INTERVAL,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        if max_wait < 0:
            raise ValueError("max_wait must not be negative")
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.max_wait = float(max_wait)
        self.interval = min(float(interval), self.max_wait / 10)
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep
        self.logger = get_logger("guard")

    def run_exclusive(self, probe: DeploymentProbe, action: Callable[[], T]) -> T:
        """Invoke ``action`` once no conflicting deployment is believed active."""
        if self.check(probe) is DeploymentState.IN_PROGRESS:
            self.wait_for_completion(probe)
        self.logger.info("Starting site generation after deployment check")
        return action()

    def check(self, probe: DeploymentProbe) -> DeploymentState:
        """Return the probed deployment state, mapping failures to ``unknown``."""
        try:
            state = probe()
        except StatusProbeError as exc:
            self._log_probe_failure(exc)
            return DeploymentState.UNKNOWN
        except Exception as exc:
            self.logger.warning(
                "Failed to check deployment status, proceeding anyway: %s", exc
            )
            return DeploymentState.UNKNOWN
        self.logger.debug("Latest deployment state: %s", state.value)
        return state

    def wait_for_completion(self, probe: DeploymentProbe) -> bool:
        """Poll until the deployment leaves ``in_progress``.

        Returns False when the wait budget ran out first.
        """
        self.logger.info("Waiting for previous deployment to complete")
        start = self._clock()
        while True:
            remaining = self.max_wait - (self._clock() - start)
            if remaining <= 0:
                break
            delay = min(self.interval, remaining)
            self.logger.info("Deployment still in progress, waiting %.1fs", delay)
            self._sleep(delay)
            state = self.check(probe)
            if state is not DeploymentState.IN_PROGRESS:
                self.logger.info("Previous deployment finished (%s), proceeding", state.value)
                return True

        self.logger.warning(
            "Timed out after %.0fs waiting for deployment completion; a deployment may "
            "still be in progress. Proceeding anyway.",
            self.max_wait,
        )
        return False

    def _log_probe_failure(self, exc: StatusProbeError) -> None:
        if exc.kind is ProbeErrorKind.AUTH:
            self.logger.error(
                "Authentication or permission error checking deployment status "
                "(status %s); proceeding without deployment check: %s",
                exc.status,
                exc,
            )
        elif exc.kind is ProbeErrorKind.RATE_LIMITED:
            self.logger.warning("Rate limited while checking deployment status, proceeding: %s", exc)
        elif exc.kind is ProbeErrorKind.TRANSIENT:
            self.logger.warning(
                "Transient error (status %s) checking deployment status, proceeding: %s",
                exc.status,
                exc,
            )
        else:
            self.logger.warning(
                "Failed to check deployment status (status %s), proceeding anyway: %s",
                exc.status,
                exc,
            )


__all__ = [
    "DeploymentGuard",
    "DeploymentProbe",
    "ProbeErrorKind",
    "StatusProbeError",
    "classify_status",
]
