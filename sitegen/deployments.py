"""Deployment status lookup through the GitHub CLI."""

from __future__ import annotations

import json
import re
import subprocess
from typing import Any, Callable, Iterable, List, Optional

from .guard import StatusProbeError
from .logging import get_logger
from .models import DeploymentState

_HTTP_STATUS = re.compile(r"HTTP (\d{3})")

_IN_PROGRESS_STATES = {"pending", "queued", "in_progress"}


class GitHubDeploymentProbe:
    """Reports the state of the latest deployment of a repository environment.

    Callable with no arguments so it can be handed straight to the guard.
    """

    def __init__(
        self,
        repository: str,
        *,
        environment: str = "github-pages",
        runner: Callable[..., str] | None = None,
    ) -> None:
        self.repository = repository
        self.environment = environment
        self._runner = runner or self._default_runner
        self.logger = get_logger("deployments")

    def __call__(self) -> DeploymentState:
        deployments = self._api(
            f"repos/{self.repository}/deployments?environment={self.environment}&per_page=1"
        )
        if not deployments:
            return DeploymentState.NONE

        deployment_id = deployments[0].get("id") if isinstance(deployments[0], dict) else None
        if deployment_id is None:
            raise StatusProbeError("Deployment listing did not include an id")

        statuses = self._api(
            f"repos/{self.repository}/deployments/{deployment_id}/statuses?per_page=1"
        )
        if not statuses:
            # A deployment without any status has not finished yet.
            return DeploymentState.IN_PROGRESS

        latest = statuses[0] if isinstance(statuses[0], dict) else {}
        state = str(latest.get("state", "")).lower()
        self.logger.info("Latest deployment status: %s", state or "(empty)")
        if state in _IN_PROGRESS_STATES:
            return DeploymentState.IN_PROGRESS
        return DeploymentState.COMPLETE

    # ------------------------------------------------------------------
    # Helpers

    def _api(self, endpoint: str) -> List[Any]:
        args = ["gh", "api", "-H", "Accept: application/vnd.github+json", endpoint]
        try:
            output = self._runner(args, capture_output=True)
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip()
            raise StatusProbeError(
                f"gh api {endpoint} failed: {detail or exc.returncode}",
                status=_parse_status(detail),
            ) from exc
        except FileNotFoundError as exc:
            raise StatusProbeError("Unable to locate 'gh'. Install the GitHub CLI.") from exc

        try:
            payload = json.loads(output or "[]")
        except json.JSONDecodeError as exc:
            raise StatusProbeError(f"gh api {endpoint} returned invalid JSON") from exc
        if not isinstance(payload, list):
            raise StatusProbeError(f"gh api {endpoint} returned {type(payload).__name__}, expected list")
        return payload

    @staticmethod
    def _default_runner(args: Iterable[str], *, capture_output: bool = False) -> str:
        completed = subprocess.run(
            list(args),
            check=True,
            text=True,
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


def _parse_status(detail: str) -> Optional[int]:
    match = _HTTP_STATUS.search(detail)
    return int(match.group(1)) if match else None


__all__ = ["GitHubDeploymentProbe"]
