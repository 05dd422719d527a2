"""Per-event orchestration: trigger decision, deployment guard, generation, refinement."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from .config import ConfigError, SiteGenConfig, render_config
from .deployments import GitHubDeploymentProbe
from .guard import DeploymentGuard, DeploymentProbe
from .llm.runner import LLMRunner
from .logging import get_logger
from .models import (
    GenerationType,
    MergeTriggerConfig,
    RefinementConfig,
    RefinementResult,
    TriggerDecision,
    TriggerEvent,
    TriggerType,
)
from .refine.engine import RefinementEngine
from .refine.judge import LLMJudge
from .trigger.commands import decide_on_comment, help_message, parse_comment_command
from .trigger.merge import decide_on_pr_merge
from .trigger.policy import COMMIT_MARKER, TriggerPolicy, is_self_generated_push

SiteGenerator = Callable[[TriggerDecision], str]


@dataclass
class PipelineOutcome:
    """Result of handling one triggering event.

    ``reply`` holds text to post back for informational comment commands.
    """

    decision: TriggerDecision
    artifact: Optional[str] = None
    refinement: Optional[RefinementResult] = None
    reply: Optional[str] = None

    @property
    def generated(self) -> bool:
        return self.artifact is not None


class SitePipeline:
    """Coordinates site generation for push, comment and pull request merge events."""

    def __init__(
        self,
        generator: SiteGenerator,
        probe: DeploymentProbe,
        *,
        runner: LLMRunner | None = None,
        guard: DeploymentGuard | None = None,
        policy: TriggerPolicy | None = None,
        engine: RefinementEngine | None = None,
        merge_config: MergeTriggerConfig | None = None,
        config: SiteGenConfig | None = None,
    ) -> None:
        self.generator = generator
        self.probe = probe
        self.runner = runner
        self.guard = guard or DeploymentGuard()
        self.policy = policy or TriggerPolicy()
        self.engine = engine or RefinementEngine()
        self.merge_config = merge_config or MergeTriggerConfig()
        self.config = config
        self.logger = get_logger("pipeline")

    @classmethod
    def from_config(
        cls,
        config: SiteGenConfig,
        generator: SiteGenerator,
        *,
        probe: DeploymentProbe | None = None,
        runner: LLMRunner | None = None,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> "SitePipeline":
        """Wire a pipeline from .sitegen.yml settings.

        The deployment probe comes from ``deployment.repository`` unless one is
        passed in. The LLM runner is only built when an ``llm`` section exists.
        """
        if probe is None:
            if not config.deployment.repository:
                raise ConfigError("deployment.repository is required to check deployments")
            probe = GitHubDeploymentProbe(
                config.deployment.repository, environment=config.deployment.environment
            )
        if runner is None and config.llm is not None:
            runner = LLMRunner.from_config(config.llm)
        guard = DeploymentGuard(
            max_wait=config.guard.max_wait,
            interval=config.guard.interval,
            clock=clock,
            sleep=sleep,
        )
        return cls(
            generator,
            probe,
            runner=runner,
            guard=guard,
            merge_config=config.trigger.to_merge_config(),
            config=config,
        )

    def handle_push(
        self, event: TriggerEvent, refine_config: RefinementConfig | None = None
    ) -> PipelineOutcome:
        """Decide on a push and, when triggered, generate under the deployment guard."""
        self.logger.info("Push received for branch %s", event.branch_name)
        if is_self_generated_push(event.commits):
            decision = TriggerDecision(
                should_generate=False,
                trigger_type=TriggerType.AUTO,
                generation_type=GenerationType.FULL,
                reason="Self-generated push",
            )
            self.logger.info("Skipping generation: %s", decision.reason)
            return PipelineOutcome(decision=decision)

        decision = self.policy.decide(event)
        return self._run(decision, refine_config)

    def handle_comment(
        self, body: str, refine_config: RefinementConfig | None = None
    ) -> PipelineOutcome:
        """Decide on a comment command and generate when it requests a run."""
        decision = decide_on_comment(body)
        command = parse_comment_command(body)
        if command is not None and command.action == "help":
            return PipelineOutcome(decision=decision, reply=help_message())
        if command is not None and command.action == "config":
            config = self.config or SiteGenConfig(root=Path.cwd())
            return PipelineOutcome(decision=decision, reply=render_config(config))
        return self._run(decision, refine_config)

    def handle_pr_merge(
        self,
        base_branch: str,
        labels: Iterable[str] = (),
        refine_config: RefinementConfig | None = None,
    ) -> PipelineOutcome:
        """Decide on a merged pull request and generate when the settings allow it."""
        self.logger.info("Pull request merged into %s", base_branch)
        return self._run(decide_on_pr_merge(base_branch, labels, self.merge_config), refine_config)

    # ------------------------------------------------------------------
    # Internals

    def _run(
        self, decision: TriggerDecision, refine_config: RefinementConfig | None
    ) -> PipelineOutcome:
        if not decision.should_generate:
            self.logger.info("Skipping generation: %s", decision.reason)
            return PipelineOutcome(decision=decision)

        self.logger.info(
            "Generation triggered (%s, %s): %s",
            decision.trigger_type.value,
            decision.generation_type.value,
            decision.reason,
        )
        started = time.monotonic()
        try:
            outcome = self.guard.run_exclusive(
                self.probe, lambda: self._generate(decision, refine_config)
            )
        except Exception as exc:
            self._log_exception(
                f"Site generation failed after {time.monotonic() - started:.1f}s", exc
            )
            raise
        self.logger.info("Site generated in %.1fs", time.monotonic() - started)
        return outcome

    def _generate(
        self, decision: TriggerDecision, refine_config: RefinementConfig | None
    ) -> PipelineOutcome:
        artifact = self.generator(decision)
        if refine_config is None or self.runner is None:
            return PipelineOutcome(decision=decision, artifact=artifact)

        judge = LLMJudge(self.runner, refine_config)
        result = self.engine.refine(artifact, refine_config, judge.evaluate, judge.improve)
        self.logger.info(
            "Refinement finished: score %d/10 after %d iteration(s), improved=%s",
            result.evaluation.score,
            result.iterations,
            result.improved,
        )
        return PipelineOutcome(decision=decision, artifact=result.artifact, refinement=result)

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


def commit_message(summary: str) -> str:
    """Return a commit message that will not retrigger generation."""
    return f"{summary.rstrip()} {COMMIT_MARKER}"


__all__ = ["PipelineOutcome", "SiteGenerator", "SitePipeline", "commit_message"]
