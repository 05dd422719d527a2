"""Bounded evaluate/improve loop for LLM-generated artifacts."""

from __future__ import annotations

from typing import Callable

from ..logging import get_logger
from ..models import NEUTRAL_SCORE, EvaluationResult, RefinementConfig, RefinementResult

Evaluate = Callable[[str], EvaluationResult]
Improve = Callable[[str, EvaluationResult], str]


class RefinementEngine:
    """Iteratively improves an artifact until it meets the target score.

    ``max_iterations`` is a hard cap: one run makes at most ``max_iterations``
    improve calls and ``max_iterations + 1`` evaluate calls. ``target_score``
    only ends the loop early. Errors from either callable abort the run and
    propagate unchanged.
    """

    def __init__(self) -> None:
        self.logger = get_logger("refine")

    def refine(
        self,
        initial: str,
        config: RefinementConfig,
        evaluate: Evaluate,
        improve: Improve,
    ) -> RefinementResult:
        current = initial
        evaluation = evaluate(current)
        iterations = 0
        self.logger.info(
            "Initial evaluation: %d/10 (target %d/10)", evaluation.score, config.target_score
        )

        while iterations < config.max_iterations and evaluation.score < config.target_score:
            self.logger.info("Refinement iteration %d/%d", iterations + 1, config.max_iterations)
            for item in evaluation.improvements:
                self.logger.debug("Requested improvement: %s", item)
            current = improve(current, evaluation)
            evaluation = evaluate(current)
            iterations += 1
            self.logger.info("Iteration %d score: %d/10", iterations, evaluation.score)

        if evaluation.score >= config.target_score:
            self.logger.info("Refinement complete, final score %d/10", evaluation.score)
        else:
            self.logger.info(
                "Refinement stopped at %d/10 after %d iteration(s) (target was %d)",
                evaluation.score,
                iterations,
                config.target_score,
            )

        return RefinementResult(
            artifact=current,
            evaluation=evaluation,
            iterations=iterations,
            improved=evaluation.score > NEUTRAL_SCORE,
        )


__all__ = ["Evaluate", "Improve", "RefinementEngine"]
