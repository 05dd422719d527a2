"""Tests for the refinement loop."""

from __future__ import annotations

import pytest

from sitegen.models import EvaluationResult, RefinementConfig
from sitegen.refine.engine import RefinementEngine
from sitegen.refine.judge import MalformedResponseError
from tests._fixtures.fakes import ScriptedJudge


def _refine(scores, **config):
    judge = ScriptedJudge(scores)
    result = RefinementEngine().refine(
        "<html>v0</html>", RefinementConfig(**config), judge.evaluate, judge.improve
    )
    return result, judge


def test_stops_once_target_reached() -> None:
    result, judge = _refine([4, 6, 9], max_iterations=3, target_score=8)

    assert len(judge.improve_calls) == 2
    assert result.iterations == 2
    assert result.evaluation.score == 9
    assert result.improved is True
    assert result.artifact == "<html>v2</html>"


def test_stops_at_iteration_cap() -> None:
    result, judge = _refine([5], max_iterations=2, target_score=10)

    assert len(judge.improve_calls) == 2
    assert len(judge.evaluated) == 3
    assert result.iterations == 2
    assert result.evaluation.score == 5
    assert result.improved is False


def test_zero_iterations_evaluates_once() -> None:
    result, judge = _refine([2], max_iterations=0, target_score=8)

    assert judge.evaluated == ["<html>v0</html>"]
    assert judge.improve_calls == []
    assert result.iterations == 0
    assert result.artifact == "<html>v0</html>"


def test_initial_score_meeting_target_skips_improve() -> None:
    result, judge = _refine([8], max_iterations=5, target_score=8)

    assert judge.improve_calls == []
    assert result.iterations == 0
    assert result.improved is True


def test_improved_uses_fixed_baseline() -> None:
    below_target, _ = _refine([6], max_iterations=1, target_score=9)
    met_low_target, _ = _refine([3], max_iterations=0, target_score=2)

    assert below_target.improved is True
    assert met_low_target.improved is False


def test_improve_receives_latest_evaluation() -> None:
    _, judge = _refine([3, 4, 9], max_iterations=3, target_score=8)

    seen = [(artifact, evaluation.score) for artifact, evaluation in judge.improve_calls]
    assert seen == [("<html>v0</html>", 3), ("<html>v1</html>", 4)]


def test_final_artifact_is_latest_even_if_score_dropped() -> None:
    result, _ = _refine([6, 4], max_iterations=1, target_score=8)

    assert result.artifact == "<html>v1</html>"
    assert result.evaluation.score == 4


@pytest.mark.parametrize("max_iterations", [0, 1, 2, 5])
def test_iterations_never_exceed_cap(max_iterations) -> None:
    result, judge = _refine([1], max_iterations=max_iterations, target_score=10)

    assert result.iterations == max_iterations
    assert len(judge.evaluated) == max_iterations + 1


def test_evaluate_errors_abort_the_loop() -> None:
    judge = ScriptedJudge([3])
    evaluations = []

    def evaluate(artifact: str) -> EvaluationResult:
        if evaluations:
            raise MalformedResponseError("Evaluation response is not valid JSON", "oops")
        evaluations.append(artifact)
        return judge.evaluate(artifact)

    with pytest.raises(MalformedResponseError):
        RefinementEngine().refine(
            "<html/>", RefinementConfig(max_iterations=3, target_score=8), evaluate, judge.improve
        )
    assert len(judge.improve_calls) == 1


def test_improve_errors_propagate() -> None:
    def improve(artifact: str, evaluation: EvaluationResult) -> str:
        raise RuntimeError("LLM request failed with status 500")

    judge = ScriptedJudge([2])
    with pytest.raises(RuntimeError, match="status 500"):
        RefinementEngine().refine("<html/>", RefinementConfig(), judge.evaluate, improve)
