"""Tests for the LLM judge."""

from __future__ import annotations

import pytest

from sitegen.models import EvaluationResult, RefinementConfig
from sitegen.refine.judge import (
    EVALUATE_TEMPERATURE,
    IMPROVE_TEMPERATURE,
    LLMJudge,
    MalformedResponseError,
    parse_evaluation,
)


class RecordingRunner:
    """Returns canned completions and captures prompts."""

    def __init__(self, *responses: str) -> None:
        self._responses = list(responses)
        self.calls: list[tuple[str, float | None]] = []

    def complete(self, prompt: str, temperature: float | None = None) -> str:
        self.calls.append((prompt, temperature))
        return self._responses.pop(0)


def _config() -> RefinementConfig:
    return RefinementConfig(
        project_name="widgets",
        project_description="A toolkit for widgets.",
        requirements="Hero section with install command.",
    )


def test_parse_evaluation_reads_fenced_json() -> None:
    raw = """```json
{"score": 7.6, "feedback": "Solid", "strengths": ["colors"], "improvements": ["contrast", "cta"]}
```"""

    evaluation = parse_evaluation(raw)

    assert evaluation == EvaluationResult(
        score=8,
        feedback="Solid",
        strengths=("colors",),
        improvements=("contrast", "cta"),
    )


def test_parse_evaluation_applies_defaults() -> None:
    evaluation = parse_evaluation('{"score": "high", "strengths": "many"}')

    assert evaluation.score == 5
    assert evaluation.feedback == "No feedback provided"
    assert evaluation.strengths == ()
    assert evaluation.improvements == ()


def test_parse_evaluation_clamps_score() -> None:
    assert parse_evaluation('{"score": 42}').score == 10
    assert parse_evaluation('{"score": -1}').score == 1


def test_parse_evaluation_clamps_oversized_integer_score() -> None:
    raw = '{"score": 1' + "0" * 400 + ', "feedback": "x"}'

    evaluation = parse_evaluation(raw)

    assert evaluation.score == 10
    assert evaluation.feedback == "x"


@pytest.mark.parametrize("raw", [None, "", "The page looks great, 8/10", "[1, 2]", '{"score": 7'])
def test_parse_evaluation_rejects_malformed_output(raw) -> None:
    with pytest.raises(MalformedResponseError) as excinfo:
        parse_evaluation(raw)

    assert excinfo.value.excerpt == (raw or "")[:200]


def test_malformed_error_excerpt_is_truncated() -> None:
    raw = "x" * 500

    with pytest.raises(MalformedResponseError) as excinfo:
        parse_evaluation(raw)

    assert excinfo.value.excerpt == "x" * 200
    assert "Response starts with" in str(excinfo.value)


def test_evaluate_prompts_with_project_context() -> None:
    runner = RecordingRunner('{"score": 6, "feedback": "ok"}')
    judge = LLMJudge(runner, _config())

    evaluation = judge.evaluate("<!DOCTYPE html>" + "a" * 9000)

    prompt, temperature = runner.calls[0]
    assert evaluation.score == 6
    assert temperature == EVALUATE_TEMPERATURE
    assert 'project called "widgets"' in prompt
    assert "A toolkit for widgets." in prompt
    assert "a" * 9000 not in prompt


def test_improve_lists_feedback_and_strips_fence() -> None:
    runner = RecordingRunner("```html\n<!DOCTYPE html><h1>Better</h1>\n```")
    judge = LLMJudge(runner, _config())
    evaluation = EvaluationResult(score=4, feedback="Bland", improvements=("Add color", "Bigger CTA"))

    improved = judge.improve("<!DOCTYPE html><h1>Old</h1>", evaluation)

    prompt, temperature = runner.calls[0]
    assert improved == "<!DOCTYPE html><h1>Better</h1>"
    assert temperature == IMPROVE_TEMPERATURE
    assert "- Score: 4/10" in prompt
    assert "1. Add color\n2. Bigger CTA" in prompt
    assert "Hero section with install command." in prompt
    assert "<h1>Old</h1>" in prompt


def test_improve_rejects_empty_output() -> None:
    judge = LLMJudge(RecordingRunner("```html\n```"), _config())

    with pytest.raises(MalformedResponseError):
        judge.improve("<html/>", EvaluationResult(score=3, feedback="weak"))
