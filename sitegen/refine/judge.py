"""LLM-as-judge evaluation and feedback-driven regeneration."""

from __future__ import annotations

import json
from typing import Any, List, Optional

from ..llm.runner import LLMRunner
from ..logging import get_logger
from ..models import EvaluationResult, RefinementConfig
from ..normalize import FenceKind, strip_fence, to_score

EVALUATE_TEMPERATURE = 0.3
IMPROVE_TEMPERATURE = 0.7

_EVALUATE_CHARS = 8000
_IMPROVE_CHARS = 10000
_EXCERPT_CHARS = 200

_EVALUATION_PROMPT = """You are an expert web design evaluator. Evaluate this landing page HTML for a project called "{name}".

PROJECT CONTEXT:
{description}

HTML TO EVALUATE:
{html}

EVALUATION CRITERIA:
1. Visual Design (colors, typography, spacing, modern aesthetics)
2. Content Quality (clear messaging, compelling copy, professional tone)
3. User Experience (navigation, readability, call-to-action clarity)
4. Technical Quality (semantic HTML, responsive design, accessibility)
5. Brand Alignment (matches project purpose and audience)

Respond with JSON only (no markdown, no code blocks):
{{
  "score": 7,
  "feedback": "Overall assessment in 2-3 sentences",
  "strengths": ["strength1", "strength2"],
  "improvements": ["specific improvement 1", "specific improvement 2"]
}}

Score 1-10 where 1-3 is poor, 4-5 below average, 6-7 acceptable, 8-9 high quality and 10 production-ready."""

_IMPROVE_PROMPT = """You are improving a landing page HTML. The current version was evaluated and received feedback.

PROJECT: {name}
DESCRIPTION: {description}

CURRENT EVALUATION:
- Score: {score}/10
- Feedback: {feedback}
- Areas to improve:
{improvements}

ORIGINAL REQUIREMENTS:
{requirements}

CURRENT HTML:
{html}

TASK: Regenerate the complete HTML page addressing ALL the improvement areas listed above.
Keep what works well but significantly improve the weak areas.

OUTPUT: Return ONLY the complete HTML document starting with <!DOCTYPE html>."""


class MalformedResponseError(RuntimeError):
    """Raised when model output cannot be turned into the expected structure."""

    def __init__(self, message: str, raw: Optional[str]) -> None:
        self.excerpt = (raw or "")[:_EXCERPT_CHARS]
        super().__init__(f"{message}. Response starts with: {self.excerpt!r}")


def parse_evaluation(raw: Optional[str]) -> EvaluationResult:
    """Decode a judge response into an EvaluationResult."""
    cleaned = strip_fence(raw, FenceKind.JSON)
    if not cleaned:
        raise MalformedResponseError("Empty evaluation response", raw)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Evaluation response is not valid JSON ({exc.msg})", raw) from exc
    if not isinstance(parsed, dict):
        raise MalformedResponseError("Evaluation response must be a JSON object", raw)

    return EvaluationResult(
        score=to_score(parsed.get("score")),
        feedback=str(parsed.get("feedback") or "No feedback provided"),
        strengths=tuple(_as_text_list(parsed.get("strengths"))),
        improvements=tuple(_as_text_list(parsed.get("improvements"))),
    )


class LLMJudge:
    """Supplies the evaluate and improve steps of the refinement loop."""

    def __init__(self, runner: LLMRunner, config: RefinementConfig) -> None:
        self.runner = runner
        self.config = config
        self.logger = get_logger("judge")

    def evaluate(self, html: str) -> EvaluationResult:
        prompt = _EVALUATION_PROMPT.format(
            name=self.config.project_name,
            description=self.config.project_description,
            html=html[:_EVALUATE_CHARS],
        )
        raw = self.runner.complete(prompt, EVALUATE_TEMPERATURE)
        evaluation = parse_evaluation(raw)
        self.logger.debug("Judge feedback: %s", evaluation.feedback)
        return evaluation

    def improve(self, html: str, evaluation: EvaluationResult) -> str:
        numbered = "\n".join(
            f"{index}. {item}" for index, item in enumerate(evaluation.improvements, start=1)
        )
        prompt = _IMPROVE_PROMPT.format(
            name=self.config.project_name,
            description=self.config.project_description,
            score=evaluation.score,
            feedback=evaluation.feedback,
            improvements=numbered or "(none listed)",
            requirements=self.config.requirements,
            html=html[:_IMPROVE_CHARS],
        )
        raw = self.runner.complete(prompt, IMPROVE_TEMPERATURE)
        improved = strip_fence(raw, FenceKind.HTML)
        if not improved:
            raise MalformedResponseError("Improvement response contained no HTML", raw)
        return improved


def _as_text_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


__all__ = ["LLMJudge", "MalformedResponseError", "parse_evaluation"]
