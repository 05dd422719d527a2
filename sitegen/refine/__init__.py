"""Evaluate-and-refine loop and its LLM judge."""

from .engine import RefinementEngine
from .judge import LLMJudge, MalformedResponseError, parse_evaluation

__all__ = ["LLMJudge", "MalformedResponseError", "RefinementEngine", "parse_evaluation"]
