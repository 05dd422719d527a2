"""Normalisation helpers for raw LLM output."""

from __future__ import annotations

import math
import numbers
from enum import Enum
from typing import Any, Optional, Union

from .models import MAX_SCORE, MIN_SCORE, NEUTRAL_SCORE

_FENCE = "```"


class FenceKind(str, Enum):
    """Payload kinds an LLM may wrap in a fenced code block."""

    JSON = "json"
    HTML = "html"


def to_score(raw: Any) -> int:
    """Coerce an arbitrary judge value into an integer score within 1..10.

    Missing, blank and non-numeric values fall back to the neutral score.
    Numbers are rounded half-up and clamped. Never raises.
    """
    if raw is None:
        return NEUTRAL_SCORE
    if isinstance(raw, numbers.Integral):
        return min(MAX_SCORE, max(MIN_SCORE, int(raw)))
    if isinstance(raw, numbers.Real):
        try:
            value = float(raw)
        except (OverflowError, ValueError):
            return MAX_SCORE if raw > 0 else MIN_SCORE
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            return NEUTRAL_SCORE
        try:
            value = float(text)
        except ValueError:
            return NEUTRAL_SCORE
    else:
        return NEUTRAL_SCORE

    if math.isnan(value):
        return NEUTRAL_SCORE
    clamped = min(float(MAX_SCORE), max(float(MIN_SCORE), value))
    return int(math.floor(clamped + 0.5))


def strip_fence(raw: Optional[str], kind: Union[FenceKind, str] = FenceKind.JSON) -> str:
    """Remove markdown code fences wrapped around a JSON or HTML payload.

    ``None`` yields an empty string. Text without a fence is returned trimmed.
    Stripping repeats until no fence is left, so the result is a fixed point.
    """
    if not raw:
        return ""
    marker = _FENCE + FenceKind(kind).value
    text = raw.strip()
    while True:
        stripped = _strip_once(text, marker)
        if stripped == text:
            return text
        text = stripped


def _strip_once(text: str, marker: str) -> str:
    if text[: len(marker)].lower() == marker:
        text = text[len(marker):]
    elif text.startswith(_FENCE):
        text = text[len(_FENCE):]
    if text.endswith(_FENCE):
        text = text[: -len(_FENCE)]
    return text.strip()


__all__ = ["FenceKind", "strip_fence", "to_score"]
