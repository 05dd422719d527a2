"""Tests for sitegen.normalize."""

from __future__ import annotations

import pytest

from sitegen.normalize import FenceKind, strip_fence, to_score


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, 5),
        ("abc", 5),
        ("", 5),
        (13, 10),
        (0, 1),
        (7.6, 8),
        (-3, 1),
        (10.5, 10),
        (2.5, 3),
        ("7", 7),
        (" 6.4 ", 6),
        (float("nan"), 5),
        (float("inf"), 10),
        (10**400, 10),
        (-10**400, 1),
        ([7], 5),
        ({"score": 7}, 5),
    ],
)
def test_to_score(raw, expected) -> None:
    assert to_score(raw) == expected


def test_to_score_always_within_range() -> None:
    for raw in (-1e9, -1, 0.49, 1, 5.5, 9.49, 9.5, 11, 1e9, "1e3", "-inf"):
        assert 1 <= to_score(raw) <= 10


def test_strip_fence_removes_json_block() -> None:
    raw = '```json\n{"score": 7}\n```'

    assert strip_fence(raw, FenceKind.JSON) == '{"score": 7}'


def test_strip_fence_removes_html_and_generic_blocks() -> None:
    assert strip_fence("```html\n<!DOCTYPE html><p>x</p>\n```", "html") == "<!DOCTYPE html><p>x</p>"
    assert strip_fence("```\n<p>x</p>\n```", FenceKind.HTML) == "<p>x</p>"
    assert strip_fence("```JSON\n[]\n```", FenceKind.JSON) == "[]"


def test_strip_fence_without_fence_only_trims() -> None:
    assert strip_fence('  {"a": 1}\n') == '{"a": 1}'
    assert strip_fence("<p>open", FenceKind.HTML) == "<p>open"


def test_strip_fence_handles_missing_text() -> None:
    assert strip_fence(None) == ""
    assert strip_fence("") == ""
    assert strip_fence("   ```   ") == ""


@pytest.mark.parametrize(
    "raw",
    [
        '```json\n{"a": 1}\n```',
        "```json\n```json\n{}\n```\n```",
        "```\n```html\n<p/>\n```",
        "plain text",
        "``````",
    ],
)
def test_strip_fence_is_idempotent(raw: str) -> None:
    for kind in FenceKind:
        once = strip_fence(raw, kind)
        assert strip_fence(once, kind) == once
