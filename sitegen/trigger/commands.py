"""Comment command parsing for manually requested generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from ..models import GenerationType, TriggerDecision, TriggerType

COMMAND_PREFIX = "@sitegen"

COMMANDS: Sequence[str] = ("generate", "preview", "config", "help")

_COMMAND_HELP = {
    "generate": "Generate or update the site",
    "preview": "Generate a lightweight preview",
    "config": "Show the effective configuration",
    "help": "Show this help message",
}


@dataclass(frozen=True)
class CommentCommand:
    """A parsed ``@sitegen`` command and its ``--key[=value]`` options."""

    action: str
    options: Dict[str, str] = field(default_factory=dict)

    @property
    def command(self) -> str:
        return f"{COMMAND_PREFIX} {self.action}"


def parse_comment_command(body: Optional[str]) -> Optional[CommentCommand]:
    """Parse the leading ``@sitegen <action>`` command from a comment body."""
    if not body:
        return None
    parts = body.strip().split()
    if len(parts) < 2 or parts[0].lower() != COMMAND_PREFIX:
        return None
    action = parts[1].lower()
    if action not in COMMANDS:
        return None

    options: Dict[str, str] = {}
    for part in parts[2:]:
        if not part.startswith("--"):
            continue
        key, _, value = part[2:].partition("=")
        if key:
            options[key] = value or "true"
    return CommentCommand(action=action, options=options)


def decide_on_comment(body: Optional[str]) -> TriggerDecision:
    """Turn a comment into a manual generation decision."""
    command = parse_comment_command(body)
    if command is None:
        return _manual(False, GenerationType.FULL, "No valid command found")
    if command.action == "generate":
        return _manual(True, GenerationType.FULL, f"Comment command: {command.command}")
    if command.action == "preview":
        return _manual(True, GenerationType.PREVIEW, f"Preview command: {command.command}")
    return _manual(False, GenerationType.FULL, "Non-generation command")


def help_message() -> str:
    """Render the markdown table of supported comment commands."""
    lines = [
        "## sitegen commands",
        "",
        "| Command | Description |",
        "|---------|-------------|",
    ]
    for action in COMMANDS:
        lines.append(f"| `{COMMAND_PREFIX} {action}` | {_COMMAND_HELP[action]} |")
    lines.extend(["", "Options use `--key=value`, for example `@sitegen generate --force`."])
    return "\n".join(lines)


def _manual(should_generate: bool, generation_type: GenerationType, reason: str) -> TriggerDecision:
    return TriggerDecision(
        should_generate=should_generate,
        trigger_type=TriggerType.MANUAL,
        generation_type=generation_type,
        reason=reason,
    )


__all__ = ["COMMAND_PREFIX", "CommentCommand", "decide_on_comment", "help_message", "parse_comment_command"]
