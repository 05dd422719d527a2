"""Generation trigger decisions for pushes and comment commands."""

from .commands import CommentCommand, decide_on_comment, help_message, parse_comment_command
from .events import event_from_push_payload
from .merge import decide_on_pr_merge
from .policy import COMMIT_MARKER, TriggerPolicy, is_self_generated_push

__all__ = [
    "COMMIT_MARKER",
    "CommentCommand",
    "TriggerPolicy",
    "decide_on_comment",
    "decide_on_pr_merge",
    "event_from_push_payload",
    "help_message",
    "is_self_generated_push",
    "parse_comment_command",
]
