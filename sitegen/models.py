"""Core data models shared across sitegen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Tuple

MIN_SCORE = 1
MAX_SCORE = 10
NEUTRAL_SCORE = 5


class TriggerType(str, Enum):
    """How a generation run was requested."""

    AUTO = "auto"
    MANUAL = "manual"


class GenerationType(str, Enum):
    """Scope of the generation run."""

    FULL = "full"
    PREVIEW = "preview"


class DeploymentState(str, Enum):
    """Latest known state of the deployment target."""

    NONE = "none"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class CommitChange:
    """Paths touched by a single commit in a push."""

    added: FrozenSet[str] = frozenset()
    modified: FrozenSet[str] = frozenset()
    removed: FrozenSet[str] = frozenset()
    message: str = ""

    def paths(self) -> FrozenSet[str]:
        return self.added | self.modified | self.removed


@dataclass(frozen=True)
class TriggerConfig:
    """Push trigger settings resolved for one repository."""

    enabled: bool = True
    target_branches: FrozenSet[str] = frozenset()
    ignored_path_prefixes: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class MergeTriggerConfig:
    """Settings for generating on a merged pull request.

    An empty ``allowed_branches`` or ``required_labels`` set disables that check.
    """

    manual: bool = False
    allowed_branches: FrozenSet[str] = frozenset()
    required_labels: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class TriggerEvent:
    """Facts about a push needed to decide on generation."""

    branch_name: str
    default_branch: str
    commits: Tuple[CommitChange, ...] = ()
    config: TriggerConfig = field(default_factory=TriggerConfig)


@dataclass(frozen=True)
class TriggerDecision:
    """Verdict produced by the trigger policy."""

    should_generate: bool
    trigger_type: TriggerType
    generation_type: GenerationType
    reason: str


@dataclass(frozen=True)
class EvaluationResult:
    """Judge verdict for a generated artifact (score is always within 1..10)."""

    score: int
    feedback: str
    strengths: Tuple[str, ...] = ()
    improvements: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not MIN_SCORE <= self.score <= MAX_SCORE:
            raise ValueError(f"score must be within {MIN_SCORE}..{MAX_SCORE}, got {self.score}")


@dataclass(frozen=True)
class RefinementConfig:
    """Bounds and project context for the refinement loop."""

    max_iterations: int = 3
    target_score: int = 8
    project_name: str = ""
    project_description: str = ""
    requirements: str = ""

    def __post_init__(self) -> None:
        if self.max_iterations < 0:
            raise ValueError("max_iterations must not be negative")
        if not MIN_SCORE <= self.target_score <= MAX_SCORE:
            raise ValueError(f"target_score must be within {MIN_SCORE}..{MAX_SCORE}")


@dataclass(frozen=True)
class RefinementResult:
    """Final artifact and evaluation returned by the refinement loop."""

    artifact: str
    evaluation: EvaluationResult
    iterations: int
    improved: bool
