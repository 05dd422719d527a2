"""Configuration loading for sitegen (.sitegen.yml)."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .models import MAX_SCORE, MIN_SCORE, MergeTriggerConfig, RefinementConfig, TriggerConfig

CONFIG_FILENAME = ".sitegen.yml"
TRIGGER_MODES = ("auto", "manual")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class TriggerSettings:
    """Push and pull request trigger settings from .sitegen.yml."""

    enabled: bool = True
    mode: str = "auto"
    branches: List[str] = field(default_factory=list)
    ignore_paths: List[str] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)

    def to_trigger_config(self) -> TriggerConfig:
        return TriggerConfig(
            enabled=self.enabled,
            target_branches=frozenset(self.branches),
            ignored_path_prefixes=frozenset(self.ignore_paths),
        )

    def to_merge_config(self) -> MergeTriggerConfig:
        return MergeTriggerConfig(
            manual=self.mode == "manual",
            allowed_branches=frozenset(self.branches),
            required_labels=frozenset(self.labels),
        )


@dataclass
class RefineSettings:
    """Refinement loop bounds."""

    max_iterations: int = 3
    target_score: int = 8
    requirements: str = ""

    def to_refinement_config(
        self, *, project_name: str = "", project_description: str = ""
    ) -> RefinementConfig:
        return RefinementConfig(
            max_iterations=self.max_iterations,
            target_score=self.target_score,
            project_name=project_name,
            project_description=project_description,
            requirements=self.requirements,
        )


@dataclass
class GuardSettings:
    """Deployment wait budget, in seconds."""

    max_wait: float = 300.0
    interval: float = 10.0


@dataclass
class LLMConfig:
    """LLM client settings."""

    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    request_timeout: Optional[float] = None


@dataclass
class DeploymentSettings:
    """Where the generated site is deployed."""

    repository: Optional[str] = None
    environment: str = "github-pages"


@dataclass
class SiteGenConfig:
    """Represents the settings defined in .sitegen.yml."""

    root: Path
    trigger: TriggerSettings = field(default_factory=TriggerSettings)
    refine: RefineSettings = field(default_factory=RefineSettings)
    guard: GuardSettings = field(default_factory=GuardSettings)
    llm: Optional[LLMConfig] = None
    deployment: DeploymentSettings = field(default_factory=DeploymentSettings)


def load_config(config_path: Path) -> SiteGenConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SiteGenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    trigger_data = _as_dict(data.get("trigger"))
    mode = (_as_str(trigger_data.get("mode")) or "auto").strip().lower()
    if mode not in TRIGGER_MODES:
        raise ConfigError(f"trigger.mode must be one of: {', '.join(TRIGGER_MODES)}")
    trigger = TriggerSettings(
        enabled=_as_bool(trigger_data.get("enabled"), default=True),
        mode=mode,
        branches=_as_str_list(trigger_data.get("branches")),
        ignore_paths=_as_str_list(trigger_data.get("ignore_paths")),
        labels=_as_str_list(trigger_data.get("labels")),
    )

    refine_data = _as_dict(data.get("refine"))
    refine = RefineSettings()
    max_iterations = _as_int(refine_data.get("max_iterations"))
    if max_iterations is not None:
        refine.max_iterations = max(0, max_iterations)
    target_score = _as_int(refine_data.get("target_score"))
    if target_score is not None:
        refine.target_score = min(MAX_SCORE, max(MIN_SCORE, target_score))
    refine.requirements = _as_str(refine_data.get("requirements")) or ""

    guard_data = _as_dict(data.get("guard"))
    guard = GuardSettings()
    max_wait = _as_float(guard_data.get("max_wait"))
    if max_wait is not None and max_wait >= 0:
        guard.max_wait = max_wait
    interval = _as_float(guard_data.get("interval"))
    if interval is not None and interval > 0:
        guard.interval = interval

    llm_data = _as_dict(data.get("llm"))
    llm = None
    if llm_data:
        llm = LLMConfig(
            model=_as_str(llm_data.get("model")),
            base_url=_as_str(llm_data.get("base_url")),
            api_key=_as_str(llm_data.get("api_key")),
            temperature=_as_float(llm_data.get("temperature")),
            max_tokens=_as_int(llm_data.get("max_tokens")),
            request_timeout=_as_float(llm_data.get("request_timeout")),
        )

    deployment_data = _as_dict(data.get("deployment"))
    deployment = DeploymentSettings(
        repository=_as_str(deployment_data.get("repository")),
        environment=_as_str(deployment_data.get("environment")) or "github-pages",
    )

    return SiteGenConfig(
        root=root,
        trigger=trigger,
        refine=refine,
        guard=guard,
        llm=llm,
        deployment=deployment,
    )


def render_config(config: SiteGenConfig) -> str:
    """Render the effective settings as a markdown YAML block, without secrets."""
    settings: Dict[str, Any] = {
        "trigger": asdict(config.trigger),
        "refine": asdict(config.refine),
        "guard": asdict(config.guard),
        "deployment": asdict(config.deployment),
    }
    if config.llm is not None:
        llm = {key: value for key, value in asdict(config.llm).items() if value is not None}
        if "api_key" in llm:
            llm["api_key"] = "***"
        settings["llm"] = llm
    body = yaml.safe_dump(settings, sort_keys=False, default_flow_style=False)
    return f"## sitegen configuration\n\n```yaml\n{body}```"


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return default


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []
