"""Service configuration management helpers."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

_FAILURE_POLICIES = {"keep_last_good", "swap_empty"}


def _str_to_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Invalid integer value: {value}") from exc


def _str_to_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"Invalid float value: {value}") from exc


@dataclass(frozen=True)
class MetricsConfig:
    """Immutable configuration object loaded from env or files."""

    enterprise: str = "github"
    token: Optional[str] = None
    api_base: str = "https://api.github.com"
    api_version: str = "2022-11-28"
    window_days: int = 28
    fetch_batch_size: int = 7
    timeout_seconds: int = 30
    max_retries: int = 3
    backoff_seconds: float = 0.5
    failure_policy: str = "keep_last_good"
    max_prompt_length: int = 20000

    def __post_init__(self) -> None:
        self.validate()

    @classmethod
    def from_env(cls) -> "MetricsConfig":
        defaults = cls()
        return cls(
            enterprise=os.getenv("COPILOT_ENTERPRISE", defaults.enterprise),
            token=os.getenv("GH_TOKEN") or os.getenv("GITHUB_TOKEN") or None,
            api_base=os.getenv("COPILOT_METRICS_API_BASE", defaults.api_base),
            api_version=os.getenv(
                "COPILOT_METRICS_API_VERSION", defaults.api_version
            ),
            window_days=_str_to_int(
                os.getenv("COPILOT_METRICS_WINDOW_DAYS"), defaults.window_days
            ),
            fetch_batch_size=_str_to_int(
                os.getenv("COPILOT_METRICS_FETCH_BATCH_SIZE"),
                defaults.fetch_batch_size,
            ),
            timeout_seconds=_str_to_int(
                os.getenv("COPILOT_METRICS_TIMEOUT_SECONDS"), defaults.timeout_seconds
            ),
            max_retries=_str_to_int(
                os.getenv("COPILOT_METRICS_MAX_RETRIES"), defaults.max_retries
            ),
            backoff_seconds=_str_to_float(
                os.getenv("COPILOT_METRICS_BACKOFF_SECONDS"), defaults.backoff_seconds
            ),
            failure_policy=os.getenv(
                "COPILOT_METRICS_FAILURE_POLICY", defaults.failure_policy
            ),
            max_prompt_length=_str_to_int(
                os.getenv("COPILOT_METRICS_MAX_PROMPT_LENGTH"),
                defaults.max_prompt_length,
            ),
        )

    @classmethod
    def from_file(cls, path: str) -> "MetricsConfig":
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        raw = file_path.read_text()
        data: Dict[str, Any]
        suffix = file_path.suffix.lower()
        if suffix == ".json":
            data = json.loads(raw)
        elif suffix in {".yaml", ".yml"}:
            data = cls._load_yaml(raw)
        else:
            raise ValueError("Unsupported config format. Use JSON or YAML.")
        return cls(**cls._merge_with_defaults(data))

    def validate(self) -> None:
        if not self.enterprise or not self.enterprise.strip():
            raise ValueError("enterprise must be non-empty")
        if self.window_days <= 0:
            raise ValueError("window_days must be greater than zero")
        if self.fetch_batch_size <= 0:
            raise ValueError("fetch_batch_size must be greater than zero")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must be non-negative")
        if self.failure_policy not in _FAILURE_POLICIES:
            raise ValueError(
                f"failure_policy must be one of {sorted(_FAILURE_POLICIES)}"
            )
        if self.max_prompt_length <= 0:
            raise ValueError("max_prompt_length must be greater than zero")

    @classmethod
    def _merge_with_defaults(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        defaults = cls()
        return {
            item.name: data.get(item.name, getattr(defaults, item.name))
            for item in fields(cls)
        }

    @staticmethod
    def _load_yaml(raw: str) -> Dict[str, Any]:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to parse YAML config files") from exc
        return yaml.safe_load(raw) or {}
