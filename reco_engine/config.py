"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``RECO_ENGINE_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

Engines, the precompute module and CLI commands receive an ``AppConfig``
instance (or one of its sections) — never raw dicts or env lookups.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class EngineConfig(BaseModel):
    """Scoring-unit selection and dispatch settings."""

    model_config = ConfigDict(frozen=True)

    units: list[str] = ["friends_in_common", "random_people"]
    default_limit: int = 10
    parallel: bool = False
    max_workers: int = 4
    timeout_seconds: Optional[float] = None
    early_termination: bool = True
    lock_stripes: int = 16

    @field_validator("units")
    @classmethod
    def validate_units(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("engine.units must name at least one scoring unit.")
        return v

    @field_validator("default_limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"default_limit must be >= 0, got {v}.")
        return v

    @field_validator("max_workers", "lock_stripes")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Value must be >= 1, got {v}.")
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError(f"timeout_seconds must be > 0 when set, got {v}.")
        return v


class PrecomputeConfig(BaseModel):
    """Background precomputation cadence and batch sizing."""

    model_config = ConfigDict(frozen=True)

    initial_delay_seconds: float = 5.0
    delay_seconds: float = 60.0
    batch_size: int = 100
    max_recommendations: int = 10

    @field_validator("initial_delay_seconds", "delay_seconds")
    @classmethod
    def validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"Delay must be >= 0, got {v}.")
        return v

    @field_validator("batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"batch_size must be >= 1, got {v}.")
        return v

    @field_validator("max_recommendations")
    @classmethod
    def validate_max(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"max_recommendations must be >= 0, got {v}.")
        return v


class CacheConfig(BaseModel):
    """Precomputed-recommendation cache backend."""

    model_config = ConfigDict(frozen=True)

    backend: str = "sqlite"
    db_path: str = "data/db/reco_engine.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        valid = {"memory", "sqlite"}
        if v.lower() not in valid:
            raise ValueError(f"Cache backend must be one of {sorted(valid)}, got '{v}'.")
        return v.lower()

    @field_validator("db_path")
    @classmethod
    def validate_db_path(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("cache db_path must not be empty.")
        if v.strip() == ":memory:":
            raise ValueError(
                "cache db_path ':memory:' would not survive between calls; "
                "use backend = \"memory\" instead."
            )
        return v


class DataConfig(BaseModel):
    """Filesystem paths for input data and reports."""

    model_config = ConfigDict(frozen=True)

    graph_file: str = "config/people.json"
    report_dir: str = "data/outputs/recommendations"


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/reco_engine.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    engine: EngineConfig = EngineConfig()
    precompute: PrecomputeConfig = PrecomputeConfig()
    cache: CacheConfig = CacheConfig()
    data: DataConfig = DataConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent

_TRUTHY = ("1", "true", "yes")


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            raw = _deep_merge(raw, tomllib.load(f))

    raw = _apply_env_overrides(raw)
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply RECO_ENGINE_* env vars to the raw config dict.

    Supported overrides:
      RECO_ENGINE_DB_PATH        → raw["cache"]["db_path"]
      RECO_ENGINE_CACHE_BACKEND  → raw["cache"]["backend"]
      RECO_ENGINE_LOG_LEVEL      → raw["logging"]["level"]
      RECO_ENGINE_PARALLEL       → raw["engine"]["parallel"]
      RECO_ENGINE_DEBUG          → raw["debug"]
    """
    if db_path := os.environ.get("RECO_ENGINE_DB_PATH"):
        raw.setdefault("cache", {})["db_path"] = db_path

    if backend := os.environ.get("RECO_ENGINE_CACHE_BACKEND"):
        raw.setdefault("cache", {})["backend"] = backend

    if log_level := os.environ.get("RECO_ENGINE_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if parallel := os.environ.get("RECO_ENGINE_PARALLEL"):
        raw.setdefault("engine", {})["parallel"] = parallel.lower() in _TRUTHY

    if debug := os.environ.get("RECO_ENGINE_DEBUG"):
        raw["debug"] = debug.lower() in _TRUTHY

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        engine=EngineConfig(**raw.get("engine", {})),
        precompute=PrecomputeConfig(**raw.get("precompute", {})),
        cache=CacheConfig(**raw.get("cache", {})),
        data=DataConfig(**raw.get("data", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
