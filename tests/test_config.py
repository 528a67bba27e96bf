"""
Tests for reco_engine/config.py.

What we test
------------
  - Defaults are valid and frozen.
  - load_config() reads TOML, deep-merges a sibling local.toml, then applies
    RECO_ENGINE_* env overrides.
  - The shipped config/default.toml loads.
  - Missing file -> FileNotFoundError; invalid values -> ValidationError
    (including a ":memory:" or empty cache db_path).
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from reco_engine.config import AppConfig, CacheConfig, EngineConfig, LoggingConfig, load_config

_ENV_VARS = (
    "RECO_ENGINE_DB_PATH",
    "RECO_ENGINE_CACHE_BACKEND",
    "RECO_ENGINE_LOG_LEVEL",
    "RECO_ENGINE_PARALLEL",
    "RECO_ENGINE_DEBUG",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    def test_defaults(self):
        config = AppConfig()
        assert config.engine.units == ["friends_in_common", "random_people"]
        assert config.engine.parallel is False
        assert config.cache.backend == "sqlite"

    def test_frozen(self):
        with pytest.raises(ValidationError):
            AppConfig().engine.parallel = True

    def test_shipped_default_toml_loads(self):
        root = Path(__file__).resolve().parent.parent
        config = load_config(root / "config" / "default.toml")
        assert config.engine.default_limit == 10
        assert config.data.graph_file == "config/people.json"


class TestLoadConfig:
    def test_toml_values(self, tmp_path):
        path = _write(tmp_path / "c.toml", """
[engine]
units = ["friends_in_common"]
parallel = true
timeout_seconds = 1.5

[cache]
backend = "MEMORY"
""")
        config = load_config(path)
        assert config.engine.units == ["friends_in_common"]
        assert config.engine.parallel is True
        assert config.engine.timeout_seconds == 1.5
        assert config.cache.backend == "memory"
        assert config.precompute.batch_size == 100

    def test_local_toml_deep_merged(self, tmp_path):
        path = _write(tmp_path / "default.toml", '[engine]\ndefault_limit = 5\nmax_workers = 2\n')
        _write(tmp_path / "local.toml", '[engine]\nmax_workers = 8\n')
        config = load_config(path)
        assert config.engine.default_limit == 5
        assert config.engine.max_workers == 8

    def test_env_overrides(self, tmp_path, monkeypatch):
        path = _write(tmp_path / "c.toml", '[logging]\nlevel = "INFO"\n')
        monkeypatch.setenv("RECO_ENGINE_DB_PATH", "/tmp/other.db")
        monkeypatch.setenv("RECO_ENGINE_CACHE_BACKEND", "memory")
        monkeypatch.setenv("RECO_ENGINE_LOG_LEVEL", "debug")
        monkeypatch.setenv("RECO_ENGINE_PARALLEL", "yes")
        monkeypatch.setenv("RECO_ENGINE_DEBUG", "1")

        config = load_config(path)

        assert config.cache.db_path == "/tmp/other.db"
        assert config.cache.backend == "memory"
        assert config.logging.level == "DEBUG"
        assert config.engine.parallel is True
        assert config.debug is True

    def test_project_debug(self, tmp_path):
        path = _write(tmp_path / "c.toml", "[project]\ndebug = true\n")
        assert load_config(path).debug is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_invalid_value(self, tmp_path):
        path = _write(tmp_path / "c.toml", '[cache]\nbackend = "redis"\n')
        with pytest.raises(ValidationError):
            load_config(path)


class TestValidators:
    @pytest.mark.parametrize(
        "kwargs",
        [{"units": []}, {"default_limit": -1}, {"max_workers": 0},
         {"lock_stripes": 0}, {"timeout_seconds": 0}],
    )
    def test_engine_config_rejects(self, kwargs):
        with pytest.raises(ValidationError):
            EngineConfig(**kwargs)

    def test_log_level(self):
        assert LoggingConfig(level="warning").level == "WARNING"
        with pytest.raises(ValidationError):
            LoggingConfig(level="LOUD")

    def test_cache_backend(self):
        with pytest.raises(ValidationError):
            CacheConfig(backend="redis")

    @pytest.mark.parametrize("db_path", [":memory:", " :memory: ", ""])
    def test_cache_db_path_needs_a_file(self, db_path):
        with pytest.raises(ValidationError):
            CacheConfig(db_path=db_path)
