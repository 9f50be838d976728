"""Tests for gddforge.config: models and YAML loader."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from pydantic import ValidationError

from gddforge.config import GDDForgeConfig, find_config_file, load_config
from gddforge.config.loader import DEFAULT_CONFIG_TEMPLATE, _expand_env_vars
from gddforge.config.models import (
    GenerationPolicy,
    LLMSettings,
    ProvidersConfig,
    ServerConfig,
    SessionConfig,
)


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run with an empty cwd and home so no real config file is picked up."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    monkeypatch.chdir(work)
    return work


# ── GDDForgeConfig defaults ─────────────────────────────────────────


class TestGDDForgeConfigDefaults:
    def test_default_log_level(self, sample_config):
        assert sample_config.log_level == "info"

    def test_default_log_format(self, sample_config):
        assert sample_config.log_format == "text"

    def test_default_model(self, sample_config):
        assert sample_config.llm.default_model == "claude-sonnet"

    def test_default_autosave_interval(self, sample_config):
        assert sample_config.session.autosave_seconds == 30.0


# ── Individual config model validations ─────────────────────────────


class TestLLMSettings:
    def test_defaults(self):
        cfg = LLMSettings()
        assert cfg.max_tokens == 1000
        assert cfg.completion_max_tokens == 100
        assert cfg.temperature == 0.7
        assert cfg.max_retries == 2

    def test_temperature_bounds(self):
        with pytest.raises(ValidationError):
            LLMSettings(temperature=3.0)

    def test_max_tokens_positive(self):
        with pytest.raises(ValidationError):
            LLMSettings(max_tokens=0)


class TestProvidersConfig:
    def test_env_var_names(self):
        cfg = ProvidersConfig()
        assert cfg.anthropic.api_key_env == "ANTHROPIC_API_KEY"
        assert cfg.openai.api_key_env == "OPENAI_API_KEY"
        assert cfg.google.api_key_env == "GOOGLE_API_KEY"
        assert cfg.xai.api_key_env == "XAI_API_KEY"
        assert cfg.groq.api_key_env == "GROQ_API_KEY"

    def test_openai_compatible_endpoints(self):
        cfg = ProvidersConfig()
        assert cfg.xai.base_url == "https://api.x.ai/v1"
        assert cfg.groq.base_url == "https://api.groq.com/openai/v1"
        assert cfg.openai.base_url is None


class TestGenerationPolicy:
    def test_defaults(self):
        policy = GenerationPolicy()
        assert policy.min_enhance_chars == 10
        assert policy.min_completion_chars == 3
        assert policy.min_filled_subsections == 2


class TestSessionAndServer:
    def test_session_defaults(self):
        cfg = SessionConfig()
        assert cfg.save_on_accept is True
        assert cfg.check_conflicts is True

    def test_autosave_must_be_positive(self):
        with pytest.raises(ValidationError):
            SessionConfig(autosave_seconds=0)

    def test_port_range(self):
        with pytest.raises(ValidationError):
            ServerConfig(port=70000)


# ── _expand_env_vars ────────────────────────────────────────────────


class TestExpandEnvVars:
    def test_expands_string_variable(self):
        with patch.dict(os.environ, {"MY_KEY": "secret123"}):
            assert _expand_env_vars("${MY_KEY}") == "secret123"

    def test_missing_var_becomes_empty(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _expand_env_vars("${NOT_SET_ANYWHERE}") == ""

    def test_expands_nested_structures(self):
        with patch.dict(os.environ, {"A": "alpha", "B": "beta"}):
            result = _expand_env_vars({"outer": {"inner": "${A}"}, "list": ["${B}"]})
            assert result == {"outer": {"inner": "alpha"}, "list": ["beta"]}

    def test_non_string_passthrough(self):
        assert _expand_env_vars(42) == 42
        assert _expand_env_vars(True) is True
        assert _expand_env_vars(None) is None

    def test_mixed_text_and_var(self):
        with patch.dict(os.environ, {"HOST": "localhost"}):
            assert _expand_env_vars("http://${HOST}:8080") == "http://localhost:8080"

    def test_fallback_when_unset(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _expand_env_vars("${GDD_DB:-data/gdd.db}") == "data/gdd.db"

    def test_fallback_ignored_when_set(self):
        with patch.dict(os.environ, {"GDD_DB": "/srv/gdd.db"}):
            assert _expand_env_vars("${GDD_DB:-data/gdd.db}") == "/srv/gdd.db"


# ── load_config ─────────────────────────────────────────────────────


class TestLoadConfig:
    def test_defaults_when_no_file(self, isolated):
        assert load_config() == GDDForgeConfig()

    def test_cli_path(self, isolated, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("log_level: debug\nsession:\n  autosave_seconds: 5\n")
        cfg = load_config(str(path))
        assert cfg.log_level == "debug"
        assert cfg.session.autosave_seconds == 5

    def test_project_local_file(self, isolated):
        (isolated / "gddforge.yaml").write_text("llm:\n  default_model: gpt-4o\n")
        assert load_config().llm.default_model == "gpt-4o"

    def test_user_global_file(self, isolated):
        global_dir = Path.home() / ".gddforge"
        global_dir.mkdir()
        (global_dir / "config.yaml").write_text("log_format: json\n")
        assert load_config().log_format == "json"

    def test_cli_path_wins(self, isolated, tmp_path):
        (isolated / "gddforge.yaml").write_text("log_level: error\n")
        path = tmp_path / "cli.yaml"
        path.write_text("log_level: warn\n")
        assert load_config(str(path)).log_level == "warn"

    def test_env_expansion(self, isolated):
        (isolated / "gddforge.yaml").write_text("storage:\n  db_path: ${GDD_DB}\n")
        with patch.dict(os.environ, {"GDD_DB": "/tmp/x.db"}):
            assert load_config().storage.db_path == "/tmp/x.db"

    def test_invalid_yaml(self, isolated):
        (isolated / "gddforge.yaml").write_text("llm: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config()

    def test_schema_error_names_file(self, isolated):
        (isolated / "gddforge.yaml").write_text("log_level: loud\n")
        with pytest.raises(ValueError, match="gddforge.yaml"):
            load_config()

    def test_non_mapping_rejected(self, isolated):
        (isolated / "gddforge.yaml").write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="expected a mapping"):
            load_config()

    def test_missing_explicit_path(self, isolated, tmp_path):
        with pytest.raises(ValueError, match="Config file not found"):
            load_config(str(tmp_path / "nope.yaml"))

    def test_empty_file_gives_defaults(self, isolated):
        (isolated / "gddforge.yaml").write_text("")
        assert load_config() == GDDForgeConfig()

    def test_find_config_file(self, isolated):
        assert find_config_file() is None
        (isolated / "gddforge.yaml").write_text("log_level: debug\n")
        assert find_config_file() == Path("gddforge.yaml")

    def test_default_template_is_valid(self):
        raw = yaml.safe_load(DEFAULT_CONFIG_TEMPLATE)
        assert GDDForgeConfig(**raw) == GDDForgeConfig()
