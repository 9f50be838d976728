"""gddforge.yaml discovery and loading.

Lookup order: explicit ``--config`` path, ``./gddforge.yaml``,
``~/.gddforge/config.yaml``, then built-in defaults. String values may
reference the environment as ``${VAR}`` or ``${VAR:-fallback}``.
"""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import GDDForgeConfig

PROJECT_CONFIG = Path("gddforge.yaml")

_ENV_REF = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def user_config_path() -> Path:
    return Path.home() / ".gddforge" / "config.yaml"


def find_config_file(cli_path: str | None = None) -> Path | None:
    """Return the file load_config would read, or None for defaults.

    An explicit path must exist; the implicit locations are optional.
    """
    if cli_path:
        path = Path(cli_path)
        if not path.is_file():
            raise ValueError(f"Config file not found: {path}")
        return path
    for path in (PROJECT_CONFIG, user_config_path()):
        if path.is_file():
            return path
    return None


def load_config(cli_path: str | None = None) -> GDDForgeConfig:
    path = find_config_file(cli_path)
    if path is None:
        return GDDForgeConfig()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if raw is None:
        return GDDForgeConfig()
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid config in {path}: expected a mapping")

    try:
        return GDDForgeConfig(**_expand_env_vars(raw))
    except ValidationError as e:
        raise ValueError(f"Invalid config in {path}: {e}") from e


def _expand_env_vars(obj: object) -> object:
    """Expand ${VAR} and ${VAR:-fallback} in every string of a YAML tree."""
    if isinstance(obj, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1)) or (m.group(2) or ""), obj)
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


# Written by `gddforge config init`
DEFAULT_CONFIG_TEMPLATE = """\
# gddforge.yaml

# Generation defaults
llm:
  default_model: "claude-sonnet"   # see `gddforge models`
  max_tokens: 1000
  completion_max_tokens: 100
  temperature: 0.7
  timeout: 60
  max_retries: 2

# Provider credentials: a provider whose env var is unset shows as unavailable
providers:
  anthropic:
    api_key_env: "ANTHROPIC_API_KEY"
  openai:
    api_key_env: "OPENAI_API_KEY"
  google:
    api_key_env: "GOOGLE_API_KEY"
  xai:
    api_key_env: "XAI_API_KEY"
    base_url: "https://api.x.ai/v1"
  groq:
    api_key_env: "GROQ_API_KEY"
    base_url: "https://api.groq.com/openai/v1"

# Thresholds checked before any provider call
generation:
  min_enhance_chars: 10
  min_completion_chars: 3
  min_concept_chars: 10
  min_content_chars: 10
  min_filled_subsections: 2

# Section content database
storage:
  db_path: ".gddforge/gdd.db"

# Editing sessions
session:
  autosave_seconds: 30
  save_on_accept: true
  check_conflicts: true       # send expected versions on save

# HTTP server
server:
  host: "127.0.0.1"
  port: 8000

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
