from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_BASIS_CLAUSE,
    AppConfig,
    ExportMode,
    ExportOptions,
    TemplateSettings,
)

"""Config loader.

Responsibilities:
- Load YAML config (config/processxls.yml, or the path in PROCESSXLS_CONFIG)
- Validate against the bundled JSON schema
- Apply defaults for every missing key
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/processxls.yml")
CONFIG_ENV_VAR = "PROCESSXLS_CONFIG"


class ConfigError(Exception):
    pass


def resolve_config_path(path: Path | None = None) -> Path:
    """Explicit path first, then PROCESSXLS_CONFIG, then config/processxls.yml."""
    if path is not None:
        return path
    env_path = os.getenv(CONFIG_ENV_VAR)
    return Path(env_path) if env_path else DEFAULT_CONFIG_PATH


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or data violating it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _optional_path(value: str | None, base: Path) -> Path | None:
    if not value:
        return None
    p = Path(value)
    return p if p.is_absolute() else base / p


def load_config(path: Path | None = None, *, required: bool = False) -> AppConfig:
    """Load the application config.

    A missing file yields defaults unless ``required`` is set. Relative
    template paths resolve against the config file's directory.
    """
    path = resolve_config_path(path)
    if not path.exists():
        if required:
            raise ConfigError(f"config file not found: {path}")
        return AppConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)

    base = path.parent
    tpl_raw = data.get("templates") or {}
    exp_raw = data.get("export") or {}
    templates = TemplateSettings(
        invoice=_optional_path(tpl_raw.get("invoice"), base),
        act=_optional_path(tpl_raw.get("act"), base),
    )
    export = ExportOptions(
        mode=ExportMode(exp_raw.get("mode", ExportMode.ZIP.value)),
        name_column=exp_raw.get("name_column") or "",
        invoice_prefix=exp_raw.get("invoice_prefix") or "",
        invoice_start=exp_raw.get("invoice_start", 1),
    )
    return AppConfig(
        templates=templates,
        export=export,
        output_directory=Path(exp_raw.get("output_directory", "./out")),
        basis_clause=data.get("basis_clause", DEFAULT_BASIS_CLAUSE),
    )
