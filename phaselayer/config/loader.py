"""Configuration file loading and validation.

Loads a YAML configuration file, expands ``${ENV_VAR}`` placeholders,
and validates it against :class:`~phaselayer.config.schema.LayerSettings`.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from phaselayer.config.env import expand_env_vars
from phaselayer.config.schema import LayerSettings
from phaselayer.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Recognised config file extensions.
_YAML_EXTS = frozenset({".yaml", ".yml"})


def _read_config_file(cfg_fpath: str) -> Dict[str, Any]:
    """Parse *cfg_fpath* into a mapping; an empty file yields ``{}``."""
    suffix = Path(cfg_fpath).suffix.lower()
    if suffix not in _YAML_EXTS:
        raise ConfigurationError(
            f"Unsupported config file extension '{suffix}'. "
            "Layer settings are read from .yaml or .yml files."
        )

    try:
        text = Path(cfg_fpath).read_text(encoding="utf-8")
        raw_data = yaml.safe_load(text) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Error reading configuration file: {cfg_fpath}\n  {exc}") from exc

    if not isinstance(raw_data, dict):
        raise ConfigurationError(
            f"Layer settings in {cfg_fpath} must be a YAML mapping, "
            f"got {type(raw_data).__name__}."
        )
    return raw_data


def _format_validation_errors(exc: ValidationError) -> str:
    """One line per failing setting, e.g. ``final_handler.status_code: ...``."""
    return "\n".join(
        f"  - {'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
        for err in exc.errors()
    )


def parse_layer_settings(raw_data: Dict[str, Any]) -> LayerSettings:
    """Expand environment references in *raw_data* and validate it."""
    raw_data = expand_env_vars(raw_data)
    try:
        return LayerSettings.model_validate(raw_data)
    except ValidationError as exc:
        error_summary = _format_validation_errors(exc)
        raise ConfigurationError(
            f"Configuration validation failed ({len(exc.errors())} error(s)):\n" f"{error_summary}"
        ) from exc


def load_layer_settings(cfg_fpath: str) -> LayerSettings:
    """Load, expand, validate, and return layer settings.

    Raises:
        ConfigurationError: On file I/O errors, parse errors, or
            validation failures (all errors reported at once).
    """
    logger.debug("Loading configuration file: %s", cfg_fpath)

    if not os.path.exists(cfg_fpath):
        raise ConfigurationError(f"Configuration file does not exist: {cfg_fpath}")

    settings = parse_layer_settings(_read_config_file(cfg_fpath))
    logger.info(
        "Configuration '%s' loaded (v%s). Phases: request='%s', error='%s'.",
        cfg_fpath,
        settings.version,
        settings.phases.request,
        settings.phases.error,
    )
    return settings
