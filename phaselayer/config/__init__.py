"""Configuration loading and validation for phaselayer."""

from phaselayer.config.env import expand_env_vars
from phaselayer.config.loader import load_layer_settings, parse_layer_settings
from phaselayer.config.schema import LayerSettings, PhaseSettings, TerminalResponseConfig

__all__ = [
    "LayerSettings",
    "PhaseSettings",
    "TerminalResponseConfig",
    "expand_env_vars",
    "load_layer_settings",
    "parse_layer_settings",
]
