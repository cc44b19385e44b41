"""Plotter configuration loading and validation."""

from turtle_plotter.configs.loader import (
    ConfigError,
    InvalidConfigurationError,
    PlotterConfig,
    list_profiles,
    load_config,
)

__all__ = [
    "ConfigError",
    "InvalidConfigurationError",
    "PlotterConfig",
    "list_profiles",
    "load_config",
]
