"""Configuration loader for the program generator.

Loads and validates plotter settings into a typed, frozen record.  The
pen commands and the start/end commands are opaque strings inserted
verbatim into the program; only their *shape* is checked (they must be
single lines).  Numeric values are validated here so that a malformed
``F`` word or scale never reaches the emitted program.

Feed rates are integers in output units per minute and are written to
the ``F`` word unchanged.  ``scale_percent`` of 100 maps one drawing
space unit to one output unit (a full -100..100 drawing is 200 mm tall).

Usage::

    from turtle_plotter.configs.loader import load_config
    cfg = load_config()                              # shipped plotter.yaml
    cfg = load_config("/custom/plotter.yaml")        # explicit path
    cfg = load_config(profile="z_lift")              # named device profile
    cfg = cfg.merged({"feedRate": 1500})             # merge-patch
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from turtle_plotter.utils.fs import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "plotter.yaml"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when a configuration source cannot be read or is malformed."""

    pass


class InvalidConfigurationError(ConfigError):
    """Raised when a configuration value fails validation."""

    pass


# ---------------------------------------------------------------------------
# Key aliases -- the drawing UI names fields in camelCase
# ---------------------------------------------------------------------------

_KEY_ALIASES: dict[str, str] = {
    "penUp": "pen_up",
    "penDown": "pen_down",
    "feedRate": "feed_rate",
    "scalePercent": "scale_percent",
}


def _normalise_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Map camelCase keys to field names, drop unknown keys and ``None``."""
    fields = PlotterConfig.model_fields
    out: dict[str, Any] = {}
    for key, value in data.items():
        name = _KEY_ALIASES.get(key, key)
        if name not in fields:
            logger.debug("Ignoring unrecognised configuration key %r", key)
            continue
        if value is None:
            continue
        out[name] = value
    return out


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "config"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


# ---------------------------------------------------------------------------
# Configuration record
# ---------------------------------------------------------------------------


class PlotterConfig(BaseModel):
    """Program generator settings.

    Parameters
    ----------
    pen_up, pen_down : str
        Commands that lift / lower the pen (``M5``/``M3`` for a spindle
        style servo, ``G0 Z5``/``G0 Z0`` for a Z-lift).
    feed_rate : int
        Drawing feed written to every ``G1`` as ``F<feed_rate>``.
    start, end : str
        Commands emitted after the header and before program end.
    scale_percent : float
        Output scale; 100 means one drawing unit per output unit.

    Raises
    ------
    InvalidConfigurationError
        On construction with an invalid value.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    pen_up: str = Field("M5", description="Pen up command")
    pen_down: str = Field("M3", description="Pen down command")
    feed_rate: int = Field(3000, gt=0, description="Draw feed (units/min)")
    start: str = Field("G28", description="Program start command")
    end: str = Field("M2", description="Program end command")
    scale_percent: float = Field(
        100.0, gt=0, allow_inf_nan=False, description="Output scale (%)"
    )

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise InvalidConfigurationError(
                f"Invalid configuration value: {_describe(exc)}"
            ) from exc

    @field_validator("pen_up", "pen_down", "start", "end", mode="before")
    @classmethod
    def validate_command(cls, v: Any) -> Any:
        if not isinstance(v, str):
            raise ValueError(f"command must be a string, got {type(v).__name__}")
        if "\n" in v or "\r" in v:
            raise ValueError(f"command must be a single line, got {v!r}")
        return v

    @field_validator("feed_rate", mode="before")
    @classmethod
    def validate_feed_rate(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("feed_rate must be a number, got a boolean")
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError(f"feed_rate must be finite, got {v}")
        if isinstance(v, str):
            v = v.strip()
        return v

    @field_validator("scale_percent", mode="before")
    @classmethod
    def validate_scale_percent(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("scale_percent must be a number, got a boolean")
        if isinstance(v, str):
            v = v.strip()
        return v

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None = None) -> PlotterConfig:
        """Build a config from a loosely-typed mapping.

        Missing keys take their defaults, unknown keys are ignored and
        camelCase keys (``penUp``, ``feedRate``...) are accepted.

        Raises
        ------
        InvalidConfigurationError
            If any recognised value fails validation.
        """
        return cls(**_normalise_keys(data or {}))

    def merged(self, patch: Mapping[str, Any]) -> PlotterConfig:
        """Return a new config with *patch* applied field by field.

        Raises
        ------
        InvalidConfigurationError
            If the patched record fails validation.
        """
        data = self.model_dump()
        data.update(_normalise_keys(patch))
        return type(self)(**data)

    @property
    def scale(self) -> float:
        """Multiplier applied to shifted drawing coordinates."""
        return self.scale_percent / 100.0


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def _read(path: str | Path | None) -> tuple[Path, dict[str, Any]]:
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        data = load_yaml(path)
    except yaml.YAMLError as exc:
        raise ConfigError(str(exc)) from exc
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(
            f"Configuration file {path} must contain a mapping, "
            f"got {type(data).__name__}"
        )
    return path, data


def list_profiles(path: str | Path | None = None) -> list[str]:
    """Return the profile names defined in a configuration file."""
    _, data = _read(path)
    profiles = data.get("profiles") or {}
    if not isinstance(profiles, dict):
        raise ConfigError("'profiles' must be a mapping of name -> settings")
    return list(profiles)


def load_config(
    path: str | Path | None = None,
    profile: str | None = None,
) -> PlotterConfig:
    """Load and validate plotter configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to a YAML file.  ``None`` loads ``plotter.yaml`` shipped
        alongside this module.
    profile : str | None
        Named profile under ``profiles:``.  ``None`` uses the file's
        ``default_profile``.  Files without a ``profiles`` section are
        read as a flat mapping of settings.

    Returns
    -------
    PlotterConfig
        Validated, frozen configuration.

    Raises
    ------
    ConfigError
        If the file is malformed or the profile is unknown.
    InvalidConfigurationError
        If a setting fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    path, data = _read(path)
    logger.info("Loading configuration from %s", path)

    if "profiles" in data:
        profiles = data["profiles"]
        if not isinstance(profiles, dict) or not profiles:
            raise ConfigError(f"'profiles' in {path} must be a non-empty mapping")
        name = profile or data.get("default_profile") or next(iter(profiles))
        if name not in profiles:
            raise ConfigError(
                f"Unknown profile '{name}' in {path}. "
                f"Available: {', '.join(profiles)}"
            )
        settings = profiles[name] or {}
        if not isinstance(settings, dict):
            raise ConfigError(f"Profile '{name}' in {path} must be a mapping")
        logger.info("Using profile '%s'", name)
    else:
        if profile is not None:
            raise ConfigError(f"{path} defines no profiles (requested '{profile}')")
        settings = data

    config = PlotterConfig.from_mapping(settings)
    logger.info("Configuration loaded successfully")
    return config
