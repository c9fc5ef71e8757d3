"""
Configuration models and YAML I/O for waterml-ingest.

This module defines the Pydantic models that map 1:1 to an ingest YAML
file, plus helpers for loading, saving, and generating one.

Key models:
- ImportOptions: The two caller-facing rendering options (``as_datetime``
  and the ``tz`` override) plus the document namespace.
- SourceConfig: Location of the WaterML document.
- IngestConfig: Top-level config (source + options).

Key functions:
- validate_timezone(tz) -> str | None: Check an override against the
  supported zone list.
- load_config(path) -> IngestConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.
- generate_default_config(...) -> IngestConfig.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from waterml_ingest.exceptions import ConfigValidationError, InvalidTimezoneError

logger = logging.getLogger(__name__)

# Zones accepted as a timezone override
SUPPORTED_TIMEZONES: tuple[str, ...] = (
    "America/New_York",
    "America/Chicago",
    "America/Denver",
    "America/Los_Angeles",
    "America/Anchorage",
    "America/Honolulu",
    "America/Jamaica",
    "America/Managua",
    "America/Phoenix",
    "America/Metlakatla",
)


def validate_timezone(tz: str | None) -> str | None:
    """Validate a timezone override.

    Empty strings and ``None`` both mean "no override".

    Raises:
        InvalidTimezoneError: If *tz* is not in ``SUPPORTED_TIMEZONES``.
    """
    if tz is None or tz == "":
        return None
    if tz not in SUPPORTED_TIMEZONES:
        raise InvalidTimezoneError(
            f"Unsupported timezone override: '{tz}'. "
            f"Supported zones: {list(SUPPORTED_TIMEZONES)}"
        )
    return tz


class ImportOptions(BaseModel):
    """Rendering options for a single import."""

    as_datetime: bool = Field(
        False,
        description="If True, parse timestamps to datetimes; otherwise keep raw strings",
    )
    tz: str | None = Field(
        None,
        description="Zone label for parsed datetimes; unset means UTC",
    )
    namespace: str | None = Field(
        None,
        description="WaterML namespace URI; detected from the document when unset",
    )

    @field_validator("tz", mode="before")
    @classmethod
    def _check_tz(cls, value: str | None) -> str | None:
        # InvalidTimezoneError is not a ValueError, so pydantic lets it through
        return validate_timezone(value)


class SourceConfig(BaseModel):
    """Where the WaterML document lives."""

    location: str = Field(..., description="Path to a WaterML 1.x document")


class IngestConfig(BaseModel):
    """Top-level configuration for waterml-ingest."""

    source: SourceConfig
    options: ImportOptions = Field(default_factory=ImportOptions)


def load_config(path: str | Path) -> IngestConfig:
    """Load and validate an ingest YAML file into an IngestConfig model.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigValidationError: If the file is empty.
        InvalidTimezoneError: If ``options.tz`` is not a supported zone.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Config file is empty: {path}")
    logger.info("Loaded config from %s", path)
    return IngestConfig.model_validate(raw)


def save_config(config: IngestConfig, path: str | Path) -> None:
    """Serialize an IngestConfig to YAML with a short header comment."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        f.write("# waterml-ingest configuration\n\n")
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    logger.info("Saved config to %s", path)


def generate_default_config(
    location: str,
    as_datetime: bool = False,
    tz: str | None = None,
) -> IngestConfig:
    """Build an IngestConfig for a document location."""
    return IngestConfig(
        source=SourceConfig(location=location),
        options=ImportOptions(as_datetime=as_datetime, tz=tz),
    )
