"""
waterml-ingest: normalize WaterML 1.x time-series documents into a wide table.

Public API surface:

- ``import_waterml1(source, as_datetime=False, tz=None)`` -- **recommended
  entry point**. Reads a WaterML 1.x document (path, XML text/bytes, or a
  parsed tree) and returns a ``WaterMLResult``: the wide observation
  table plus site, variable, and statistic metadata tables.

- ``ingest(config_path)`` -- Same import driven by a YAML config file
  (``source.location`` + ``options``).

Lower-level building blocks (``extract_series``, ``fold``,
``merge_records``) are exported for callers that walk documents
themselves.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from waterml_ingest._pipeline import run_import
from waterml_ingest.config import (
    SUPPORTED_TIMEZONES,
    ImportOptions,
    IngestConfig,
    load_config,
    validate_timezone,
)
from waterml_ingest.exceptions import (
    ConfigValidationError,
    InvalidTimezoneError,
    MalformedSeriesError,
    MergeInvariantError,
    UnknownFormatError,
    UnsupportedTimestampFormatError,
    WaterMLIngestError,
)
from waterml_ingest.merge import MergeState, build_row_block, fold, merge_records
from waterml_ingest.meta import MetadataTable
from waterml_ingest.parsers import Observation, SeriesRecord, StatisticDescriptor, extract_series
from waterml_ingest.result import WaterMLResult

__all__ = [
    "import_waterml1",
    "ingest",
    "WaterMLResult",
    "ImportOptions",
    "IngestConfig",
    "SUPPORTED_TIMEZONES",
    "validate_timezone",
    "Observation",
    "SeriesRecord",
    "StatisticDescriptor",
    "extract_series",
    "MergeState",
    "MetadataTable",
    "build_row_block",
    "fold",
    "merge_records",
    "WaterMLIngestError",
    "UnknownFormatError",
    "MalformedSeriesError",
    "UnsupportedTimestampFormatError",
    "InvalidTimezoneError",
    "MergeInvariantError",
    "ConfigValidationError",
]

logger = logging.getLogger(__name__)


def import_waterml1(
    source: str | Path | bytes | ET.ElementTree | ET.Element,
    as_datetime: bool = False,
    tz: str | None = None,
) -> WaterMLResult:
    """Import a WaterML 1.x document into a wide table plus metadata.

    Args:
        source: Path to a document, raw XML text or bytes, or an already
            parsed ``ElementTree`` / ``Element``.
        as_datetime: If ``True``, ``datetime`` holds zone-labelled
            timestamps and ``tz_cd`` holds the label. If ``False``
            (default), ``datetime`` holds the raw strings and ``tz_cd`` the
            site's default zone abbreviation.
        tz: Zone label for parsed timestamps; one of
            ``SUPPORTED_TIMEZONES``. ``None`` or ``""`` means ``UTC``.
            Ignored for labelling when ``as_datetime`` is ``False``.

    Returns:
        A ``WaterMLResult``.

    Raises:
        InvalidTimezoneError: If *tz* is unsupported (checked before parsing).
        UnknownFormatError: If the document is not WaterML 1.x.
        MalformedSeriesError: If a series lacks sourceInfo or variable data.
        UnsupportedTimestampFormatError: If a timestamp cannot be parsed.
        MergeInvariantError: If the merge cannot align columns (a bug).

    Examples::

        result = waterml_ingest.import_waterml1("dv_02177000.xml", as_datetime=True)
        result.table            # agency_cd, site_no, datetime, X_00060_00003, ...
        result.site_metadata    # one row per site
    """
    options = ImportOptions(as_datetime=as_datetime, tz=tz)
    logger.info("import_waterml1() -- as_datetime=%s, tz=%s", as_datetime, options.tz)
    return run_import(source, options)


def ingest(config_path: str | Path) -> WaterMLResult:
    """Run an import described by a YAML config file.

    Raises:
        FileNotFoundError: If *config_path* does not exist.
        ConfigValidationError: If the config file is empty.
        InvalidTimezoneError: If ``options.tz`` is unsupported.
        pydantic.ValidationError: If the config fails schema validation.
    """
    logger.info("ingest() -- config_path=%s", config_path)
    config = load_config(config_path)
    return run_import(config.source.location, config.options)
