"""
Custom exception hierarchy for waterml-ingest.

Callers can catch a specific failure (e.g., a malformed series vs. a bad
timezone override) without relying on generic ValueError/RuntimeError.
Numeric parse failures on individual observation values are deliberately
absent here: they become ``NaN`` rather than errors.
"""


class WaterMLIngestError(Exception):
    """Base exception for all waterml-ingest errors."""


class UnknownFormatError(WaterMLIngestError):
    """Raised when the input document is not a WaterML 1.x document.

    The message includes the root element tag to aid debugging.
    """


class MalformedSeriesError(WaterMLIngestError):
    """Raised when a timeSeries node lacks a required sub-structure.

    Required: ``sourceInfo``, ``variable`` and ``variable/variableCode``.
    There is no per-series recovery path, so this aborts the whole import.
    """


class UnsupportedTimestampFormatError(WaterMLIngestError):
    """Raised when ``as_datetime=True`` and a timestamp matches none of the
    accepted formats."""


class InvalidTimezoneError(WaterMLIngestError):
    """Raised when the timezone override is not one of the supported zones.

    Checked before any document parsing begins.
    """


class MergeInvariantError(WaterMLIngestError):
    """Raised when a join cannot align the expected columns.

    This signals an extraction or accumulation bug, not bad input.
    """


class ConfigValidationError(WaterMLIngestError):
    """Raised when a waterml-ingest YAML config is empty or unusable."""
