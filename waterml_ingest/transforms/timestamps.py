"""
Timestamp parsing transform for waterml-ingest.

Used only when ``as_datetime=True``. Each raw ``dateTime`` attribute is
matched against ``ACCEPTED_FORMATS`` in order; the first exact match wins.

Zone handling:
  Strings that carry an offset (``2013-11-03T01:15:00.000-05:00``) are
  converted to the absolute instant they describe. Strings without one
  are taken to already be UTC instants. The resulting values are then
  relabelled to the override zone (or ``UTC``). Relabelling keeps the
  instant: ``01:15-05:00`` stays ``06:15 UTC`` whether it is displayed in
  UTC or in ``America/Chicago``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import pandas as pd

from waterml_ingest.exceptions import UnsupportedTimestampFormatError

logger = logging.getLogger(__name__)

# Year; date; date+minute; date+second; date+fractional second;
# date+fractional second+offset (whole seconds accepted with an offset too)
ACCEPTED_FORMATS: tuple[str, ...] = (
    "%Y",
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
)

DEFAULT_ZONE = "UTC"


def parse_timestamp(raw: str) -> pd.Timestamp:
    """Parse one raw timestamp into a UTC ``Timestamp``.

    Raises:
        UnsupportedTimestampFormatError: If no accepted format matches.
    """
    text = raw.strip() if raw is not None else ""
    # pandas maps "", "NaT" and "nan" to NaT instead of failing
    if text and text.lower() not in ("nat", "nan"):
        for fmt in ACCEPTED_FORMATS:
            try:
                return pd.to_datetime(text, format=fmt, exact=True, utc=True)
            except ValueError:
                continue
    raise UnsupportedTimestampFormatError(
        f"Timestamp {raw!r} matches none of the accepted formats: "
        f"{list(ACCEPTED_FORMATS)}"
    )


def zone_label(tz: str | None) -> str:
    """The label written to ``tz_cd`` for parsed datetimes."""
    return tz or DEFAULT_ZONE


def parse_timestamps(raw: Sequence[str], tz: str | None = None) -> pd.Series:
    """Parse raw timestamps and label them with *tz* (``UTC`` when unset).

    Returns:
        A ``datetime64[ns, <zone>]`` Series the same length as *raw*. The
        dtype is fixed even for empty input so row-blocks stay joinable.
    """
    parsed = pd.Series([parse_timestamp(value) for value in raw], dtype=object)
    series = pd.to_datetime(parsed, utc=True).dt.as_unit("ns")
    label = zone_label(tz)
    logger.debug("Parsed %d timestamps, labelled %s", len(series), label)
    return series.dt.tz_convert(label)
