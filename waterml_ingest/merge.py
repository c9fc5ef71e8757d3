"""
Merge engine for waterml-ingest.

Folds ``SeriesRecord``s, one at a time, into a ``MergeState``: a wide
observation table plus the site, variable, and statistic metadata tables.

Wide table layout:
  ``agency_cd, site_no, datetime, tz_cd`` plus, per distinct
  (parameter, statistic) pair, a value column ``X_<p>_<s>`` and, when that
  series had qualifiers, a qualifier column ``X_<p>_<s>_cd``.

Fold algorithm (``fold``):
  1. Build the series' row-block (one row per observation).
  2. First series: the block *is* the table; metadata tables start from
     the series' descriptors.
  3. Later series:
     a. Split existing rows into same-site and other-site rows.
     b. Same-site rows exist: drop any of this series' expected columns
        that are entirely missing for the site (placeholders left by an
        earlier join), full-join with the block on the shared columns,
        re-sort the site's rows by time, then put the other-site rows back
        underneath. A site reporting several parameters as separate
        series thus ends up with one row per timestamp.
     c. No same-site rows: full-join the whole table with the block on
        the shared columns. Nothing is re-sorted.
     d. Each metadata table joins its descriptor (see ``meta.py``).

Full joins keep left rows in order, append unmatched right rows in their
own order, and match missing key values to each other.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
import pandas as pd

from waterml_ingest.exceptions import MergeInvariantError
from waterml_ingest.meta import MetadataTable
from waterml_ingest.parsers.base import (
    AGENCY_COLUMN,
    DATETIME_COLUMN,
    IDENTITY_COLUMNS,
    SITE_COLUMN,
    TZ_COLUMN,
    SeriesRecord,
)

logger = logging.getLogger(__name__)

_INDICATOR = "_merge"


@dataclass(frozen=True)
class MergeState:
    """Accumulated output of the fold. All fields unset until the first series."""
    table: pd.DataFrame | None = None
    site: MetadataTable | None = None
    variable: MetadataTable | None = None
    statistic: MetadataTable | None = None

    @property
    def is_empty(self) -> bool:
        return self.table is None


# ---------------------------------------------------------------------------
# Row-block construction
# ---------------------------------------------------------------------------

def _datetime_series(record: SeriesRecord) -> pd.Series:
    timestamps = pd.Series([obs.timestamp for obs in record.observations], dtype=object)
    if not record.as_datetime:
        return timestamps
    parsed = pd.to_datetime(timestamps, utc=True).dt.as_unit("ns")
    return parsed.dt.tz_convert(record.timezone or "UTC")


def build_row_block(record: SeriesRecord) -> pd.DataFrame:
    """One row per observation of *record*.

    Columns: ``agency_cd, site_no, datetime, X_<p>_<s>, [X_<p>_<s>_cd], tz_cd``.
    Column dtypes are fixed even for a series with no observations, so an
    empty block still joins cleanly.
    """
    n = len(record)
    data: dict[str, pd.Series] = {
        AGENCY_COLUMN: pd.Series([record.agency_code] * n, dtype=object),
        SITE_COLUMN: pd.Series([record.site_no] * n, dtype=object),
        DATETIME_COLUMN: _datetime_series(record),
        record.value_column: pd.Series(
            [obs.value for obs in record.observations], dtype=np.float64
        ),
    }
    if record.has_qualifiers:
        data[record.qualifier_column] = pd.Series(
            [obs.qualifier for obs in record.observations], dtype=object
        )
    data[TZ_COLUMN] = pd.Series(
        [obs.timezone_label for obs in record.observations], dtype=object
    )
    return pd.DataFrame(data)


# ---------------------------------------------------------------------------
# Join helpers
# ---------------------------------------------------------------------------

def _align_key_dtypes(
    left: pd.DataFrame, right: pd.DataFrame, by: list[str]
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Cast all-missing key columns to the other side's dtype.

    A placeholder column is float64 NaN while its populated counterpart
    may hold qualifier strings; pandas refuses to join those as-is.
    """
    for col in by:
        if left[col].dtype == right[col].dtype:
            continue
        if left[col].isna().all():
            left = left.assign(**{col: left[col].astype(right[col].dtype)})
        elif right[col].isna().all():
            right = right.assign(**{col: right[col].astype(left[col].dtype)})
    return left, right


def full_join(left: pd.DataFrame, right: pd.DataFrame, by: list[str]) -> pd.DataFrame:
    """Order-preserving full outer join of *left* and *right* on *by*.

    Left rows come first in their original order (each joined to any
    matching right rows), followed by right rows with no match in *left*.

    Raises:
        MergeInvariantError: If an identity column is missing from either
            side, the key dtypes cannot be aligned, or the join produces
            more rows than both inputs combined.
    """
    missing = [
        col for col in IDENTITY_COLUMNS
        if col not in left.columns or col not in right.columns
    ]
    if missing:
        raise MergeInvariantError(
            f"Identity columns {missing} missing from one side of the join. "
            f"Left: {list(left.columns)}, right: {list(right.columns)}"
        )

    left, right = _align_key_dtypes(left, right, by)
    try:
        matched = left.merge(right, how="left", on=by, sort=False)
        flagged = right.merge(
            left[by].drop_duplicates(), how="left", on=by, sort=False, indicator=_INDICATOR
        )
    except (ValueError, TypeError) as exc:
        raise MergeInvariantError(f"Could not join on columns {by}: {exc}") from exc

    unmatched = flagged[flagged[_INDICATOR] == "left_only"].drop(columns=_INDICATOR)
    columns = list(matched.columns)

    if len(unmatched) == 0:
        joined = matched.reset_index(drop=True)
    elif len(matched) == 0:
        joined = unmatched.reindex(columns=columns).reset_index(drop=True)
    else:
        joined = pd.concat([matched, unmatched], ignore_index=True)[columns]

    if len(joined) > len(left) + len(right):
        raise MergeInvariantError(
            f"Join on {by} produced {len(joined)} rows from "
            f"{len(left)} + {len(right)}; key columns are not unique"
        )
    return joined


def _sort_by_time(df: pd.DataFrame) -> pd.DataFrame:
    """Stable sort of *df* by its datetime column (raw strings are parsed)."""
    key = df[DATETIME_COLUMN]
    if not pd.api.types.is_datetime64_any_dtype(key):
        key = pd.to_datetime(key, utc=True, errors="coerce", format="ISO8601")
    order = key.sort_values(kind="mergesort", na_position="last").index
    return df.loc[order].reset_index(drop=True)


def _site_mask(table: pd.DataFrame, site_no: str | None) -> pd.Series:
    if site_no is None:
        return table[SITE_COLUMN].isna()
    return table[SITE_COLUMN].eq(site_no).fillna(False).astype(bool)


# ---------------------------------------------------------------------------
# Fold
# ---------------------------------------------------------------------------

def _merge_table(table: pd.DataFrame, record: SeriesRecord, block: pd.DataFrame) -> pd.DataFrame:
    mask = _site_mask(table, record.site_no)
    same_site = table[mask]
    other_site = table[~mask]

    if len(same_site) == 0:
        by = [col for col in table.columns if col in block.columns]
        logger.debug("New site %s: joining whole table on %s", record.site_no, by)
        return full_join(table, block, by)

    stale = [
        col for col in same_site.columns
        if col in record.expected_columns and same_site[col].isna().all()
    ]
    same_site = same_site.drop(columns=stale)
    by = [col for col in same_site.columns if col in block.columns]
    logger.debug(
        "Known site %s: dropped placeholders %s, joining on %s",
        record.site_no, stale, by,
    )
    joined = _sort_by_time(full_join(same_site, block, by))

    columns = list(joined.columns) + [c for c in table.columns if c not in joined.columns]
    if len(other_site) == 0:
        return joined.reindex(columns=columns)
    return pd.concat([joined, other_site], ignore_index=True).reindex(columns=columns)


def fold(state: MergeState, record: SeriesRecord) -> MergeState:
    """Fold one series into the accumulated state.

    Returns a new ``MergeState``; *state* is left untouched.

    Raises:
        MergeInvariantError: If a join cannot align its columns.
    """
    block = build_row_block(record)
    statistic_row = (
        record.statistic_descriptor.as_row()
        if record.statistic_descriptor is not None
        else None
    )

    if state.is_empty:
        logger.debug(
            "First series %s/%s: %d rows", record.site_no, record.value_column, len(block)
        )
        return MergeState(
            table=block,
            site=MetadataTable.from_descriptor(record.site_descriptor),
            variable=MetadataTable.from_descriptor(record.variable_descriptor),
            statistic=(
                MetadataTable.from_descriptor(statistic_row)
                if statistic_row is not None
                else MetadataTable()
            ),
        )

    table = _merge_table(state.table, record, block)
    statistic = state.statistic or MetadataTable()
    if statistic_row is not None:
        statistic = statistic.join(statistic_row)

    return MergeState(
        table=table,
        site=state.site.join(record.site_descriptor),
        variable=state.variable.join(record.variable_descriptor),
        statistic=statistic,
    )


def merge_records(records: Iterable[SeriesRecord], state: MergeState | None = None) -> MergeState:
    """Fold every record in order, starting from *state* (default: empty)."""
    state = state or MergeState()
    for record in records:
        state = fold(state, record)
    return state
