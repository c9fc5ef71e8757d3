"""
Metadata table accumulation for waterml-ingest.

Site, variable, and statistic metadata are built one descriptor at a
time. Each ``MetadataTable`` is an ordered sequence of mappings plus the
union of every key seen so far (the column list).

Join rule (``MetadataTable.join``):
  A new descriptor is full-joined on the table's **full** current column
  set, not on the intersection with the descriptor's keys:

  - A descriptor matches an existing row when it agrees on every current
    column. A key the descriptor lacks counts as missing, and
    missing == missing is a match.
  - Keys the table has never seen become new columns. Matching rows take
    the descriptor's values; all other rows are missing there.
  - A descriptor that matches no row is appended.

  Joining on the intersection would silently drop site properties that
  first appear in a later series. Joining on the full set turns them into
  new columns instead.

Tables are immutable: ``join`` returns a new table.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and pd.isna(value))


def _same(a: Any, b: Any) -> bool:
    if _is_missing(a) or _is_missing(b):
        return _is_missing(a) and _is_missing(b)
    return a == b


@dataclass(frozen=True)
class MetadataTable:
    """Deduplicating accumulation of descriptor mappings.

    Attributes:
        columns: Union of all keys seen, in first-seen order.
        rows: One mapping per distinct descriptor. A key absent from a
            row means the value is missing.
    """
    columns: tuple[str, ...] = ()
    rows: tuple[Mapping[str, Any], ...] = field(default_factory=tuple)

    @classmethod
    def from_descriptor(cls, descriptor: Mapping[str, Any]) -> MetadataTable:
        return cls(columns=tuple(descriptor), rows=(dict(descriptor),))

    @classmethod
    def from_descriptors(cls, descriptors: Iterable[Mapping[str, Any]]) -> MetadataTable:
        table = cls()
        for descriptor in descriptors:
            table = table.join(descriptor)
        return table

    def __len__(self) -> int:
        return len(self.rows)

    def join(self, descriptor: Mapping[str, Any]) -> MetadataTable:
        """Full-join *descriptor* on this table's full column set."""
        if not self.columns and not self.rows:
            return MetadataTable.from_descriptor(descriptor)

        new_columns = tuple(key for key in descriptor if key not in self.columns)
        matched = 0
        rows: list[Mapping[str, Any]] = []
        for row in self.rows:
            if all(_same(row.get(col), descriptor.get(col)) for col in self.columns):
                matched += 1
                row = {**row, **{col: descriptor[col] for col in new_columns}}
            rows.append(row)
        if not matched:
            rows.append(dict(descriptor))

        if new_columns:
            logger.debug("Metadata table gained columns %s", list(new_columns))
        return MetadataTable(columns=self.columns + new_columns, rows=tuple(rows))

    def to_frame(self) -> pd.DataFrame:
        """Render as a DataFrame; missing values become ``None``."""
        records = [[row.get(col) for col in self.columns] for row in self.rows]
        return pd.DataFrame(records, columns=list(self.columns), dtype=object)
