"""
Import result for waterml-ingest.

``WaterMLResult`` carries the wide table together with everything that
describes it: where it came from, the three metadata tables, the
service disclaimer, and when it was retrieved. These travel next to the
table instead of being attached to it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

import pandas as pd


@dataclass
class WaterMLResult:
    """Output of one WaterML import.

    Attributes:
        table: The wide observation table (zero rows when the document
            held no time series).
        source: Location the document was read from, if known.
        site_metadata: One row per distinct site descriptor. ``None``
            when the document held no time series.
        variable_metadata: One row per distinct variable descriptor.
        statistic_metadata: One row per distinct statistic (``stat_cd``,
            ``stat_nm``).
        disclaimer: Text of the ``disclaimer`` query note, if present.
        retrieved_at: UTC time the import finished; ``None`` for an empty
            document.
        query_notes: All query notes by title. Only set for an empty
            document, where they are the only information available.
    """
    table: pd.DataFrame
    source: str | None = None
    site_metadata: pd.DataFrame | None = None
    variable_metadata: pd.DataFrame | None = None
    statistic_metadata: pd.DataFrame | None = None
    disclaimer: str | None = None
    retrieved_at: datetime | None = None
    query_notes: dict[str, str] | None = field(default=None)

    @property
    def is_empty(self) -> bool:
        return len(self.table) == 0 and self.site_metadata is None

    def __repr__(self) -> str:
        sites = 0 if self.site_metadata is None else len(self.site_metadata)
        return (
            f"WaterMLResult(rows={len(self.table)}, columns={len(self.table.columns)}, "
            f"sites={sites}, source={self.source!r})"
        )
