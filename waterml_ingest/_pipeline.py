"""
Internal import orchestration for waterml-ingest.

Shared by ``import_waterml1()`` and ``ingest()`` so both run the same
document -> extract -> fold -> finalize sequence.

This module is **not** part of the public API.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from waterml_ingest.config import ImportOptions
from waterml_ingest.document import NS_PREFIX, detect_namespace, find_all, query_notes, read_document
from waterml_ingest.merge import MergeState, fold
from waterml_ingest.parsers.series import extract_series
from waterml_ingest.result import WaterMLResult

logger = logging.getLogger(__name__)

DISCLAIMER_NOTE = "disclaimer"


def _describe_source(source: object) -> str | None:
    """Printable location for *source*, or ``None`` for in-memory documents."""
    if isinstance(source, Path):
        return str(source)
    if isinstance(source, str) and not source.lstrip().startswith("<"):
        return source
    return None


def finalize(
    state: MergeState,
    notes: dict[str, str],
    source: str | None,
) -> WaterMLResult:
    """Turn the final fold state into a ``WaterMLResult``.

    An unset state (no series in the document) yields an empty table that
    carries only the source and the query notes.
    """
    if state.is_empty:
        logger.info("Document contains no time series")
        return WaterMLResult(table=pd.DataFrame(), source=source, query_notes=notes)

    return WaterMLResult(
        table=state.table,
        source=source,
        site_metadata=state.site.to_frame(),
        variable_metadata=state.variable.to_frame(),
        statistic_metadata=state.statistic.to_frame(),
        disclaimer=notes.get(DISCLAIMER_NOTE),
        retrieved_at=datetime.now(timezone.utc),
    )


def run_import(
    source: str | Path | bytes | ET.ElementTree | ET.Element,
    options: ImportOptions,
) -> WaterMLResult:
    """Read a WaterML document and fold every time series it contains.

    Steps:
      1. Read the document and resolve its namespace.
      2. Collect query notes (disclaimer etc.).
      3. Extract and fold each ``timeSeries`` in document order.
      4. Finalize into a ``WaterMLResult``.

    *options* must already be validated (``ImportOptions`` validates ``tz``
    on construction, so a bad zone never reaches the document).
    """
    root = read_document(source)
    ns = options.namespace or detect_namespace(root)
    notes = query_notes(root, ns)

    series_nodes = find_all(root, f".//{NS_PREFIX}:timeSeries", ns)
    logger.info(
        "Found %d time series (as_datetime=%s, tz=%s)",
        len(series_nodes), options.as_datetime, options.tz,
    )

    state = MergeState()
    for node in series_nodes:
        record = extract_series(
            node, as_datetime=options.as_datetime, tz=options.tz, namespace=ns
        )
        state = fold(state, record)

    result = finalize(state, notes, _describe_source(source))
    logger.info(
        "Import complete: %d rows x %d columns", len(result.table), len(result.table.columns)
    )
    return result
