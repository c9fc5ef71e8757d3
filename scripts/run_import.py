"""
Demo script: import WaterML 1.x documents via the public API.

Usage:
    python scripts/run_import.py tests/fixtures/dv_two_sites.xml
    python scripts/run_import.py --datetime --tz America/Chicago doc1.xml doc2.xml
    python scripts/run_import.py --config import.yaml

Each document is imported independently; the script logs the shape of the
wide table and of each metadata table.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("run_import")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("documents", nargs="*", help="WaterML 1.x files")
    parser.add_argument("--datetime", action="store_true", help="parse timestamps")
    parser.add_argument("--tz", default=None, help="zone label for parsed timestamps")
    parser.add_argument("--config", default=None, help="YAML config to run instead")
    return parser.parse_args()


def _log_result(result) -> None:
    table = result.table
    log.info("  Wide table: %s rows x %d cols", f"{len(table):,}", len(table.columns))
    for name in ("site_metadata", "variable_metadata", "statistic_metadata"):
        frame = getattr(result, name)
        if frame is not None:
            log.info("  %s: %d rows x %d cols", name, len(frame), len(frame.columns))
    if result.disclaimer:
        log.info("  Disclaimer: %s", result.disclaimer[:80])


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    import waterml_ingest

    args = _parse_args()

    if args.config:
        log.info("Running config: %s", args.config)
        _log_result(waterml_ingest.ingest(args.config))
        return

    for document in args.documents:
        if not Path(document).exists():
            log.warning("SKIP  %s  (file not found)", document)
            continue
        log.info("=" * 70)
        log.info("Importing: %s", document)
        result = waterml_ingest.import_waterml1(document, as_datetime=args.datetime, tz=args.tz)
        _log_result(result)

    log.info("All documents processed.")


if __name__ == "__main__":
    main()
