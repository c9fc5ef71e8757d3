"""
Parsers sub-package for waterml-ingest.

- base.py defines the extraction data model (Observation, SeriesRecord,
  StatisticDescriptor) and the column-naming scheme.
- series.py implements extract_series() for one WaterML ``timeSeries`` node.
"""

from waterml_ingest.parsers.base import Observation, SeriesRecord, StatisticDescriptor
from waterml_ingest.parsers.series import extract_series

__all__ = ["Observation", "SeriesRecord", "StatisticDescriptor", "extract_series"]
