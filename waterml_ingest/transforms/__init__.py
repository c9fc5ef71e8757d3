"""
Transforms sub-package for waterml-ingest.

Small, independently testable conversions applied to raw observation
text by the series extractor:

- numbers.py: Observation value text -> float (``NaN`` on failure).
- timestamps.py: Observation ``dateTime`` text -> zone-labelled datetimes.
"""
