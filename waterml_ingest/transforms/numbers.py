"""
Number parsing transform for waterml-ingest.

Observation values arrive as element text. This transform:
1. Strips whitespace from each value.
2. Coerces to float via ``pd.to_numeric(errors='coerce')``.

Anything that fails to parse (empty text, ``"Ice"``, ``"Eqp"`` ...) becomes
``NaN`` so that one bad reading never aborts a multi-site import.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pandas as pd


def parse_values(texts: Sequence[str | None]) -> pd.Series:
    """Parse observation value strings into a float64 Series.

    Args:
        texts: Raw value text in document order. ``None`` is allowed.

    Returns:
        A float64 Series the same length as *texts*.
    """
    raw = pd.Series(list(texts), dtype=object)
    cleaned = raw.where(raw.isna(), raw.astype(str).str.strip())
    return pd.to_numeric(cleaned, errors="coerce").astype(np.float64)
