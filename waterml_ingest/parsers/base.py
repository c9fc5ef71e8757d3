"""
Series extraction data model for waterml-ingest.

The extractor turns one ``timeSeries`` node into a ``SeriesRecord``; the
merge engine consumes nothing else. Keeping the record a plain dataclass
means the merge logic can be tested with synthetic records and no XML.

Descriptor mappings (site / variable) are open-ended: the set of keys
varies per series (e.g., one site reports ``hucCd`` and another does not),
so they are plain ``dict[str, str | None]`` rather than fixed-field models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd

# Identity columns shared by every row-block, in output order
AGENCY_COLUMN = "agency_cd"
SITE_COLUMN = "site_no"
DATETIME_COLUMN = "datetime"
TZ_COLUMN = "tz_cd"
IDENTITY_COLUMNS = (AGENCY_COLUMN, SITE_COLUMN, DATETIME_COLUMN, TZ_COLUMN)

STAT_CODE_COLUMN = "stat_cd"
STAT_NAME_COLUMN = "stat_nm"


def value_column_name(parameter_code: str, statistic_code: str | None) -> str:
    """``X_<parameter>_<statistic>``, or ``X_<parameter>`` without a statistic."""
    parts = ["X", parameter_code]
    if statistic_code:
        parts.append(statistic_code)
    return "_".join(parts)


def qualifier_column_name(parameter_code: str, statistic_code: str | None) -> str:
    return f"{value_column_name(parameter_code, statistic_code)}_cd"


@dataclass(frozen=True)
class Observation:
    """One reading from a series.

    Attributes:
        value: Parsed value; ``NaN`` when the text was not numeric.
        timestamp: Raw ``dateTime`` string, or a zone-labelled
            ``pd.Timestamp`` when parsed with ``as_datetime=True``.
        qualifier: The ``qualifiers`` attribute, ``None`` if absent.
        timezone_label: Value written to ``tz_cd`` for this row.
    """
    value: float
    timestamp: str | pd.Timestamp
    qualifier: str | None = None
    timezone_label: str | None = None


@dataclass(frozen=True)
class StatisticDescriptor:
    """Statistic option of a variable (e.g., ``00003`` / ``Mean``)."""
    code: str | None
    name: str | None

    def as_row(self) -> dict[str, str | None]:
        return {STAT_CODE_COLUMN: self.code, STAT_NAME_COLUMN: self.name}


@dataclass
class SeriesRecord:
    """Everything extracted from one ``timeSeries`` node.

    Attributes:
        agency_code: Reporting agency (``siteCode/@agencyCode``).
        site_no: Site number (``siteCode`` text).
        parameter_code: ``variableCode`` text.
        statistic_code: ``option[@name='Statistic']/@optionCode``, or
            ``None`` for non-statistical (e.g., instantaneous) data.
        observations: Readings in document order (not necessarily
            chronological).
        site_descriptor: One row of site metadata.
        variable_descriptor: One row of variable metadata.
        statistic_descriptor: Statistic code/name, ``None`` when absent.
        as_datetime: Whether ``observations`` carry parsed timestamps.
        timezone: Zone label of parsed timestamps (only when ``as_datetime``).
    """
    agency_code: str | None
    site_no: str | None
    parameter_code: str
    statistic_code: str | None = None
    observations: list[Observation] = field(default_factory=list)
    site_descriptor: dict[str, str | None] = field(default_factory=dict)
    variable_descriptor: dict[str, str | None] = field(default_factory=dict)
    statistic_descriptor: StatisticDescriptor | None = None
    as_datetime: bool = False
    timezone: str | None = None

    @property
    def value_column(self) -> str:
        return value_column_name(self.parameter_code, self.statistic_code)

    @property
    def qualifier_column(self) -> str:
        return qualifier_column_name(self.parameter_code, self.statistic_code)

    @property
    def has_qualifiers(self) -> bool:
        """True unless every observation lacks a qualifier."""
        return any(obs.qualifier is not None for obs in self.observations)

    @property
    def expected_columns(self) -> frozenset[str]:
        """Value/qualifier column names this series may contribute.

        Used by the merge engine to find stale all-missing placeholders.
        """
        return frozenset({self.value_column, self.qualifier_column})

    def __len__(self) -> int:
        return len(self.observations)
