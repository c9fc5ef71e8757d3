"""
Series extractor for WaterML 1.x documents.

One ``timeSeries`` node holds a single site/parameter/statistic
combination:

  timeSeries
    sourceInfo     siteName, siteCode(@agencyCode, @network),
                   timeZoneInfo/defaultTimeZone(@zoneAbbreviation, ...),
                   geogLocation(@srs)/latitude|longitude, siteProperty(@name)*
    variable       variableCode, variableName, ..., unit,
                   options/option(@name='Statistic', @optionCode)
    values         value(@dateTime, @qualifiers)*

``extract_series()`` turns that node into a ``SeriesRecord``: the
observation vector plus the site, variable, and statistic descriptors.
It knows nothing about merging.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

import pandas as pd

from waterml_ingest.document import (
    NS_PREFIX,
    WATERML_1_1_NS,
    attrs_of,
    children,
    find_all,
    local_name,
    text_of,
)
from waterml_ingest.exceptions import MalformedSeriesError
from waterml_ingest.parsers.base import Observation, SeriesRecord, StatisticDescriptor
from waterml_ingest.transforms.numbers import parse_values
from waterml_ingest.transforms.timestamps import parse_timestamps, zone_label

logger = logging.getLogger(__name__)

# Location children renamed to canonical site-table columns
_LOCATION_RENAMES = {"latitude": "dec_lat_va", "longitude": "dec_lon_va"}
# Variable children renamed to avoid colliding with other tables
_VARIABLE_RENAMES = {"unit": "param_unit"}

_STATISTIC_OPTION = "Statistic"


def _first(nodes: list[ET.Element]) -> ET.Element | None:
    return nodes[0] if nodes else None


def _child(node: ET.Element, name: str) -> ET.Element | None:
    """First direct child of *node* with local name *name*."""
    for el in children(node):
        if local_name(el) == name:
            return el
    return None


def _site_descriptor(source_info: ET.Element, site_no: str | None, ns: str) -> dict[str, str | None]:
    """One row of site metadata.

    Key order: site_no, location, default zone attributes, siteName,
    siteCode attributes, srs, then siteProperty values by declared name.
    """
    row: dict[str, str | None] = {"site_no": site_no}

    geog = _first(find_all(source_info, f".//{NS_PREFIX}:geogLocation", ns))
    if geog is not None:
        for el in children(geog):
            name = local_name(el)
            row[_LOCATION_RENAMES.get(name, name)] = text_of(el)

    default_tz = _first(find_all(source_info, f".//{NS_PREFIX}:defaultTimeZone", ns))
    if default_tz is not None:
        row.update(attrs_of(default_tz))

    site_name = _child(source_info, "siteName")
    if site_name is not None:
        row["siteName"] = text_of(site_name)

    site_code = _child(source_info, "siteCode")
    if site_code is not None:
        row.update(attrs_of(site_code))

    if geog is not None:
        row["srs"] = attrs_of(geog).get("srs")

    for el in children(source_info):
        if local_name(el) == "siteProperty":
            row[attrs_of(el).get("name", "")] = text_of(el)

    return row


def _variable_descriptor(variable: ET.Element) -> dict[str, str | None]:
    """Text of every variable child keyed by element name (first wins)."""
    row: dict[str, str | None] = {}
    for el in children(variable):
        name = local_name(el)
        key = _VARIABLE_RENAMES.get(name, name)
        row.setdefault(key, text_of(el))
    return row


def _statistic(variable: ET.Element, ns: str) -> StatisticDescriptor | None:
    for option in find_all(variable, f".//{NS_PREFIX}:option", ns):
        attrs = attrs_of(option)
        if attrs.get("name") == _STATISTIC_OPTION:
            return StatisticDescriptor(code=attrs.get("optionCode"), name=text_of(option))
    return None


def extract_series(
    node: ET.Element,
    as_datetime: bool = False,
    tz: str | None = None,
    namespace: str = WATERML_1_1_NS,
) -> SeriesRecord:
    """Extract one ``timeSeries`` node into a ``SeriesRecord``.

    Args:
        node: The ``timeSeries`` element.
        as_datetime: If True, parse timestamps to zone-labelled
            ``pd.Timestamp`` values and fill ``tz_cd`` with the override
            (or ``UTC``). If False, keep raw strings and fill ``tz_cd``
            with the site's default zone abbreviation.
        tz: Already-validated timezone override, or ``None``.
        namespace: WaterML namespace URI of the document.

    Returns:
        A ``SeriesRecord``.

    Raises:
        MalformedSeriesError: If ``sourceInfo``, ``variable`` or
            ``variableCode`` is missing.
        UnsupportedTimestampFormatError: If ``as_datetime`` and a
            timestamp matches no accepted format.
    """
    ns = namespace
    source_info = _first(find_all(node, f".//{NS_PREFIX}:sourceInfo", ns))
    if source_info is None:
        raise MalformedSeriesError(
            f"timeSeries {attrs_of(node).get('name', '?')!r} has no sourceInfo block"
        )
    variable = _first(find_all(node, f".//{NS_PREFIX}:variable", ns))
    if variable is None:
        raise MalformedSeriesError(
            f"timeSeries {attrs_of(node).get('name', '?')!r} has no variable block"
        )
    variable_code = _child(variable, "variableCode")
    if variable_code is None:
        raise MalformedSeriesError(
            f"timeSeries {attrs_of(node).get('name', '?')!r} has no variableCode"
        )

    site_code = _child(source_info, "siteCode")
    site_no = text_of(site_code) if site_code is not None else None
    agency_code = attrs_of(site_code).get("agencyCode") if site_code is not None else None

    statistic = _statistic(variable, ns)
    parameter_code = text_of(variable_code)

    # -- Observations ---------------------------------------------------------
    value_nodes = find_all(node, f".//{NS_PREFIX}:value", ns)
    value_attrs = [attrs_of(el) for el in value_nodes]
    values = parse_values([text_of(el) for el in value_nodes])
    raw_times = [attrs.get("dateTime") for attrs in value_attrs]

    if as_datetime:
        timestamps: list[str | pd.Timestamp] = list(parse_timestamps(raw_times, tz))
        tz_label: str | None = zone_label(tz)
    else:
        timestamps = list(raw_times)
        default_tz = _first(find_all(source_info, f".//{NS_PREFIX}:defaultTimeZone", ns))
        tz_label = attrs_of(default_tz).get("zoneAbbreviation") if default_tz is not None else None

    observations = [
        Observation(
            value=float(value),
            timestamp=timestamp,
            qualifier=attrs.get("qualifiers"),
            timezone_label=tz_label,
        )
        for value, timestamp, attrs in zip(values, timestamps, value_attrs)
    ]

    record = SeriesRecord(
        agency_code=agency_code,
        site_no=site_no,
        parameter_code=parameter_code,
        statistic_code=statistic.code if statistic is not None else None,
        observations=observations,
        site_descriptor=_site_descriptor(source_info, site_no, ns),
        variable_descriptor=_variable_descriptor(variable),
        statistic_descriptor=statistic,
        as_datetime=as_datetime,
        timezone=zone_label(tz) if as_datetime else None,
    )
    logger.debug(
        "Extracted series %s/%s: %d observations, qualifiers=%s",
        site_no, record.value_column, len(record), record.has_qualifiers,
    )
    return record
