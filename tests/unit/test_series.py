"""
Unit tests for the series extractor (waterml_ingest.parsers.series).

Builds single ``timeSeries`` nodes from small XML templates and checks
the resulting SeriesRecord: observations, zone labels, qualifier
detection, descriptors, column naming, and malformed-input errors.
"""

from __future__ import annotations

import math
import xml.etree.ElementTree as ET

import pandas as pd
import pytest

from waterml_ingest.exceptions import MalformedSeriesError, UnsupportedTimestampFormatError
from waterml_ingest.parsers.series import extract_series

NS = "http://www.cuahsi.org/waterML/1.1/"

_SOURCE_INFO = """
  <ns1:sourceInfo>
    <ns1:siteName>CHATTOOGA RIVER NEAR CLAYTON, GA</ns1:siteName>
    <ns1:siteCode network="NWIS" agencyCode="USGS">02177000</ns1:siteCode>
    <ns1:timeZoneInfo>
      <ns1:defaultTimeZone zoneOffset="-05:00" zoneAbbreviation="EST"/>
    </ns1:timeZoneInfo>
    <ns1:geoLocation>
      <ns1:geogLocation srs="EPSG:4326">
        <ns1:latitude>34.8140104</ns1:latitude>
        <ns1:longitude>-83.3059896</ns1:longitude>
      </ns1:geogLocation>
    </ns1:geoLocation>
    <ns1:siteProperty name="siteTypeCd">ST</ns1:siteProperty>
    <ns1:siteProperty name="hucCd">03060102</ns1:siteProperty>
  </ns1:sourceInfo>"""

_VARIABLE = """
  <ns1:variable>
    <ns1:variableCode network="NWIS">00060</ns1:variableCode>
    <ns1:variableName>Streamflow</ns1:variableName>
    <ns1:unit><ns1:unitCode>ft3/s</ns1:unitCode></ns1:unit>
    {options}
    <ns1:noDataValue>-999999.0</ns1:noDataValue>
  </ns1:variable>"""

_STAT_OPTION = '<ns1:options><ns1:option name="Statistic" optionCode="00003">Mean</ns1:option></ns1:options>'

_DEFAULT_VALUES = (
    '<ns1:value qualifiers="A" dateTime="2012-09-01T00:00:00.000">8.5</ns1:value>'
    '<ns1:value qualifiers="A e" dateTime="2012-09-02T00:00:00.000">7.9</ns1:value>'
)


def _series(
    values: str = _DEFAULT_VALUES,
    *,
    source_info: str | None = _SOURCE_INFO,
    variable: str | None = None,
    statistic: bool = True,
) -> ET.Element:
    """Build one timeSeries element."""
    if variable is None:
        variable = _VARIABLE.format(options=_STAT_OPTION if statistic else "")
    xml = (
        f'<ns1:timeSeries xmlns:ns1="{NS}" name="test">'
        f"{source_info or ''}{variable}"
        f"<ns1:values>{values}</ns1:values>"
        f"</ns1:timeSeries>"
    )
    return ET.fromstring(xml)


# ---------------------------------------------------------------------------
# Observations
# ---------------------------------------------------------------------------

class TestObservations:
    """Value, timestamp, and qualifier extraction."""

    def test_values_and_order(self):
        record = extract_series(_series())
        assert [o.value for o in record.observations] == [8.5, 7.9]
        assert len(record) == 2

    def test_bad_value_is_nan(self):
        record = extract_series(_series(
            '<ns1:value dateTime="2012-09-01">Ice</ns1:value>'
            '<ns1:value dateTime="2012-09-02">3</ns1:value>'
        ))
        assert math.isnan(record.observations[0].value)
        assert record.observations[1].value == 3.0

    def test_raw_timestamps_kept_verbatim(self):
        record = extract_series(_series())
        assert record.observations[0].timestamp == "2012-09-01T00:00:00.000"

    def test_document_order_not_sorted(self):
        record = extract_series(_series(
            '<ns1:value dateTime="2012-09-02">2</ns1:value>'
            '<ns1:value dateTime="2012-09-01">1</ns1:value>'
        ))
        assert [o.timestamp for o in record.observations] == ["2012-09-02", "2012-09-01"]

    def test_qualifiers_extracted(self):
        record = extract_series(_series())
        assert [o.qualifier for o in record.observations] == ["A", "A e"]
        assert record.has_qualifiers

    def test_no_qualifiers_detected(self):
        record = extract_series(_series('<ns1:value dateTime="2012-09-01">1</ns1:value>'))
        assert record.observations[0].qualifier is None
        assert not record.has_qualifiers

    def test_partial_qualifiers_still_count(self):
        record = extract_series(_series(
            '<ns1:value dateTime="2012-09-01">1</ns1:value>'
            '<ns1:value qualifiers="P" dateTime="2012-09-02">2</ns1:value>'
        ))
        assert record.has_qualifiers

    def test_empty_series(self):
        record = extract_series(_series(""))
        assert len(record) == 0
        assert not record.has_qualifiers


# ---------------------------------------------------------------------------
# Zone labels
# ---------------------------------------------------------------------------

class TestZoneLabels:
    """The three zone-label modes."""

    def test_raw_mode_uses_site_abbreviation(self):
        record = extract_series(_series(), as_datetime=False)
        assert {o.timezone_label for o in record.observations} == {"EST"}

    def test_raw_mode_ignores_override(self):
        record = extract_series(_series(), as_datetime=False, tz="America/Chicago")
        assert {o.timezone_label for o in record.observations} == {"EST"}
        assert record.observations[0].timestamp == "2012-09-01T00:00:00.000"

    def test_datetime_mode_defaults_to_utc(self):
        record = extract_series(_series(), as_datetime=True)
        assert {o.timezone_label for o in record.observations} == {"UTC"}
        ts = record.observations[0].timestamp
        assert isinstance(ts, pd.Timestamp)
        assert ts == pd.Timestamp("2012-09-01T00:00:00Z")
        assert record.timezone == "UTC"

    def test_datetime_mode_uses_override(self):
        record = extract_series(
            _series('<ns1:value dateTime="2013-11-03T01:15:00.000-04:00">552</ns1:value>'),
            as_datetime=True,
            tz="America/Chicago",
        )
        obs = record.observations[0]
        assert obs.timezone_label == "America/Chicago"
        assert str(obs.timestamp.tz) == "America/Chicago"
        assert obs.timestamp == pd.Timestamp("2013-11-03T05:15:00Z")

    def test_unparseable_timestamp_raises(self):
        with pytest.raises(UnsupportedTimestampFormatError):
            extract_series(
                _series('<ns1:value dateTime="Sept 1 2012">1</ns1:value>'),
                as_datetime=True,
            )

    def test_unparseable_timestamp_ok_in_raw_mode(self):
        record = extract_series(_series('<ns1:value dateTime="Sept 1 2012">1</ns1:value>'))
        assert record.observations[0].timestamp == "Sept 1 2012"


# ---------------------------------------------------------------------------
# Descriptors and naming
# ---------------------------------------------------------------------------

class TestDescriptors:
    """Site, variable, and statistic descriptors."""

    def test_identity(self):
        record = extract_series(_series())
        assert record.site_no == "02177000"
        assert record.agency_code == "USGS"
        assert record.parameter_code == "00060"
        assert record.statistic_code == "00003"

    def test_site_descriptor(self):
        site = extract_series(_series()).site_descriptor
        assert list(site) == [
            "site_no", "dec_lat_va", "dec_lon_va", "zoneOffset", "zoneAbbreviation",
            "siteName", "network", "agencyCode", "srs", "siteTypeCd", "hucCd",
        ]
        assert site["dec_lat_va"] == "34.8140104"
        assert site["dec_lon_va"] == "-83.3059896"
        assert site["zoneAbbreviation"] == "EST"
        assert site["srs"] == "EPSG:4326"
        assert site["hucCd"] == "03060102"

    def test_variable_descriptor_renames_unit(self):
        variable = extract_series(_series()).variable_descriptor
        assert variable["variableCode"] == "00060"
        assert variable["param_unit"] == "ft3/s"
        assert "unit" not in variable
        assert variable["options"] == "Mean"
        assert variable["noDataValue"] == "-999999.0"

    def test_statistic_descriptor(self):
        stat = extract_series(_series()).statistic_descriptor
        assert stat.code == "00003"
        assert stat.name == "Mean"
        assert stat.as_row() == {"stat_cd": "00003", "stat_nm": "Mean"}

    def test_column_names(self):
        record = extract_series(_series())
        assert record.value_column == "X_00060_00003"
        assert record.qualifier_column == "X_00060_00003_cd"
        assert record.expected_columns == {"X_00060_00003", "X_00060_00003_cd"}

    def test_missing_statistic_drops_segment(self):
        record = extract_series(_series(statistic=False))
        assert record.statistic_code is None
        assert record.statistic_descriptor is None
        assert record.value_column == "X_00060"
        assert record.qualifier_column == "X_00060_cd"

    def test_minimal_source_info(self):
        """Optional site fields may be absent without error."""
        record = extract_series(_series(source_info=(
            "<ns1:sourceInfo>"
            '<ns1:siteCode agencyCode="USGS">01</ns1:siteCode>'
            "</ns1:sourceInfo>"
        )))
        assert record.site_descriptor == {"site_no": "01", "agencyCode": "USGS"}
        assert record.observations[0].timezone_label is None


# ---------------------------------------------------------------------------
# Malformed input
# ---------------------------------------------------------------------------

class TestMalformed:
    """Required sub-structures."""

    def test_missing_source_info(self):
        with pytest.raises(MalformedSeriesError, match="sourceInfo"):
            extract_series(_series(source_info=None))

    def test_missing_variable(self):
        with pytest.raises(MalformedSeriesError, match="variable block"):
            extract_series(_series(variable="<ns1:values/>"))

    def test_missing_variable_code(self):
        with pytest.raises(MalformedSeriesError, match="variableCode"):
            extract_series(_series(variable="<ns1:variable><ns1:variableName>x</ns1:variableName></ns1:variable>"))
