"""
Shared test fixtures and path constants for waterml-ingest tests.

All fixture document paths are defined here as module-level constants
for easy discovery and modification. If fixture files move or new ones
are added, update this file.
"""

from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Fixture document paths -- edit here if files move or new ones are added
# ---------------------------------------------------------------------------
FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"

DV_TWO_SITES_XML = FIXTURE_DIR / "dv_two_sites.xml"
UV_OFFSETS_XML = FIXTURE_DIR / "uv_offsets.xml"
NO_SERIES_XML = FIXTURE_DIR / "no_series.xml"
MISSING_VARIABLE_XML = FIXTURE_DIR / "missing_variable.xml"

WATERML_NS = "http://www.cuahsi.org/waterML/1.1/"


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (runs against fixture documents)",
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def dv_two_sites_path() -> Path:
    return DV_TWO_SITES_XML


@pytest.fixture
def uv_offsets_path() -> Path:
    return UV_OFFSETS_XML


@pytest.fixture
def no_series_path() -> Path:
    return NO_SERIES_XML


@pytest.fixture
def missing_variable_path() -> Path:
    return MISSING_VARIABLE_XML


@pytest.fixture
def waterml_ns() -> str:
    return WATERML_NS
