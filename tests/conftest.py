from __future__ import annotations

import django
import pytest

from owsclient import conf
from owsclient.cache import clear_cache
from owsclient.parsers.xml import NSElement, parse_xml_from_string
from tests.utils import read_file


def pytest_configure():
    print(f"Running with Django {django.__version__}")
    print(f"Using OWSCLIENT_FORCE_XY_BOUNDING_BOXES={conf.OWSCLIENT_FORCE_XY_BOUNDING_BOXES}")


@pytest.fixture(autouse=True)
def fresh_cache():
    """Each test runs its own event loop, so cached futures can't be shared between tests."""
    clear_cache()
    yield
    clear_cache()


@pytest.fixture()
def wms_130_xml() -> str:
    return read_file("wms-capabilities-1.3.0.xml")


@pytest.fixture()
def wms_111_xml() -> str:
    return read_file("wms-capabilities-1.1.1.xml")


@pytest.fixture()
def wfs_200_xml() -> str:
    return read_file("wfs-capabilities-2.0.0.xml")


@pytest.fixture()
def wfs_110_xml() -> str:
    return read_file("wfs-capabilities-1.1.0.xml")


@pytest.fixture()
def wfs_100_xml() -> str:
    return read_file("wfs-capabilities-1.0.0.xml")


@pytest.fixture()
def describe_places_doc() -> NSElement:
    return parse_xml_from_string(read_file("wfs-describe-places.xsd"))
