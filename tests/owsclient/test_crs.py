import pytest

from owsclient.crs import is_north_east_order


class TestAxisOrder:
    @pytest.mark.parametrize("code", ["EPSG:4326", "EPSG:4171", "urn:ogc:def:crs:EPSG::4326"])
    def test_north_east(self, code):
        """Geographic systems of EPSG define latitude as first axis."""
        assert is_north_east_order(code)

    @pytest.mark.parametrize("code", ["CRS:84", "EPSG:3857", "EPSG:2154", "EPSG:28992"])
    def test_east_north(self, code):
        assert not is_north_east_order(code)

    def test_unknown(self):
        """Unknown codes are treated as x/y."""
        assert not is_north_east_order("FOO:1234")
