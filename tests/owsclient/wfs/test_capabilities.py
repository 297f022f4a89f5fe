import pytest

from owsclient.exceptions import MalformedDocument
from owsclient.parsers.xml import parse_xml_from_string
from owsclient.types import FeatureTypeSummary
from owsclient.wfs.capabilities import (
    parse_wfs_capabilities,
    read_feature_types_from_capabilities,
    read_info_from_capabilities,
    read_operation_urls_from_capabilities,
    read_version_from_capabilities,
)

PIGMA_URL = "https://www.pigma.org/geoserver/wfs"
PIGMA_FORMATS = ("application/gml+xml; version=3.2", "application/json", "text/csv")


class TestReadVersion:
    def test_versions(self, wfs_100_xml, wfs_110_xml, wfs_200_xml):
        assert read_version_from_capabilities(parse_xml_from_string(wfs_100_xml)) == "1.0.0"
        assert read_version_from_capabilities(parse_xml_from_string(wfs_110_xml)) == "1.1.0"
        assert read_version_from_capabilities(parse_xml_from_string(wfs_200_xml)) == "2.0.0"

    def test_exception_report(self):
        doc = parse_xml_from_string(
            '<ows:ExceptionReport xmlns:ows="http://www.opengis.net/ows/1.1" version="2.0.0">'
            '<ows:Exception exceptionCode="InvalidParameterValue">'
            "<ows:ExceptionText>Unknown service</ows:ExceptionText>"
            "</ows:Exception>"
            "</ows:ExceptionReport>"
        )
        with pytest.raises(MalformedDocument, match="Unknown service"):
            read_version_from_capabilities(doc)

    def test_unsupported_version(self):
        doc = parse_xml_from_string(
            '<WFS_Capabilities version="3.0.0"><FeatureTypeList/></WFS_Capabilities>'
        )
        with pytest.raises(MalformedDocument, match="Unsupported WFS version: 3.0.0"):
            read_feature_types_from_capabilities(doc)


class TestWfs200:
    @pytest.fixture()
    def doc(self, wfs_200_xml):
        return parse_xml_from_string(wfs_200_xml)

    def test_feature_types(self, doc):
        feature_types = read_feature_types_from_capabilities(doc)
        assert feature_types == (
            FeatureTypeSummary(
                name="hierarchy:departements",
                title="Départements",
                abstract="Limites des départements",
                keywords=("departements", "limites"),
                bounding_box=("-5.1447", "41.3337", "9.5613", "51.0890"),
                default_crs="urn:ogc:def:crs:EPSG::2154",
                other_crs=("urn:ogc:def:crs:EPSG::32615", "urn:ogc:def:crs:EPSG::32616"),
                output_formats=PIGMA_FORMATS,
            ),
            FeatureTypeSummary(
                name="cities:places",
                title="Places",
                abstract="Cities and towns",
                bounding_box=("-180", "-90", "180", "90"),
                default_crs="urn:ogc:def:crs:EPSG::4326",
                output_formats=PIGMA_FORMATS,
            ),
        )

    def test_info(self, doc):
        info = read_info_from_capabilities(doc)
        assert info.name == "WFS"
        assert info.title == "Service WFS de l'IDS régionale PIGMA"
        assert info.abstract == "Les données de la plateforme PIGMA."
        assert info.keywords == ("WFS", "WMS", "GEOSERVER")
        assert info.fees == "NONE"
        assert info.constraints == "NONE"
        assert info.output_formats == PIGMA_FORMATS
        assert info.info_formats == ()

    def test_provider(self, doc):
        contact = read_info_from_capabilities(doc).provider.contact
        assert contact.name == "Administrateur PIGMA"
        assert contact.organization == "GIP ATGeRi"
        assert contact.position == "Administrateur"
        assert contact.phone == "05 57 85 40 42"
        assert contact.fax == "05 57 85 40 40"
        assert contact.email == "admin.pigma@gipatgeri.fr"
        assert contact.address.delivery_point == "6 parvis des Chartrons"
        assert contact.address.city == "Bordeaux"
        assert contact.address.administrative_area == "Nouvelle-Aquitaine"
        assert contact.address.postal_code == "33075"
        assert contact.address.country == "France"

    def test_operation_urls(self, doc):
        assert read_operation_urls_from_capabilities(doc) == {
            "GetCapabilities": {"Get": PIGMA_URL, "Post": PIGMA_URL},
            "DescribeFeatureType": {"Get": PIGMA_URL, "Post": PIGMA_URL},
            "GetFeature": {"Get": PIGMA_URL, "Post": PIGMA_URL},
        }


class TestWfs110:
    @pytest.fixture()
    def doc(self, wfs_110_xml):
        return parse_xml_from_string(wfs_110_xml)

    def test_feature_types(self, doc):
        (places,) = read_feature_types_from_capabilities(doc)
        assert places.name == "cities:places"
        assert places.keywords == ("places",)
        assert places.default_crs == "urn:x-ogc:def:crs:EPSG:4326"
        assert places.other_crs == ("urn:x-ogc:def:crs:EPSG:3857",)
        assert places.bounding_box == ("-180", "-90", "180", "90")
        # Formats per feature type
        assert places.output_formats == ("text/xml; subtype=gml/3.1.1", "application/json")

    def test_info(self, doc):
        info = read_info_from_capabilities(doc)
        assert info.name == "WFS"
        assert info.output_formats == ("text/xml; subtype=gml/3.1.1", "SHAPE-ZIP")
        assert info.provider.contact.organization == "Example"
        assert info.provider.contact.name == ""

    def test_operation_urls(self, doc):
        assert read_operation_urls_from_capabilities(doc) == {
            "GetCapabilities": {"Get": "https://example.org/geoserver/wfs?"},
            "GetFeature": {
                "Get": "https://example.org/geoserver/wfs/features?",
                "Post": "https://example.org/geoserver/wfs/features",
            },
        }


class TestWfs100:
    @pytest.fixture()
    def doc(self, wfs_100_xml):
        return parse_xml_from_string(wfs_100_xml)

    def test_feature_types(self, doc):
        places, roads = read_feature_types_from_capabilities(doc)
        assert places == FeatureTypeSummary(
            name="cities:places",
            title="Places",
            abstract="Cities and towns",
            keywords=("places",),
            bounding_box=("-180", "-90", "180", "90"),
            default_crs="EPSG:4326",
            other_crs=(),
            output_formats=("GML2", "GML3", "SHAPE-ZIP"),
        )
        assert roads.default_crs == "EPSG:3857"
        assert roads.bounding_box is None
        assert roads.abstract == ""

    def test_info(self, doc):
        info = read_info_from_capabilities(doc)
        assert info.name == "WFS"
        assert info.title == "Cities WFS"
        assert info.keywords == ("cities", "places")
        assert info.output_formats == ("GML2", "GML3", "SHAPE-ZIP")
        assert info.provider is None

    def test_operation_urls(self, doc):
        assert read_operation_urls_from_capabilities(doc) == {
            "GetCapabilities": {
                "Get": "https://example.org/geoserver/wfs?request=GetCapabilities",
                "Post": "https://example.org/geoserver/wfs",
            },
            "DescribeFeatureType": {
                "Get": "https://example.org/geoserver/wfs?request=DescribeFeatureType"
            },
            "GetFeature": {"Get": "https://example.org/geoserver/wfs?request=GetFeature"},
        }


class TestParseCapabilities:
    def test_parse(self, wfs_200_xml):
        capabilities = parse_wfs_capabilities(wfs_200_xml)
        assert capabilities.version == "2.0.0"
        assert [ft.name for ft in capabilities.feature_types] == [
            "hierarchy:departements",
            "cities:places",
        ]
        assert capabilities.urls["GetFeature"]["Get"] == PIGMA_URL

    def test_missing_feature_type_name(self):
        xml = (
            '<WFS_Capabilities version="2.0.0">'
            "<FeatureTypeList><FeatureType><Title>No name</Title></FeatureType></FeatureTypeList>"
            "</WFS_Capabilities>"
        )
        with pytest.raises(MalformedDocument, match="has no <Name>"):
            read_feature_types_from_capabilities(parse_xml_from_string(xml))

    def test_bad_bounding_box(self):
        xml = (
            '<WFS_Capabilities version="2.0.0"><FeatureTypeList><FeatureType>'
            "<Name>a</Name>"
            "<WGS84BoundingBox><LowerCorner>1</LowerCorner><UpperCorner>2 3</UpperCorner>"
            "</WGS84BoundingBox>"
            "</FeatureType></FeatureTypeList></WFS_Capabilities>"
        )
        with pytest.raises(MalformedDocument, match="WGS84BoundingBox"):
            read_feature_types_from_capabilities(parse_xml_from_string(xml))
