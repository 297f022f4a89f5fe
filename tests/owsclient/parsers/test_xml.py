import pytest

from owsclient.exceptions import ExternalParsingError, MalformedDocument
from owsclient.parsers.xml import (
    NSElement,
    find_child_element,
    find_child_path,
    find_children_elements,
    get_children_elements,
    get_element_attribute,
    get_element_name,
    get_element_text,
    get_root_element,
    parse_qname,
    parse_xml_from_string,
    split_ns,
    strip_namespace,
    xmlns,
)

XML = """<?xml version="1.0" encoding="UTF-8"?>
<root xmlns="http://www.opengis.net/wms" xmlns:xlink="http://www.w3.org/1999/xlink">
  <Layer queryable="1">
    <Name>first</Name>
    <Title>First <b>bold</b> layer</Title>
    <OnlineResource xlink:href="http://example.org/"/>
    <Layer><Name>nested</Name></Layer>
  </Layer>
  <Layer><Name>second</Name></Layer>
  <Other/>
</root>"""


class TestParseQName:
    """Prove that namespace aliases can be resolved"""

    def test_alias(self):
        xml_name = parse_qname("ns0:Point", ns_aliases={"ns0": "http://www.opengis.net/gml/3.2"})
        assert xml_name == "{http://www.opengis.net/gml/3.2}Point"

    def test_missing(self):
        """Unknown prefixes are kept, as servers don't always declare them."""
        xml_name = parse_qname("gml:Point", ns_aliases={"ns0": "http://www.opengis.net/gml/3.2"})
        assert xml_name == "gml:Point"

    def test_default_alias(self):
        xml_name = parse_qname("Point", ns_aliases={"": "http://www.opengis.net/gml/3.2"})
        assert xml_name == "{http://www.opengis.net/gml/3.2}Point"

    def test_no_prefix(self):
        assert parse_qname("Point", ns_aliases={}) == "Point"

    def test_empty(self):
        assert parse_qname("", ns_aliases={}) is None


def test_split_ns():
    """Prove that xml names can be properly splitted into their namespace and localname"""
    ns, localname = split_ns("{http://www.opengis.net/gml/3.2}Point")
    assert ns == "http://www.opengis.net/gml/3.2"
    assert localname == "Point"

    assert split_ns("Point") == (None, "Point")


@pytest.mark.parametrize(
    "name,expect",
    [
        ("{http://www.opengis.net/wms}Layer", "Layer"),
        ("wfs:FeatureType", "FeatureType"),
        ("Layer", "Layer"),
    ],
)
def test_strip_namespace(name, expect):
    assert strip_namespace(name) == expect


class TestXmlNS:
    """Prove that the 'xmlns' enum works as advertised."""

    def test_str(self):
        assert str(xmlns.wms) == "http://www.opengis.net/wms"

    def test_contains(self):
        assert "{http://www.opengis.net/gml/3.2}Point" in xmlns.gml32
        assert "{http://www.opengis.net/gml/3.2}Point" not in xmlns.gml21


class TestParseXml:
    def test_elements(self):
        root = parse_xml_from_string(XML)
        assert isinstance(root, NSElement)
        assert get_element_name(root) == "{http://www.opengis.net/wms}root"
        assert root.ns_aliases == {
            "": "http://www.opengis.net/wms",
            "xlink": "http://www.w3.org/1999/xlink",
        }

    def test_bytes(self):
        root = parse_xml_from_string(XML.encode())
        assert strip_namespace(root.tag) == "root"

    def test_bytes_declared_encoding(self):
        xml = '<?xml version="1.0" encoding="ISO-8859-1"?>\n<root>Géologie</root>'
        root = parse_xml_from_string(xml.encode("latin-1"))
        assert get_element_text(root) == "Géologie"

    def test_invalid(self):
        with pytest.raises(ExternalParsingError):
            parse_xml_from_string("<root><unclosed></root>")

    def test_entities_refused(self):
        """Prove that entity expansion is not possible."""
        xml = (
            '<!DOCTYPE root [<!ENTITY lol "lol"><!ENTITY lol2 "&lol;&lol;">]>'
            "<root>&lol2;</root>"
        )
        with pytest.raises(ExternalParsingError):
            parse_xml_from_string(xml)

    def test_external_doctype_dropped(self):
        xml = (
            '<?xml version="1.0"?>\n'
            '<!DOCTYPE root SYSTEM "http://example.org/root.dtd">\n'
            "<root>text</root>"
        )
        root = parse_xml_from_string(xml)
        assert get_element_text(root) == "text"


class TestLookups:
    """Prove that elements are found by their local name only."""

    @pytest.fixture()
    def root(self) -> NSElement:
        return parse_xml_from_string(XML)

    def test_find_children(self, root):
        layers = find_children_elements(root, "Layer")
        assert [get_element_text(find_child_element(el, "Name")) for el in layers] == [
            "first",
            "second",
        ]
        assert len(get_children_elements(root)) == 3

    def test_find_children_recursive(self, root):
        names = find_children_elements(root, "Name", recursive=True)
        assert [get_element_text(el) for el in names] == ["first", "nested", "second"]

    def test_find_child_missing(self, root):
        assert find_child_element(root, "Missing") is None
        assert find_children_elements(root, "Missing") == []

    def test_find_child_path(self, root):
        name_el = find_child_path(root, "Layer", "Layer", "Name")
        assert get_element_text(name_el) == "nested"
        assert find_child_path(root, "Missing", "Name") is None

    def test_text(self, root):
        title_el = find_child_path(root, "Layer", "Title")
        assert get_element_text(title_el) == "First bold layer"
        assert get_element_text(None) == ""

    def test_attribute(self, root):
        layer_el = find_child_element(root, "Layer")
        assert get_element_attribute(layer_el, "queryable") == "1"
        assert get_element_attribute(layer_el, "opaque") == ""

        resource_el = find_child_element(layer_el, "OnlineResource")
        assert get_element_attribute(resource_el, "xlink:href") == "http://example.org/"
        assert get_element_attribute(resource_el, "href") == "http://example.org/"

    def test_root_element(self, root):
        assert get_root_element(root) is root

        with pytest.raises(MalformedDocument):
            get_root_element(None)
