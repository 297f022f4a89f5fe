"""XML parsing for all fetched documents.

This logic uses the etree logic from the standard library,
with some extra extensions to expose the original namespace aliases.
Using defusedxml, malicious documents (e.g. entity expansion) are refused.

Capabilities documents are produced by many different server vendors.
Some use the default namespace, some use prefixes, and WMS 1.1.1 documents
have no namespace at all. Hence, all lookup functions in this module match
elements and attributes by their local name only.
"""

from __future__ import annotations

import logging
import re
import typing
from enum import Enum
from xml.etree.ElementTree import Element, ElementTree, QName, TreeBuilder

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import DefusedXMLParser, ParseError

from owsclient.exceptions import ExternalParsingError, MalformedDocument

logger = logging.getLogger(__name__)

__all__ = (
    "xmlns",
    "NSElement",
    "parse_xml_from_string",
    "parse_qname",
    "split_ns",
    "strip_namespace",
    "get_root_element",
    "get_element_name",
    "get_element_text",
    "get_element_attribute",
    "get_children_elements",
    "find_child_element",
    "find_child_path",
    "find_children_elements",
)

# WMS 1.1.1 documents refer to an external DTD, which is dropped before parsing.
# A DOCTYPE with an internal subset is left alone, so defusedxml still refuses it.
RE_DOCTYPE = re.compile(r"<!DOCTYPE[^>\[]*>")
RE_DOCTYPE_BYTES = re.compile(rb"<!DOCTYPE[^>\[]*>")


class xmlns(Enum):
    """Common namespaces within OGC service documents.
    Note these short aliases are arbitrary in XML syntax;
    the XML code may use any alias (such as ns0).
    The full qualified name (e.g. ``<{http://www.opengis.net/wms}Layer>``) is the actual tag name.
    """

    # XML standard
    xml = "http://www.w3.org/XML/1998/namespace"
    xsd = "http://www.w3.org/2001/XMLSchema"
    xsi = "http://www.w3.org/2001/XMLSchema-instance"
    xlink = "http://www.w3.org/1999/xlink"

    # APIs by the Open Geospatial Consortium (OGC)
    ogc = "http://www.opengis.net/ogc"
    ows10 = "http://www.opengis.net/ows"  # OGC Web Service (OWS) base classes
    ows11 = "http://www.opengis.net/ows/1.1"
    wms = "http://www.opengis.net/wms"  # Web Map Service (WMS) 1.3.0
    wfs1 = "http://www.opengis.net/wfs"  # Web Feature Service (WFS) 1.x
    wfs20 = "http://www.opengis.net/wfs/2.0"
    gml21 = "http://www.opengis.net/gml"
    gml32 = "http://www.opengis.net/gml/3.2"

    def __str__(self):
        # Python 3.11+ has StrEnum for this.
        return self.value

    def __contains__(self, tag: NSElement | str) -> bool:
        """Tell whether a given tag exists in this namespace"""
        if isinstance(tag, NSElement):
            tag = tag.tag
        elif not isinstance(tag, str):
            return False
        return tag.startswith(f"{{{self.value}}}")


class NSElement(Element):
    """Custom XML element, which also exposes its original namespace aliases.
    That information is needed to parse text content and attributes that hold
    a QName value. For example, a DescribeFeatureType response has:

    * ``<xsd:element name="geom" type="gml:PointPropertyType"/>``
    * ``<xsd:element name="count" type="xsd:int"/>``
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.ns_aliases = {}  # assigned by NSTreeBuilder, in {prefix: uri} format.

    def parse_qname(self, qname: str) -> str:
        """Resolve an aliased QName value to its fully qualified name."""
        return parse_qname(qname, self.ns_aliases)

    if typing.TYPE_CHECKING:
        # Make sure the type checking knows the actual type of the elements.
        def find(self, path: str, namespaces: dict[str, str] | None = None) -> NSElement | None:
            return super().find(path, namespaces)

        def findall(self, path: str, namespaces: dict[str, str] | None = None) -> list[NSElement]:
            return super().findall(path, namespaces)

        def __iter__(self) -> typing.Iterator[NSElement]:
            return super().__iter__()


def parse_qname(qname: str | None, ns_aliases: dict) -> str | None:
    """Resolve the QName aliases.

    For example, ``gml:Point`` will be resolved to ``{http://www.opengis.net/gml/3.2}Point``.
    Unlike strict XML parsing, an unknown prefix is kept as-is, as servers
    don't always declare the namespaces of the values they return.
    """
    if not qname:
        return None

    prefix, _, localname = qname.rpartition(":")
    try:
        uri = ns_aliases[prefix]
    except KeyError:
        if prefix:
            logger.debug("Can't resolve QName '%s', available namespaces: %r", qname, ns_aliases)
            return qname
        return localname

    return QName(uri, localname).text


class NSTreeBuilder(TreeBuilder):
    """Custom TreeBuilder to track namespaces."""

    def __init__(self, **kwargs):
        super().__init__(element_factory=NSElement, **kwargs)
        # A new stack level is added directly, as start_ns() is called before start()
        self.ns_stack = [{}]

    def start(self, tag, attrs):
        super().start(tag, attrs)
        self.ns_stack.append({})  # reserve stack for child tags

    def start_ns(self, prefix, uri):
        self.ns_stack[-1][prefix] = uri

    def end(self, tag) -> Element:
        element = super().end(tag)
        self.ns_stack.pop()  # clear reservation for child tags
        element.ns_aliases = self._flatten_ns()
        return element

    def _flatten_ns(self) -> dict:
        result = {}
        for level in self.ns_stack:
            result.update(level)
        return result


def parse_xml_from_string(xml_string: str | bytes) -> NSElement:
    """Provide a safe and consistent way for parsing XML.

    This uses a custom parser, so namespace aliases can be tracked.
    All elements also have an :attr:`ns_aliases` attribute that exposes
    the original alias that was used for the namespace.
    """
    # Passing a custom parser potentially circumvents defusedxml,
    # so note the parser is again configured in the same way:
    parser = DefusedXMLParser(
        target=NSTreeBuilder(),
        forbid_dtd=True,
        forbid_entities=True,
        forbid_external=True,
    )

    if isinstance(xml_string, str):
        # The encoding declaration no longer applies to decoded text.
        xml_string = xml_string.lstrip("\ufeff \t\r\n")
        if xml_string.startswith("<?"):
            xml_string = xml_string[xml_string.find("?>") + 2 :]
        xml_string = RE_DOCTYPE.sub("", xml_string, count=1)
    else:
        xml_string = RE_DOCTYPE_BYTES.sub(b"", xml_string, count=1)

    try:
        parser.feed(xml_string)
        return parser.close()
    except (ParseError, DefusedXmlException) as e:
        # Offer consistent results for callers to check for invalid data.
        logger.debug("Parsing XML error: %s: %.200s", e, xml_string)
        raise ExternalParsingError(str(e)) from e


def split_ns(xml_name: str) -> tuple[str | None, str]:
    """Split the element tag or attribute/text value into the namespace and
    local name. The stdlib etree doesn't have the properties for this (lxml does).
    """
    # Tags may start with a `{ns}`
    if xml_name.startswith("{"):
        end = xml_name.index("}")
        return xml_name[1:end], xml_name[end + 1 :]
    else:
        return None, xml_name


def strip_namespace(name: str) -> str:
    """Remove the namespace from a name, either in ``{uri}name`` or ``prefix:name`` notation."""
    return split_ns(name)[1].rpartition(":")[2]


def get_root_element(document: Element | ElementTree | None) -> NSElement:
    """Return the root element of a parsed document."""
    if isinstance(document, ElementTree):
        document = document.getroot()
    if document is None:
        raise MalformedDocument("Document has no root element")
    return document


def get_element_name(element: Element) -> str:
    """Return the (fully qualified) tag name of the element."""
    return element.tag


def get_element_text(element: Element | None) -> str:
    """Return the text content of an element, including its child nodes."""
    if element is None:
        return ""
    return "".join(element.itertext()).strip()


def get_element_attribute(element: Element, name: str) -> str:
    """Read an attribute by its local name. Returns an empty string when it doesn't exist.
    The name may be given with a prefix (e.g. ``xlink:href``), which is ignored.
    """
    value = element.attrib.get(name)
    if value is not None:
        return value

    local_name = strip_namespace(name)
    for attr_name, value in element.attrib.items():
        if strip_namespace(attr_name) == local_name:
            return value
    return ""


def get_children_elements(element: Element) -> list[NSElement]:
    """Return all child elements."""
    return list(element)


def find_children_elements(element: Element, local_name: str, recursive=False) -> list[NSElement]:
    """Find all child elements by their local name, ignoring the namespace.
    With ``recursive=True`` all descendants are searched (in document order).
    """
    candidates = element.iter() if recursive else element
    return [
        child
        for child in candidates
        if child is not element and strip_namespace(child.tag) == local_name
    ]


def find_child_element(element: Element, local_name: str) -> NSElement | None:
    """Find the first child element with the given local name, ignoring the namespace."""
    for child in element:
        if strip_namespace(child.tag) == local_name:
            return child
    return None


def find_child_path(element: Element, *path: str) -> NSElement | None:
    """Walk a path of local names, e.g. ``("Capability", "Request", "GetMap")``."""
    for local_name in path:
        if element is None:
            return None
        element = find_child_element(element, local_name)
    return element
