"""Reading the DescribeFeatureType response.

The XML Schema describes each feature type as a ``<complexType>``,
for example::

    <xsd:element name="places" type="ns:placesType" substitutionGroup="gml:_Feature"/>
    <xsd:complexType name="placesType">
      <xsd:complexContent>
        <xsd:extension base="gml:AbstractFeatureType">
          <xsd:sequence>
            <xsd:element name="name" type="xsd:string"/>
            <xsd:element name="population" type="xsd:int"/>
            <xsd:element name="geom" type="gml:PointPropertyType"/>
          </xsd:sequence>
        </xsd:extension>
      </xsd:complexContent>
    </xsd:complexType>

The element types are translated into the scalar :class:`~owsclient.types.PropertyType`,
and the GML property type becomes the geometry of the feature type.
"""

from __future__ import annotations

import logging
from xml.etree.ElementTree import Element

from owsclient.exceptions import MalformedDocument
from owsclient.parsers.xml import (
    NSElement,
    find_child_element,
    find_children_elements,
    get_element_attribute,
    get_root_element,
    strip_namespace,
    xmlns,
)
from owsclient.types import FeatureTypeFull, FeatureTypeSummary, PropertyType

logger = logging.getLogger(__name__)

__all__ = ("parse_feature_type_info", "get_property_type")

XSD_PROPERTY_TYPES = {
    "int": PropertyType.integer,
    "integer": PropertyType.integer,
    "long": PropertyType.integer,
    "short": PropertyType.integer,
    "byte": PropertyType.integer,
    "nonNegativeInteger": PropertyType.integer,
    "positiveInteger": PropertyType.integer,
    "negativeInteger": PropertyType.integer,
    "nonPositiveInteger": PropertyType.integer,
    "unsignedByte": PropertyType.integer,
    "unsignedShort": PropertyType.integer,
    "unsignedInt": PropertyType.integer,
    "unsignedLong": PropertyType.integer,
    "double": PropertyType.float,
    "float": PropertyType.float,
    "decimal": PropertyType.float,
    "boolean": PropertyType.boolean,
}

# GML 2 has the older names, GML 3 the newer abstractions.
GML_GEOMETRY_TYPES = {
    "Point": "Point",
    "MultiPoint": "MultiPoint",
    "LineString": "LineString",
    "Curve": "LineString",
    "MultiLineString": "MultiLineString",
    "MultiCurve": "MultiLineString",
    "Polygon": "Polygon",
    "Surface": "Polygon",
    "MultiPolygon": "MultiPolygon",
    "MultiSurface": "MultiPolygon",
    "Geometry": "Geometry",
    "MultiGeometry": "MultiGeometry",
}

GML_NAMESPACES = (xmlns.gml21, xmlns.gml32)


def get_property_type(type_name: str) -> PropertyType:
    """Translate an XML Schema type (local name) into the scalar property type."""
    return XSD_PROPERTY_TYPES.get(type_name, PropertyType.string)


def parse_feature_type_info(
    describe_doc, feature_type: FeatureTypeSummary
) -> FeatureTypeFull:
    """Read the properties of the feature type from the DescribeFeatureType response.

    :raises MalformedDocument: When the schema has no definition of the feature type.
    """
    schema_el = get_root_element(describe_doc)
    if strip_namespace(schema_el.tag) != "schema":
        raise MalformedDocument(
            f"Expected an XML Schema document, got <{strip_namespace(schema_el.tag)}>"
        )

    complex_type_el = _find_complex_type(schema_el, strip_namespace(feature_type.name))
    if complex_type_el is None:
        raise MalformedDocument(f"XML Schema has no definition for {feature_type.name}")

    properties = {}
    geometry_name = geometry_type = None
    for element_el in find_children_elements(complex_type_el, "element", recursive=True):
        name = get_element_attribute(element_el, "name")
        if not name:
            continue

        type_qname = _get_element_type(element_el)
        type_name = strip_namespace(type_qname)
        if _is_geometry_type(type_qname):
            if geometry_name is None:
                geometry_name = name
                geometry_type = _get_geometry_type(type_name)
            continue

        properties[name] = get_property_type(type_name)

    return FeatureTypeFull(
        name=feature_type.name,
        title=feature_type.title,
        abstract=feature_type.abstract,
        properties=properties,
        default_crs=feature_type.default_crs,
        other_crs=feature_type.other_crs,
        geometry_name=geometry_name,
        geometry_type=geometry_type,
        bounding_box=feature_type.bounding_box,
        output_formats=feature_type.output_formats,
    )


def _find_complex_type(schema_el: Element, local_name: str) -> Element | None:
    complex_type_els = find_children_elements(schema_el, "complexType")
    if not complex_type_els:
        return None

    # The top-level element refers to the type that it uses.
    type_name = None
    for element_el in find_children_elements(schema_el, "element"):
        if get_element_attribute(element_el, "name") == local_name:
            type_name = strip_namespace(get_element_attribute(element_el, "type"))
            break

    for complex_type_el in complex_type_els:
        if get_element_attribute(complex_type_el, "name") in (type_name, f"{local_name}Type"):
            return complex_type_el

    if len(complex_type_els) == 1:
        return complex_type_els[0]
    return None


def _get_element_type(element_el: NSElement) -> str:
    """Resolve the type of the element, which may be declared inline with a restriction."""
    type_qname = get_element_attribute(element_el, "type")
    if not type_qname:
        simple_type_el = find_child_element(element_el, "simpleType")
        restriction_el = (
            find_child_element(simple_type_el, "restriction")
            if simple_type_el is not None
            else None
        )
        if restriction_el is None:
            return ""
        element_el = restriction_el
        type_qname = get_element_attribute(restriction_el, "base")

    return element_el.parse_qname(type_qname) or ""


def _is_geometry_type(type_qname: str) -> bool:
    if not type_qname.endswith("PropertyType"):
        return False
    elif type_qname.startswith("{"):
        return any(type_qname in namespace for namespace in GML_NAMESPACES)
    else:
        # Undeclared prefix, which is left as-is.
        return type_qname.startswith("gml:")


def _get_geometry_type(type_name: str) -> str:
    base_name = type_name.removesuffix("PropertyType")
    return GML_GEOMETRY_TYPES.get(base_name, base_name)

