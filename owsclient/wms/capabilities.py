"""Reading WMS GetCapabilities documents.

The ``read_*`` functions accept the parsed document (see
:func:`~owsclient.parsers.xml.parse_xml_from_string`), and return the version-independent
records of :mod:`owsclient.types`. Both WMS 1.1.1 and 1.3.0 are supported.
"""

from __future__ import annotations

import logging
from xml.etree.ElementTree import Element

from owsclient.exceptions import MalformedDocument
from owsclient.parsers.xml import (
    find_child_element,
    find_child_path,
    find_children_elements,
    get_children_elements,
    get_element_attribute,
    get_element_text,
    get_root_element,
    parse_xml_from_string,
    strip_namespace,
)
from owsclient.types import (
    Address,
    Attribution,
    Contact,
    LayerNode,
    LayerStyle,
    MetadataUrl,
    OperationUrls,
    Provider,
    ServiceInfo,
    WmsCapabilities,
)
from owsclient.utils import fold_tree
from owsclient.wms.inheritance import resolve_layer_tree
from owsclient.wms.versions import WmsDialect, get_dialect, read_version_from_capabilities

logger = logging.getLogger(__name__)

__all__ = (
    "parse_wms_capabilities",
    "read_info_from_capabilities",
    "read_layers_from_capabilities",
    "read_operation_urls_from_capabilities",
    "read_own_layers_from_capabilities",
    "read_version_from_capabilities",
)


def parse_wms_capabilities(xml_string: str | bytes) -> WmsCapabilities:
    """Parse the complete capabilities document.

    :raises ExternalParsingError: When the XML can't be parsed.
    :raises MalformedDocument: When the document is not a supported capabilities document.
    """
    capabilities_doc = parse_xml_from_string(xml_string)
    return WmsCapabilities(
        version=read_version_from_capabilities(capabilities_doc),
        info=read_info_from_capabilities(capabilities_doc),
        layers=read_layers_from_capabilities(capabilities_doc),
        urls=read_operation_urls_from_capabilities(capabilities_doc),
    )


def _get_capability(capabilities_doc) -> Element:
    capability_el = find_child_element(get_root_element(capabilities_doc), "Capability")
    if capability_el is None:
        raise MalformedDocument("Capabilities document has no <Capability> element")
    return capability_el


def read_layers_from_capabilities(capabilities_doc) -> tuple[LayerNode, ...]:
    """Return the layer tree, where each layer has its effective (inherited) attributes."""
    return resolve_layer_tree(read_own_layers_from_capabilities(capabilities_doc))


def read_own_layers_from_capabilities(capabilities_doc) -> tuple[LayerNode, ...]:
    """Return the layer tree, where each layer only has the attributes it declares itself."""
    dialect = get_dialect(capabilities_doc)
    root_layer_els = find_children_elements(_get_capability(capabilities_doc), "Layer")
    return fold_tree(
        root_layer_els,
        get_children=lambda layer_el: find_children_elements(layer_el, "Layer") or None,
        build=lambda layer_el, children: _parse_layer(dialect, layer_el, children),
    )


def _parse_layer(
    dialect: WmsDialect, layer_el: Element, children: tuple[LayerNode, ...] | None
) -> LayerNode:
    """Read the attributes that a single <Layer> declares."""
    min_scale, max_scale = dialect.read_scale_denominators(layer_el)
    attribution_el = find_child_element(layer_el, "Attribution")
    return LayerNode(
        name=_child_text(layer_el, "Name") or None,
        title=_child_text(layer_el, "Title"),
        abstract=_child_text(layer_el, "Abstract"),
        keywords=_read_keywords(layer_el),
        attribution=_parse_attribution(attribution_el) if attribution_el is not None else None,
        available_crs=tuple(dict.fromkeys(dialect.read_crs_codes(layer_el))),
        bounding_boxes=dialect.read_bounding_boxes(layer_el),
        styles=tuple(
            _parse_style(style_el) for style_el in find_children_elements(layer_el, "Style")
        ),
        min_scale_denominator=min_scale,
        max_scale_denominator=max_scale,
        queryable=_parse_flag(get_element_attribute(layer_el, "queryable")),
        opaque=_parse_flag(get_element_attribute(layer_el, "opaque")),
        metadata=tuple(
            _parse_metadata_url(metadata_el)
            for metadata_el in find_children_elements(layer_el, "MetadataURL")
        ),
        children=children,
    )


def _child_text(parent_el: Element | None, name: str) -> str:
    if parent_el is None:
        return ""
    return get_element_text(find_child_element(parent_el, name))


def _parse_flag(value: str) -> bool:
    return value in ("1", "true")


def _read_keywords(parent_el: Element) -> tuple[str, ...]:
    keyword_list_el = find_child_element(parent_el, "KeywordList")
    if keyword_list_el is None:
        return ()
    keywords = [
        get_element_text(el) for el in find_children_elements(keyword_list_el, "Keyword")
    ]
    return tuple(dict.fromkeys(keyword for keyword in keywords if keyword))


def _get_online_resource(parent_el: Element | None) -> str | None:
    if parent_el is None:
        return None
    resource_el = find_child_element(parent_el, "OnlineResource")
    if resource_el is None:
        return None
    return get_element_attribute(resource_el, "xlink:href") or None


def _parse_attribution(attribution_el: Element) -> Attribution:
    return Attribution(
        title=_child_text(attribution_el, "Title") or None,
        url=_get_online_resource(attribution_el),
        logo_url=_get_online_resource(find_child_element(attribution_el, "LogoURL")),
    )


def _parse_style(style_el: Element) -> LayerStyle:
    name = _child_text(style_el, "Name")
    if not name:
        raise MalformedDocument("<Style> element has no <Name>")
    return LayerStyle(
        name=name,
        title=_child_text(style_el, "Title"),
        legend_url=_get_online_resource(find_child_element(style_el, "LegendURL")),
    )


def _parse_metadata_url(metadata_el: Element) -> MetadataUrl:
    return MetadataUrl(
        type=get_element_attribute(metadata_el, "type"),
        format=_child_text(metadata_el, "Format"),
        url=_get_online_resource(metadata_el) or "",
    )


def read_info_from_capabilities(capabilities_doc) -> ServiceInfo:
    """Return the general service description."""
    root = get_root_element(capabilities_doc)
    service_el = find_child_element(root, "Service")
    if service_el is None:
        raise MalformedDocument("Capabilities document has no <Service> element")

    capability_el = _get_capability(capabilities_doc)
    contact_el = find_child_element(service_el, "ContactInformation")
    return ServiceInfo(
        name=_child_text(service_el, "Name"),
        title=_child_text(service_el, "Title"),
        abstract=_child_text(service_el, "Abstract"),
        keywords=_read_keywords(service_el),
        constraints=_child_text(service_el, "AccessConstraints"),
        fees=_child_text(service_el, "Fees"),
        output_formats=_read_formats(find_child_path(capability_el, "Request", "GetMap")),
        info_formats=_read_formats(find_child_path(capability_el, "Request", "GetFeatureInfo")),
        exception_formats=_read_formats(find_child_element(capability_el, "Exception")),
        provider=_parse_provider(contact_el) if contact_el is not None else None,
    )


def _read_formats(parent_el: Element | None) -> tuple[str, ...]:
    if parent_el is None:
        return ()
    return tuple(get_element_text(el) for el in find_children_elements(parent_el, "Format"))


def _parse_provider(contact_el: Element) -> Provider:
    person_el = find_child_element(contact_el, "ContactPersonPrimary")
    address_el = find_child_element(contact_el, "ContactAddress")
    return Provider(
        contact=Contact(
            name=_child_text(person_el, "ContactPerson"),
            organization=_child_text(person_el, "ContactOrganization"),
            position=_child_text(contact_el, "ContactPosition"),
            phone=_child_text(contact_el, "ContactVoiceTelephone"),
            fax=_child_text(contact_el, "ContactFacsimileTelephone"),
            email=_child_text(contact_el, "ContactElectronicMailAddress"),
            address=Address(
                delivery_point=_child_text(address_el, "Address"),
                city=_child_text(address_el, "City"),
                administrative_area=_child_text(address_el, "StateOrProvince"),
                postal_code=_child_text(address_el, "PostCode"),
                country=_child_text(address_el, "Country"),
            ),
        )
    )


def read_operation_urls_from_capabilities(capabilities_doc) -> OperationUrls:
    """Return the URL for each operation (e.g. ``GetMap``) and HTTP method."""
    request_el = find_child_element(_get_capability(capabilities_doc), "Request")
    if request_el is None:
        raise MalformedDocument("Capabilities document has no <Request> element")

    urls = {}
    for operation_el in get_children_elements(request_el):
        http_el = find_child_path(operation_el, "DCPType", "HTTP")
        if http_el is None:
            continue

        methods = {}
        for method in ("Get", "Post"):
            url = _get_online_resource(find_child_element(http_el, method))
            if url:
                methods[method] = url
        urls[strip_namespace(operation_el.tag)] = methods
    return urls
