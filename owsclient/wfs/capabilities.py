"""Reading WFS GetCapabilities documents.

WFS 1.0.0 describes the service in a ``<Service>`` element,
while WFS 1.1.0 and 2.0 use the OWS ``<ServiceIdentification>``
and ``<ServiceProvider>`` elements.
"""

from __future__ import annotations

import logging
from xml.etree.ElementTree import Element

from owsclient.exceptions import MalformedDocument
from owsclient.parsers.xml import (
    find_child_element,
    find_children_elements,
    get_element_text,
    get_root_element,
    parse_xml_from_string,
)
from owsclient.types import (
    Address,
    Contact,
    FeatureTypeSummary,
    OperationUrls,
    Provider,
    ServiceInfo,
    WfsCapabilities,
)
from owsclient.wfs.versions import (
    WfsDialect,
    WfsVersion,
    get_dialect,
    read_version_from_capabilities,
)

logger = logging.getLogger(__name__)

__all__ = (
    "parse_wfs_capabilities",
    "read_feature_types_from_capabilities",
    "read_info_from_capabilities",
    "read_operation_urls_from_capabilities",
    "read_version_from_capabilities",
)


def parse_wfs_capabilities(xml_string: str | bytes) -> WfsCapabilities:
    """Parse the complete capabilities document.

    :raises ExternalParsingError: When the XML can't be parsed.
    :raises MalformedDocument: When the document is not a supported capabilities document.
    """
    capabilities_doc = parse_xml_from_string(xml_string)
    return WfsCapabilities(
        version=read_version_from_capabilities(capabilities_doc),
        info=read_info_from_capabilities(capabilities_doc),
        feature_types=read_feature_types_from_capabilities(capabilities_doc),
        urls=read_operation_urls_from_capabilities(capabilities_doc),
    )


def _get_dialect(capabilities_doc) -> WfsDialect:
    return get_dialect(read_version_from_capabilities(capabilities_doc))


def read_feature_types_from_capabilities(capabilities_doc) -> tuple[FeatureTypeSummary, ...]:
    """Return all feature types, in document order."""
    dialect = _get_dialect(capabilities_doc)
    root = get_root_element(capabilities_doc)
    feature_type_list_el = find_child_element(root, "FeatureTypeList")
    if feature_type_list_el is None:
        raise MalformedDocument("Capabilities document has no <FeatureTypeList> element")

    default_formats = dialect.read_output_formats(root)
    return tuple(
        _parse_feature_type(dialect, feature_type_el, default_formats)
        for feature_type_el in find_children_elements(feature_type_list_el, "FeatureType")
    )


def _parse_feature_type(
    dialect: WfsDialect, feature_type_el: Element, default_formats: tuple[str, ...]
) -> FeatureTypeSummary:
    name = _child_text(feature_type_el, "Name")
    if not name:
        raise MalformedDocument("<FeatureType> element has no <Name>")

    # WFS 1.1.0 may list the formats per feature type.
    formats_el = find_child_element(feature_type_el, "OutputFormats")
    output_formats = ()
    if formats_el is not None:
        output_formats = tuple(
            get_element_text(el) for el in find_children_elements(formats_el, "Format")
        )
    return FeatureTypeSummary(
        name=name,
        title=_child_text(feature_type_el, "Title"),
        abstract=_child_text(feature_type_el, "Abstract"),
        keywords=_read_keywords(feature_type_el),
        bounding_box=dialect.read_bounding_box(feature_type_el),
        default_crs=dialect.read_default_crs(feature_type_el),
        other_crs=dialect.read_other_crs(feature_type_el),
        output_formats=output_formats or default_formats,
    )


def _child_text(parent_el: Element | None, name: str) -> str:
    if parent_el is None:
        return ""
    return get_element_text(find_child_element(parent_el, name))


def _read_keywords(parent_el: Element) -> tuple[str, ...]:
    keywords_el = find_child_element(parent_el, "Keywords")
    if keywords_el is None:
        return ()

    keyword_els = find_children_elements(keywords_el, "Keyword")
    if keyword_els:
        keywords = [get_element_text(el) for el in keyword_els]
    else:
        # WFS 1.0.0 has a comma separated list
        keywords = [keyword.strip() for keyword in get_element_text(keywords_el).split(",")]
    return tuple(dict.fromkeys(keyword for keyword in keywords if keyword))


def read_info_from_capabilities(capabilities_doc) -> ServiceInfo:
    """Return the general service description."""
    dialect = _get_dialect(capabilities_doc)
    root = get_root_element(capabilities_doc)
    output_formats = dialect.read_output_formats(root)
    if dialect.version is WfsVersion.v100:
        return _read_service_info_100(root, output_formats)
    else:
        return _read_service_info_ows(root, output_formats)


def _read_service_info_100(root: Element, output_formats: tuple[str, ...]) -> ServiceInfo:
    service_el = find_child_element(root, "Service")
    if service_el is None:
        raise MalformedDocument("Capabilities document has no <Service> element")

    return ServiceInfo(
        name=_child_text(service_el, "Name"),
        title=_child_text(service_el, "Title"),
        abstract=_child_text(service_el, "Abstract"),
        keywords=_read_keywords(service_el),
        constraints=_child_text(service_el, "AccessConstraints"),
        fees=_child_text(service_el, "Fees"),
        output_formats=output_formats,
    )


def _read_service_info_ows(root: Element, output_formats: tuple[str, ...]) -> ServiceInfo:
    identification_el = find_child_element(root, "ServiceIdentification")
    if identification_el is None:
        raise MalformedDocument("Capabilities document has no <ServiceIdentification> element")

    provider_el = find_child_element(root, "ServiceProvider")
    return ServiceInfo(
        name=_child_text(identification_el, "ServiceType"),
        title=_child_text(identification_el, "Title"),
        abstract=_child_text(identification_el, "Abstract"),
        keywords=_read_keywords(identification_el),
        constraints=_child_text(identification_el, "AccessConstraints"),
        fees=_child_text(identification_el, "Fees"),
        output_formats=output_formats,
        provider=_parse_provider(provider_el) if provider_el is not None else None,
    )


def _parse_provider(provider_el: Element) -> Provider:
    contact_el = find_child_element(provider_el, "ServiceContact")
    info_el = find_child_element(contact_el, "ContactInfo") if contact_el is not None else None
    phone_el = find_child_element(info_el, "Phone") if info_el is not None else None
    address_el = find_child_element(info_el, "Address") if info_el is not None else None
    return Provider(
        contact=Contact(
            name=_child_text(contact_el, "IndividualName"),
            organization=_child_text(provider_el, "ProviderName"),
            position=_child_text(contact_el, "PositionName"),
            phone=_child_text(phone_el, "Voice"),
            fax=_child_text(phone_el, "Facsimile"),
            email=_child_text(address_el, "ElectronicMailAddress"),
            address=Address(
                delivery_point=_child_text(address_el, "DeliveryPoint"),
                city=_child_text(address_el, "City"),
                administrative_area=_child_text(address_el, "AdministrativeArea"),
                postal_code=_child_text(address_el, "PostalCode"),
                country=_child_text(address_el, "Country"),
            ),
        )
    )


def read_operation_urls_from_capabilities(capabilities_doc) -> OperationUrls:
    """Return the URL for each operation (e.g. ``GetFeature``) and HTTP method."""
    dialect = _get_dialect(capabilities_doc)
    return dialect.read_operation_urls(get_root_element(capabilities_doc))

