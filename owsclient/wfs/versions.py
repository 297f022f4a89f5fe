"""Version specific rules for reading WFS documents.

WFS 1.0.0 has its own capabilities structure, while 1.1.0 and 2.0 share the
OGC Web Services (OWS) common elements with a few renamed tags.
Each supported version has a :class:`WfsDialect` with the functions that read these
differences, for both the capabilities and the GetFeature responses.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
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
    strip_namespace,
)
from owsclient.types import BoundingBox, OperationUrls

logger = logging.getLogger(__name__)

__all__ = ("WfsVersion", "WfsDialect", "get_dialect", "read_version_from_capabilities")


class WfsVersion(str, Enum):
    v100 = "1.0.0"
    v110 = "1.1.0"
    v200 = "2.0.0"
    v202 = "2.0.2"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class WfsDialect:
    """The functions that read the version-specific parts of WFS documents."""

    version: WfsVersion

    #: Read the default CRS of a ``<FeatureType>``.
    read_default_crs: Callable[[Element], str | None]

    #: Read the other supported CRS codes of a ``<FeatureType>``.
    read_other_crs: Callable[[Element], tuple[str, ...]]

    #: Read the WGS84 bounding box of a ``<FeatureType>``.
    read_bounding_box: Callable[[Element], BoundingBox | None]

    #: Read the URL for each operation and HTTP method.
    read_operation_urls: Callable[[Element], OperationUrls]

    #: Read the output formats of the GetFeature operation.
    read_output_formats: Callable[[Element], tuple[str, ...]]

    #: Read the feature elements of a GetFeature response.
    read_feature_members: Callable[[Element], list[Element]]

    #: The attribute that holds the feature identifier.
    id_attribute: str

    #: The request parameter for the feature type names.
    type_names_param: str


def _read_default_srs_100(feature_type_el: Element) -> str | None:
    return get_element_text(find_child_element(feature_type_el, "SRS")) or None


def _read_other_srs_100(feature_type_el: Element) -> tuple[str, ...]:
    return ()


def _read_crs_readers(default_tag: str, other_tag: str):
    def _read_default_crs(feature_type_el: Element) -> str | None:
        return get_element_text(find_child_element(feature_type_el, default_tag)) or None

    def _read_other_crs(feature_type_el: Element) -> tuple[str, ...]:
        return tuple(
            get_element_text(el) for el in find_children_elements(feature_type_el, other_tag)
        )

    return _read_default_crs, _read_other_crs


def _read_bounding_box_100(feature_type_el: Element) -> BoundingBox | None:
    bbox_el = find_child_element(feature_type_el, "LatLongBoundingBox")
    if bbox_el is None:
        return None

    values = tuple(
        get_element_attribute(bbox_el, name) for name in ("minx", "miny", "maxx", "maxy")
    )
    if not all(values):
        raise MalformedDocument("<LatLongBoundingBox> misses coordinate attributes")
    return values


def _read_bounding_box_ows(feature_type_el: Element) -> BoundingBox | None:
    bbox_el = find_child_element(feature_type_el, "WGS84BoundingBox")
    if bbox_el is None:
        return None

    lower = get_element_text(find_child_element(bbox_el, "LowerCorner")).split()
    upper = get_element_text(find_child_element(bbox_el, "UpperCorner")).split()
    if len(lower) != 2 or len(upper) != 2:
        raise MalformedDocument("<WGS84BoundingBox> should have a lower and upper corner")
    return lower[0], lower[1], upper[0], upper[1]


def _read_operation_urls_100(root: Element) -> OperationUrls:
    request_el = find_child_path(root, "Capability", "Request")
    if request_el is None:
        raise MalformedDocument("Capabilities document has no <Capability><Request> element")

    urls = {}
    for operation_el in get_children_elements(request_el):
        methods = {}
        for dcp_el in find_children_elements(operation_el, "DCPType"):
            http_el = find_child_element(dcp_el, "HTTP")
            if http_el is None:
                continue
            for method in ("Get", "Post"):
                method_el = find_child_element(http_el, method)
                if method_el is not None and method not in methods:
                    methods[method] = get_element_attribute(method_el, "onlineResource")
        urls[strip_namespace(operation_el.tag)] = methods
    return urls


def _read_operation_urls_ows(root: Element) -> OperationUrls:
    metadata_el = find_child_element(root, "OperationsMetadata")
    if metadata_el is None:
        raise MalformedDocument("Capabilities document has no <OperationsMetadata> element")

    urls = {}
    for operation_el in find_children_elements(metadata_el, "Operation"):
        methods = {}
        http_el = find_child_path(operation_el, "DCP", "HTTP")
        if http_el is not None:
            for method in ("Get", "Post"):
                method_el = find_child_element(http_el, method)
                if method_el is not None:
                    methods[method] = get_element_attribute(method_el, "xlink:href")
        urls[get_element_attribute(operation_el, "name")] = methods
    return urls


def _read_output_formats_100(root: Element) -> tuple[str, ...]:
    # Formats are given as element names, e.g. <ResultFormat><GML2/><JSON/></ResultFormat>
    formats_el = find_child_path(root, "Capability", "Request", "GetFeature", "ResultFormat")
    if formats_el is None:
        return ()
    return tuple(strip_namespace(el.tag) for el in get_children_elements(formats_el))


def _read_output_formats_ows(root: Element) -> tuple[str, ...]:
    metadata_el = find_child_element(root, "OperationsMetadata")
    if metadata_el is None:
        return ()

    for operation_el in find_children_elements(metadata_el, "Operation"):
        if get_element_attribute(operation_el, "name") != "GetFeature":
            continue
        for parameter_el in find_children_elements(operation_el, "Parameter"):
            if get_element_attribute(parameter_el, "name") == "outputFormat":
                # WFS 2.0 wraps the values in <AllowedValues>.
                return tuple(
                    get_element_text(el)
                    for el in find_children_elements(parameter_el, "Value", recursive=True)
                )
    return ()


def _read_feature_members_1x(root: Element) -> list[Element]:
    members_el = find_child_element(root, "featureMembers")
    if members_el is not None:
        return get_children_elements(members_el)
    return _first_children(find_children_elements(root, "featureMember"))


def _read_feature_members_20(root: Element) -> list[Element]:
    return _first_children(find_children_elements(root, "member"))


def _first_children(wrapper_els: list[Element]) -> list[Element]:
    return [wrapper_el[0] for wrapper_el in wrapper_els if len(wrapper_el)]


_read_default_srs_110, _read_other_srs_110 = _read_crs_readers("DefaultSRS", "OtherSRS")
_read_default_crs_200, _read_other_crs_200 = _read_crs_readers("DefaultCRS", "OtherCRS")

_DIALECT_200 = WfsDialect(
    version=WfsVersion.v200,
    read_default_crs=_read_default_crs_200,
    read_other_crs=_read_other_crs_200,
    read_bounding_box=_read_bounding_box_ows,
    read_operation_urls=_read_operation_urls_ows,
    read_output_formats=_read_output_formats_ows,
    read_feature_members=_read_feature_members_20,
    id_attribute="gml:id",
    type_names_param="TYPENAMES",
)

DIALECTS = {
    WfsVersion.v100: WfsDialect(
        version=WfsVersion.v100,
        read_default_crs=_read_default_srs_100,
        read_other_crs=_read_other_srs_100,
        read_bounding_box=_read_bounding_box_100,
        read_operation_urls=_read_operation_urls_100,
        read_output_formats=_read_output_formats_100,
        read_feature_members=_read_feature_members_1x,
        id_attribute="fid",
        type_names_param="TYPENAME",
    ),
    WfsVersion.v110: WfsDialect(
        version=WfsVersion.v110,
        read_default_crs=_read_default_srs_110,
        read_other_crs=_read_other_srs_110,
        read_bounding_box=_read_bounding_box_ows,
        read_operation_urls=_read_operation_urls_ows,
        read_output_formats=_read_output_formats_ows,
        read_feature_members=_read_feature_members_1x,
        id_attribute="gml:id",
        type_names_param="TYPENAME",
    ),
    WfsVersion.v200: _DIALECT_200,
    WfsVersion.v202: _DIALECT_200,
}


def read_version_from_capabilities(capabilities_doc) -> str:
    """Return the version that the capabilities document declares.

    :raises MalformedDocument: When the document isn't a WFS capabilities document.
    """
    root = get_root_element(capabilities_doc)
    root_name = strip_namespace(root.tag)
    if root_name in ("ExceptionReport", "ServiceExceptionReport"):
        raise MalformedDocument(f"Service returned an exception: {get_element_text(root)}")
    elif root_name != "WFS_Capabilities":
        raise MalformedDocument(f"Expected a WFS capabilities document, got <{root_name}>")

    version = get_element_attribute(root, "version")
    if not version:
        raise MalformedDocument(f"<{root_name}> has no version attribute")
    return version


def get_dialect(version: str) -> WfsDialect:
    """Select the rules for a WFS version.

    :raises MalformedDocument: When the version is not supported.
    """
    try:
        dialect = DIALECTS[WfsVersion(version)]
    except ValueError:
        raise MalformedDocument(f"Unsupported WFS version: {version}") from None

    logger.debug("Reading WFS document using version %s rules", dialect.version)
    return dialect
