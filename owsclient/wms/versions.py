"""Version specific rules for reading WMS capabilities.

WMS 1.1.1 and 1.3.0 describe the same things with different elements.
Each supported version has a :class:`WmsDialect` with the functions that
read these differences. The dialect is chosen once per document.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from xml.etree.ElementTree import Element

from owsclient import conf
from owsclient.crs import CRS84, is_north_east_order
from owsclient.exceptions import MalformedDocument
from owsclient.parsers.values import parse_optional_float, scale_hint_to_denominator
from owsclient.parsers.xml import (
    find_child_element,
    find_children_elements,
    get_element_attribute,
    get_element_text,
    get_root_element,
    strip_namespace,
)
from owsclient.types import BoundingBox

logger = logging.getLogger(__name__)

__all__ = ("WmsVersion", "WmsDialect", "get_dialect", "read_version_from_capabilities")

ROOT_TAGS = ("WMS_Capabilities", "WMT_MS_Capabilities")


class WmsVersion(str, Enum):
    v111 = "1.1.1"
    v130 = "1.3.0"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class WmsDialect:
    """The functions that read the version-specific parts of a ``<Layer>`` element."""

    version: WmsVersion

    #: Read the CRS codes that a layer declares.
    read_crs_codes: Callable[[Element], list[str]]

    #: Read the bounding boxes that a layer declares, by CRS code.
    read_bounding_boxes: Callable[[Element], dict[str, BoundingBox]]

    #: Read the (min, max) scale denominators that a layer declares.
    read_scale_denominators: Callable[[Element], tuple[float | None, float | None]]


def _get_bbox_attributes(bbox_el: Element) -> BoundingBox:
    values = tuple(
        get_element_attribute(bbox_el, name) for name in ("minx", "miny", "maxx", "maxy")
    )
    if not all(values):
        raise MalformedDocument(f"<{strip_namespace(bbox_el.tag)}> misses coordinate attributes")
    return values


def _read_crs_codes_111(layer_el: Element) -> list[str]:
    # Old servers list several codes in a single <SRS> element
    return [
        code
        for srs_el in find_children_elements(layer_el, "SRS")
        for code in get_element_text(srs_el).split()
    ]


def _read_crs_codes_130(layer_el: Element) -> list[str]:
    return [
        code
        for crs_el in find_children_elements(layer_el, "CRS")
        if (code := get_element_text(crs_el))
    ]


def _read_bounding_boxes_111(layer_el: Element) -> dict[str, BoundingBox]:
    bounding_boxes = {}
    latlon_el = find_child_element(layer_el, "LatLonBoundingBox")
    if latlon_el is not None:
        bounding_boxes[CRS84] = _get_bbox_attributes(latlon_el)

    for bbox_el in find_children_elements(layer_el, "BoundingBox"):
        srs = get_element_attribute(bbox_el, "SRS")
        if srs:
            bounding_boxes[srs] = _get_bbox_attributes(bbox_el)
    return bounding_boxes


def _read_bounding_boxes_130(layer_el: Element) -> dict[str, BoundingBox]:
    bounding_boxes = {}
    geographic_el = find_child_element(layer_el, "EX_GeographicBoundingBox")
    if geographic_el is not None:
        values = tuple(
            get_element_text(find_child_element(geographic_el, name))
            for name in (
                "westBoundLongitude",
                "southBoundLatitude",
                "eastBoundLongitude",
                "northBoundLatitude",
            )
        )
        if not all(values):
            raise MalformedDocument("<EX_GeographicBoundingBox> misses coordinates")
        bounding_boxes[CRS84] = values

    for bbox_el in find_children_elements(layer_el, "BoundingBox"):
        crs = get_element_attribute(bbox_el, "CRS")
        if not crs:
            continue
        minx, miny, maxx, maxy = _get_bbox_attributes(bbox_el)
        if conf.OWSCLIENT_FORCE_XY_BOUNDING_BOXES and is_north_east_order(crs):
            # Coordinates are given in the axis order of the CRS (e.g. lat/lon)
            bounding_boxes[crs] = (miny, minx, maxy, maxx)
        else:
            bounding_boxes[crs] = (minx, miny, maxx, maxy)
    return bounding_boxes


def _read_scale_denominators_111(layer_el: Element) -> tuple[float | None, float | None]:
    hint_el = find_child_element(layer_el, "ScaleHint")
    if hint_el is None:
        return None, None

    min_hint = parse_optional_float(get_element_attribute(hint_el, "min"))
    max_hint = parse_optional_float(get_element_attribute(hint_el, "max"))
    return (
        scale_hint_to_denominator(min_hint) if min_hint is not None else None,
        scale_hint_to_denominator(max_hint) if max_hint is not None else None,
    )


def _read_scale_denominators_130(layer_el: Element) -> tuple[float | None, float | None]:
    min_el = find_child_element(layer_el, "MinScaleDenominator")
    max_el = find_child_element(layer_el, "MaxScaleDenominator")
    return (
        parse_optional_float(get_element_text(min_el)),
        parse_optional_float(get_element_text(max_el)),
    )


DIALECTS = {
    WmsVersion.v111: WmsDialect(
        version=WmsVersion.v111,
        read_crs_codes=_read_crs_codes_111,
        read_bounding_boxes=_read_bounding_boxes_111,
        read_scale_denominators=_read_scale_denominators_111,
    ),
    WmsVersion.v130: WmsDialect(
        version=WmsVersion.v130,
        read_crs_codes=_read_crs_codes_130,
        read_bounding_boxes=_read_bounding_boxes_130,
        read_scale_denominators=_read_scale_denominators_130,
    ),
}


def read_version_from_capabilities(capabilities_doc) -> str:
    """Return the version that the capabilities document declares.

    :raises MalformedDocument: When the document isn't a WMS capabilities document.
    """
    root = get_root_element(capabilities_doc)
    root_name = strip_namespace(root.tag)
    if root_name == "ServiceExceptionReport":
        raise MalformedDocument(f"Service returned an exception: {get_element_text(root)}")
    elif root_name not in ROOT_TAGS:
        raise MalformedDocument(f"Expected a WMS capabilities document, got <{root_name}>")

    version = get_element_attribute(root, "version")
    if not version:
        raise MalformedDocument(f"<{root_name}> has no version attribute")
    return version


def get_dialect(capabilities_doc) -> WmsDialect:
    """Select the rules for reading the document.

    :raises MalformedDocument: When the version is not supported.
    """
    version = read_version_from_capabilities(capabilities_doc)
    try:
        dialect = DIALECTS[WmsVersion(version)]
    except ValueError:
        raise MalformedDocument(f"Unsupported WMS version: {version}") from None

    logger.debug("Reading WMS capabilities using version %s rules", dialect.version)
    return dialect
