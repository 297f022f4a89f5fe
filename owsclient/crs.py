"""Helpers for Coordinate Reference System codes found in capabilities documents.

WMS 1.3.0 and WFS 1.1+ follow the axis order that the CRS authority defined,
which means ``EPSG:4326`` coordinates are given in latitude/longitude order.
WMS 1.1.1 always uses x/y (longitude/latitude) ordering.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import pyproj
from pyproj.exceptions import CRSError

logger = logging.getLogger(__name__)

__all__ = ["CRS84", "is_north_east_order"]

#: The WGS84 CRS in longitude/latitude ordering, used for geographic bounding boxes.
CRS84 = "CRS:84"

# Aliases that pyproj doesn't recognize in this notation.
_PROJ_ALIASES = {
    "CRS:84": "OGC:CRS84",
    "CRS:83": "OGC:CRS83",
    "CRS:27": "OGC:CRS27",
}

_get_proj_crs_from_user_input = lru_cache(maxsize=200)(pyproj.CRS.from_user_input)


@lru_cache(maxsize=200)
def is_north_east_order(crs_code: str) -> bool:
    """Tell whether the CRS defines its first axis as north (e.g. latitude for EPSG:4326).

    Unknown codes are treated as having x/y ordering.
    """
    try:
        crs = _get_proj_crs_from_user_input(_PROJ_ALIASES.get(crs_code.upper(), crs_code))
    except CRSError:
        logger.debug("Unknown CRS '%s', assuming x/y axis order", crs_code)
        return False

    axis_info = crs.axis_info
    return bool(axis_info) and axis_info[0].direction.lower() in ("north", "south")

