"""Reading Web Feature Services (WFS).

WFS 1.0.0, 1.1.0 and 2.0 are supported.
"""

from .capabilities import parse_wfs_capabilities
from .endpoint import WfsEndpoint
from .featureprops import (
    compute_feature_props_details,
    parse_feature_props,
    parse_feature_props_geojson,
)
from .featuretypeinfo import parse_feature_type_info

__all__ = [
    "WfsEndpoint",
    "compute_feature_props_details",
    "parse_feature_props",
    "parse_feature_props_geojson",
    "parse_feature_type_info",
    "parse_wfs_capabilities",
]
