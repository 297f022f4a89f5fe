"""Reading Web Map Services (WMS).

Both WMS 1.1.1 and 1.3.0 are supported. The layers are exposed with
their effective attributes, after applying the inheritance from the parent layers.
"""

from .capabilities import parse_wms_capabilities
from .endpoint import WmsEndpoint

__all__ = [
    "WmsEndpoint",
    "parse_wms_capabilities",
]
