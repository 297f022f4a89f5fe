"""The data model that all parsers produce.

Every protocol version is translated into these same records,
so code that uses this package doesn't need to know which version
or vendor produced the document. All records are immutable;
sequences are exposed as tuples, mappings as read-only mappings.

The main structures are:

* :class:`LayerNode` for a WMS layer, which may contain child layers.
* :class:`FeatureTypeSummary` / :class:`FeatureTypeFull` for a WFS feature type.
* :class:`ServiceInfo` for the service description.
* :class:`FeatureWithProps` for a feature that is read from a GetFeature response.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Union

__all__ = [
    "Address",
    "Attribution",
    "BoundingBox",
    "Contact",
    "FeatureTypeFull",
    "FeatureTypeSummary",
    "FeatureWithProps",
    "LayerNode",
    "LayerStyle",
    "LayerSummary",
    "MetadataUrl",
    "OperationUrls",
    "PropDetails",
    "PropertyType",
    "PropsDetails",
    "Provider",
    "ServiceInfo",
    "UniqueValue",
    "WfsCapabilities",
    "WmsCapabilities",
    "freeze_mapping",
]

#: A bounding box as [minX, minY, maxX, maxY]. The original decimal notation is kept.
BoundingBox = tuple[str, str, str, str]

#: The URLs per operation (e.g. ``GetMap``) and HTTP method (``Get`` or ``Post``).
OperationUrls = Mapping[str, Mapping[str, str]]


def freeze_mapping(value: Mapping) -> MappingProxyType:
    """Return a read-only copy of a mapping."""
    if isinstance(value, MappingProxyType):
        return value
    return MappingProxyType(dict(value))


class PropertyType(str, Enum):
    """The scalar types that feature properties are converted to."""

    integer = "integer"
    float = "float"
    boolean = "boolean"
    string = "string"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class Attribution:
    title: str | None = None
    url: str | None = None
    logo_url: str | None = None


@dataclass(frozen=True)
class LayerStyle:
    name: str
    title: str
    legend_url: str | None = None


@dataclass(frozen=True)
class MetadataUrl:
    type: str
    format: str
    url: str


@dataclass(frozen=True)
class LayerNode:
    """A WMS layer.

    The parser fills in the attributes that the layer itself declares.
    After resolving the inheritance (see :mod:`owsclient.wms.inheritance`),
    the same structure holds the effective attributes.
    """

    #: Unique name within the service, ``None`` for a layer that only groups other layers.
    name: str | None
    title: str = ""
    abstract: str = ""
    #: Own keywords only; these are never inherited.
    keywords: tuple[str, ...] = ()
    attribution: Attribution | None = None
    available_crs: tuple[str, ...] = ()
    bounding_boxes: Mapping[str, BoundingBox] = field(default_factory=dict)
    styles: tuple[LayerStyle, ...] = ()
    min_scale_denominator: float | None = None
    max_scale_denominator: float | None = None
    queryable: bool = False
    opaque: bool = False
    metadata: tuple[MetadataUrl, ...] = ()
    #: Child layers in document order, ``None`` for a leaf layer.
    children: tuple[LayerNode, ...] | None = None

    def __post_init__(self):
        object.__setattr__(self, "bounding_boxes", freeze_mapping(self.bounding_boxes))

    def walk(self):
        """Iterate over this layer and all its descendants (pre-order)."""
        stack = [self]
        while stack:
            layer = stack.pop()
            yield layer
            if layer.children:
                stack.extend(reversed(layer.children))


@dataclass(frozen=True)
class LayerSummary:
    """The short description of a layer, as returned by the endpoint."""

    name: str | None
    title: str
    abstract: str
    children: tuple[LayerSummary, ...] | None = None


@dataclass(frozen=True)
class Address:
    delivery_point: str = ""
    city: str = ""
    administrative_area: str = ""
    postal_code: str = ""
    country: str = ""


@dataclass(frozen=True)
class Contact:
    name: str = ""
    organization: str = ""
    position: str = ""
    phone: str = ""
    fax: str = ""
    email: str = ""
    address: Address = field(default_factory=Address)


@dataclass(frozen=True)
class Provider:
    contact: Contact


@dataclass(frozen=True)
class ServiceInfo:
    """The general description of the service."""

    name: str
    title: str
    abstract: str = ""
    keywords: tuple[str, ...] = ()
    constraints: str = ""
    fees: str = ""
    output_formats: tuple[str, ...] = ()
    info_formats: tuple[str, ...] = ()
    exception_formats: tuple[str, ...] = ()
    provider: Provider | None = None


@dataclass(frozen=True)
class FeatureTypeSummary:
    """A feature type as it's listed in the WFS capabilities."""

    name: str
    title: str = ""
    abstract: str = ""
    keywords: tuple[str, ...] = ()
    #: The WGS84 bounding box in longitude/latitude order.
    bounding_box: BoundingBox | None = None
    default_crs: str | None = None
    other_crs: tuple[str, ...] = ()
    output_formats: tuple[str, ...] = ()


@dataclass(frozen=True)
class FeatureTypeFull:
    """A feature type with its property schema (from the DescribeFeatureType response)."""

    name: str
    title: str = ""
    abstract: str = ""
    properties: Mapping[str, PropertyType] = field(default_factory=dict)
    default_crs: str | None = None
    other_crs: tuple[str, ...] = ()
    geometry_name: str | None = None
    geometry_type: str | None = None
    bounding_box: BoundingBox | None = None
    output_formats: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "properties", freeze_mapping(self.properties))


@dataclass(frozen=True)
class FeatureWithProps:
    id: Union[str, int, None]
    properties: dict[str, Any]


@dataclass(frozen=True)
class UniqueValue:
    value: Any
    count: int


@dataclass(frozen=True)
class PropDetails:
    unique_values: tuple[UniqueValue, ...]


PropsDetails = Mapping[str, PropDetails]


@dataclass(frozen=True)
class WmsCapabilities:
    """Everything that is read from a WMS GetCapabilities response."""

    version: str
    info: ServiceInfo
    layers: tuple[LayerNode, ...]
    urls: OperationUrls

    def __post_init__(self):
        object.__setattr__(self, "urls", _freeze_operation_urls(self.urls))


@dataclass(frozen=True)
class WfsCapabilities:
    """Everything that is read from a WFS GetCapabilities response."""

    version: str
    info: ServiceInfo
    feature_types: tuple[FeatureTypeSummary, ...]
    urls: OperationUrls

    def __post_init__(self):
        object.__setattr__(self, "urls", _freeze_operation_urls(self.urls))


def _freeze_operation_urls(urls: OperationUrls) -> OperationUrls:
    return MappingProxyType(
        {operation: freeze_mapping(methods) for operation, methods in urls.items()}
    )
