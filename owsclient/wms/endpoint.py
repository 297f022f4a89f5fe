"""The WMS endpoint, which gives access to a single remote WMS service."""

from __future__ import annotations

import logging

from owsclient.endpoint import BaseEndpoint
from owsclient.types import LayerNode, LayerSummary, WmsCapabilities
from owsclient.utils import fold_tree
from owsclient.wms.capabilities import parse_wms_capabilities

logger = logging.getLogger(__name__)

__all__ = ("WmsEndpoint",)


class WmsEndpoint(BaseEndpoint):
    """Represents a WMS endpoint advertising several layers arranged in a tree structure.

    Creating the endpoint directly starts fetching the capabilities document,
    hence it needs to be constructed while an event loop is running.
    Wait for :meth:`is_ready` before reading the data::

        endpoint = await WmsEndpoint("https://example.org/wms").is_ready()
        endpoint.get_layers()
    """

    service_type = "WMS"
    _capabilities: WmsCapabilities | None

    def parse_capabilities(self, xml_string: str | bytes) -> WmsCapabilities:
        return parse_wms_capabilities(xml_string)

    def get_layers(self) -> list[LayerSummary] | None:
        """Returns the layers in summary format; layers are organized in a tree
        structure with each having an optional ``children`` property.
        """
        if self._capabilities is None:
            return None
        return list(
            fold_tree(
                self._capabilities.layers,
                get_children=lambda layer: layer.children,
                build=lambda layer, children: LayerSummary(
                    name=layer.name, title=layer.title, abstract=layer.abstract, children=children
                ),
            )
        )

    def get_flattened_layers(self) -> list[LayerSummary] | None:
        """Returns the same layers as :meth:`get_layers`, in a flat list (pre-order)."""
        if self._capabilities is None:
            return None
        return [
            LayerSummary(name=layer.name, title=layer.title, abstract=layer.abstract)
            for layer in self._walk_layers()
        ]

    def get_layer_by_name(self, name: str) -> LayerNode | None:
        """Returns the full layer information, including supported coordinate systems,
        bounding boxes, styles, etc. The layer name is case-sensitive.

        :param name: Layer name (unique within the WMS service).
        :returns: ``None`` when the layer was not found, or the endpoint isn't ready.
        """
        if self._capabilities is None:
            return None
        return next((layer for layer in self._walk_layers() if layer.name == name), None)

    def get_single_layer_name(self) -> str | None:
        """If only one single renderable layer is available, return its name; otherwise None."""
        if self._capabilities is None:
            return None
        names = [layer.name for layer in self._walk_layers() if layer.name]
        return names[0] if len(names) == 1 else None

    def _walk_layers(self):
        for root in self._capabilities.layers:
            yield from root.walk()
