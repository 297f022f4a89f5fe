"""Attribute inheritance of WMS layers.

Layers inherit several attributes from their parent layer, each in their own way:

* ``attribution``, ``min_scale_denominator`` and ``max_scale_denominator``
  are replaced when a layer declares them, and inherited otherwise.
* ``available_crs`` is the union of the inherited codes and the layer's own codes.
* ``bounding_boxes`` are merged by CRS code, the layer's own boxes take precedence.
* ``styles`` are replaced when the layer declares any style, and inherited otherwise.

Everything else, including the ``keywords``, only describes the layer itself.

The tree is resolved from the top down, so each layer receives the effective
attributes of its parent. A resolved tree can be resolved again without any changes.
"""

from __future__ import annotations

import dataclasses
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field

from owsclient.types import Attribution, BoundingBox, LayerNode, LayerStyle

__all__ = ("InheritedAttributes", "inherit_attributes", "resolve_layer_tree")


@dataclass(frozen=True)
class InheritedAttributes:
    """The effective attributes of a layer that are passed down to its children."""

    attribution: Attribution | None = None
    min_scale_denominator: float | None = None
    max_scale_denominator: float | None = None
    available_crs: tuple[str, ...] = ()
    bounding_boxes: dict[str, BoundingBox] = field(default_factory=dict)
    styles: tuple[LayerStyle, ...] = ()


def _union(inherited: tuple[str, ...], own: Iterable[str]) -> tuple[str, ...]:
    # dict keeps insertion order, so inherited codes come first.
    return tuple(dict.fromkeys((*inherited, *own)))


def inherit_attributes(layer: LayerNode, parent: InheritedAttributes) -> InheritedAttributes:
    """Combine the layer's own declarations with the effective attributes of its parent."""
    return InheritedAttributes(
        attribution=layer.attribution if layer.attribution is not None else parent.attribution,
        min_scale_denominator=(
            layer.min_scale_denominator
            if layer.min_scale_denominator is not None
            else parent.min_scale_denominator
        ),
        max_scale_denominator=(
            layer.max_scale_denominator
            if layer.max_scale_denominator is not None
            else parent.max_scale_denominator
        ),
        available_crs=_union(parent.available_crs, layer.available_crs),
        bounding_boxes={**parent.bounding_boxes, **layer.bounding_boxes},
        styles=layer.styles or parent.styles,
    )


def resolve_layer_tree(
    layers: Iterable[LayerNode], parent: InheritedAttributes | None = None
) -> tuple[LayerNode, ...]:
    """Return a new layer tree where each layer holds its effective attributes.

    This walks the tree with an explicit stack, so deep trees don't hit the recursion limit.
    """
    layers = tuple(layers)
    root_attributes = parent or InheritedAttributes()

    # First pass (pre-order): every parent is resolved before its children.
    visited = []  # (layer, effective attributes, position of the parent)
    stack = [(layer, root_attributes, None) for layer in reversed(layers)]
    while stack:
        layer, inherited, parent_pos = stack.pop()
        attributes = inherit_attributes(layer, inherited)
        position = len(visited)
        visited.append((layer, attributes, parent_pos))
        if layer.children:
            stack.extend((child, attributes, position) for child in reversed(layer.children))

    # Second pass (reversed pre-order): children are rebuilt before their parents.
    roots = []
    children_of = defaultdict(list)
    for position in range(len(visited) - 1, -1, -1):
        layer, attributes, parent_pos = visited[position]
        children = layer.children
        if children is not None:
            children = tuple(reversed(children_of.pop(position, ())))
        resolved = dataclasses.replace(layer, children=children, **_as_fields(attributes))
        if parent_pos is None:
            roots.append(resolved)
        else:
            children_of[parent_pos].append(resolved)

    return tuple(reversed(roots))


def _as_fields(attributes: InheritedAttributes) -> dict:
    # Not dataclasses.asdict(), that would also convert the nested records.
    return {f.name: getattr(attributes, f.name) for f in dataclasses.fields(attributes)}
