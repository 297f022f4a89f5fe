from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Sequence
from typing import TypeVar

N = TypeVar("N")
R = TypeVar("R")

__all__ = ("fold_tree",)


def fold_tree(
    roots: Sequence[N],
    get_children: Callable[[N], Sequence[N] | None],
    build: Callable[[N, tuple[R, ...] | None], R],
) -> tuple[R, ...]:
    """Rebuild a tree bottom-up, so each node is built after all its children.

    This walks the tree with an explicit stack, so deep trees don't hit the recursion limit.
    The ``build`` function receives ``None`` as children when ``get_children`` returned ``None``.
    """
    # Collect all nodes in pre-order.
    visited = []  # (node, has children, position of the parent)
    stack = [(node, None) for node in reversed(roots)]
    while stack:
        node, parent_pos = stack.pop()
        children = get_children(node)
        position = len(visited)
        visited.append((node, children is not None, parent_pos))
        if children:
            stack.extend((child, position) for child in reversed(children))

    # Reversed pre-order visits all children before their parent.
    results = []
    children_of = defaultdict(list)
    for position in range(len(visited) - 1, -1, -1):
        node, has_children, parent_pos = visited[position]
        children = tuple(reversed(children_of.pop(position, ()))) if has_children else None
        result = build(node, children)
        if parent_pos is None:
            results.append(result)
        else:
            children_of[parent_pos].append(result)

    return tuple(reversed(results))
