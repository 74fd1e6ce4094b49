"""Helpers for walking tree-sitter-java syntax trees."""

from tree_sitter import Node

_DEFAULT_ENCODING = "utf-8"

# tree-sitter rows are 0-based, diagnostics use 1-based lines
LINE_INDEX_OFFSET = 1


def get_node_text(node: Node, source_bytes: bytes) -> str:
    """Slice the source a node spans.

    Args:
        node: Node of a tree parsed from ``source_bytes``
        source_bytes: UTF-8 source the tree was built from

    Returns:
        Decoded node text

    """
    return source_bytes[node.start_byte : node.end_byte].decode(_DEFAULT_ENCODING)


def get_line(node: Node) -> int:
    return node.start_point[0] + LINE_INDEX_OFFSET


def find_child_by_type(node: Node, child_type: str) -> Node | None:
    """First direct child whose type is ``child_type``, if any."""
    return next((c for c in node.children if c.type == child_type), None)


def find_children_by_type(node: Node, child_type: str) -> list[Node]:
    return [c for c in node.children if c.type == child_type]


def find_outermost_by_types(node: Node, node_types: frozenset[str]) -> list[Node]:
    """Collect descendants of ``node_types`` without entering a match.

    Used to find local and anonymous-scope class declarations inside member
    bodies: a class declared inside another local class belongs to that
    class, not to the member being searched.

    Args:
        node: Node whose descendants are searched (the node itself is not)
        node_types: Node types to collect

    Returns:
        Matches in source order

    """
    found: list[Node] = []
    pending = list(reversed(node.children))
    while pending:
        current = pending.pop()
        if current.type in node_types:
            found.append(current)
        else:
            pending.extend(reversed(current.children))
    return found
