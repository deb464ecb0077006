"""
Literal path lookup over the topic tree.

Paths are never normalized. ``"a//b"`` addresses an empty-named segment
between ``a`` and ``b``, and a segment whose own name contains the
delimiter (``"/sensor"``) is reachable as ``"devices//sensor"``.
"""

from __future__ import annotations

import logging
from typing import Optional

from .nodes import DELIMITER, TopicNode

logger = logging.getLogger(__name__)


def resolve(path: str, root: Optional[TopicNode]) -> Optional[TopicNode]:
    """
    Return the node whose ``path()`` equals ``path``, or None.

    The empty path is the root itself.
    """
    if root is None or path is None:
        return None

    if path == "":
        return root

    node = _walk(root, path)

    logger.debug("[RESOLVE] %s -> %s", path, "found" if node else "not found")

    return node


def find_root(node: Optional[TopicNode]) -> Optional[TopicNode]:
    """Follow parent links to the top. A parentless node is its own root."""
    if node is None:
        return None

    current = node
    while current.parent is not None:
        current = current.parent
    return current


def _walk(node: TopicNode, rest: str) -> Optional[TopicNode]:
    head, sep, tail = rest.partition(DELIMITER)

    child = node.child(head)
    if child is not None:
        if not sep:
            return child
        found = _walk(child, tail)
        if found is not None:
            return found

    # Names containing the delimiter span several split segments
    for name, candidate in node.child_items():
        if DELIMITER not in name:
            continue
        if rest == name:
            return candidate
        if rest.startswith(name + DELIMITER):
            found = _walk(candidate, rest[len(name) + 1:])
            if found is not None:
                return found

    return None
