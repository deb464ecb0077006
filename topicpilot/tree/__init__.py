"""
Topic tree data structures.

Exposes:
- TopicTree (arena + ingestion)
- TopicNode, Value
- resolve / find_root (literal path lookup)
"""

from .nodes import DELIMITER, TopicNode, Value
from .topic_tree import TopicTree
from .resolver import resolve, find_root

__all__ = [
    "DELIMITER",
    "TopicNode",
    "TopicTree",
    "Value",
    "resolve",
    "find_root",
]
