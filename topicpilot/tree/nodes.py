from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Deque, Dict, List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .topic_tree import TopicTree


DELIMITER = "/"


@dataclass(frozen=True)
class Value:
    """
    A single message received on a topic.

    The payload is opaque to the query side: it may be a string, bytes,
    a number, or a decoded JSON structure. Rendering happens at the edge
    (see ``topicpilot.context.budget.render_payload``).
    """

    payload: Any
    retained: bool = False
    received_at: Optional[datetime] = None


class TopicNode:
    """
    One segment of the topic tree.

    Nodes live inside a ``TopicTree`` arena. A node never owns its parent:
    the parent is stored as an arena index and looked up through the
    tree. Children are kept as an insertion-ordered map
    of segment name -> arena index so enumeration is deterministic.

    Segment names are opaque. They may be empty or contain the delimiter.
    """

    __slots__ = (
        "_tree",
        "index",
        "name",
        "parent_index",
        "value",
        "message_count",
        "_history",
        "_children",
    )

    def __init__(
        self,
        tree: "TopicTree",
        index: int,
        name: str,
        parent_index: Optional[int],
        history_capacity: int,
    ) -> None:
        self._tree = tree
        self.index = index
        self.name = name
        self.parent_index = parent_index
        self.value: Optional[Value] = None
        self.message_count = 0
        self._history: Deque[Value] = deque(maxlen=history_capacity)
        self._children: Dict[str, int] = {}

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def _arena(self) -> "TopicTree":
        return self._tree

    @property
    def parent(self) -> Optional["TopicNode"]:
        if self.parent_index is None:
            return None
        return self._arena().node(self.parent_index)

    @property
    def is_root(self) -> bool:
        return self.parent_index is None

    def child(self, name: str) -> Optional["TopicNode"]:
        index = self._children.get(name)
        if index is None:
            return None
        return self._arena().node(index)

    def child_items(self) -> List[Tuple[str, "TopicNode"]]:
        arena = self._arena()
        return [(name, arena.node(index)) for name, index in list(self._children.items())]

    @property
    def children(self) -> List["TopicNode"]:
        return [node for _, node in self.child_items()]

    @property
    def child_count(self) -> int:
        return len(self._children)

    def path(self) -> str:
        """Full topic path; the root's path is the empty string."""
        names: List[str] = []
        node: Optional[TopicNode] = self
        while node is not None and not node.is_root:
            names.append(node.name)
            node = node.parent
        return DELIMITER.join(reversed(names))

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    @property
    def has_value(self) -> bool:
        return self.value is not None and self.value.payload is not None

    def history(self) -> List[Value]:
        """Retained history, oldest first."""
        return list(self._history)

    # ------------------------------------------------------------------
    # Store-side mutation (used by TopicTree only)
    # ------------------------------------------------------------------

    def _attach_child(self, name: str, index: int) -> None:
        self._children[name] = index

    def _record(self, value: Value) -> None:
        self.value = value
        self._history.append(value)
        self.message_count += 1

    def __repr__(self) -> str:
        return f"TopicNode(path='{self.path()}', children={self.child_count})"
