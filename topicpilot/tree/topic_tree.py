from __future__ import annotations

import logging
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Iterable, List, Optional, Sequence, Union

from .nodes import DELIMITER, TopicNode, Value

logger = logging.getLogger(__name__)


class TopicTree:
    """
    Arena holding every node of a live topic tree.

    This class is a *data structure only*. It is the write side used by
    whatever ingests broker messages; the assistant only reads nodes
    through their accessors.

    Nodes are addressed by arena index. Parent links are indices, so the
    graph never forms ownership cycles.
    """

    DEFAULT_HISTORY_CAPACITY = 100

    def __init__(self, history_capacity: int = DEFAULT_HISTORY_CAPACITY) -> None:
        if history_capacity <= 0:
            raise ValueError("history_capacity must be positive.")

        self._history_capacity = history_capacity
        self._nodes: List[TopicNode] = []
        self._lock = RLock()
        self._root = self._new_node("", None)

    # ------------------------------------------------------------------
    # Arena Access
    # ------------------------------------------------------------------

    @property
    def root(self) -> TopicNode:
        return self._root

    def node(self, index: int) -> TopicNode:
        return self._nodes[index]

    def nodes(self) -> Iterable[TopicNode]:
        return list(self._nodes)

    def __len__(self) -> int:
        """Number of topics, excluding the root."""
        return len(self._nodes) - 1

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ensure(self, topic: Union[str, Sequence[str]]) -> TopicNode:
        """
        Return the node for ``topic``, creating missing segments.

        A string is split on the delimiter without normalization, so
        ``"a//b"`` creates an empty-named middle segment. Pass a sequence
        of segments to create names that contain the delimiter.
        """
        segments = topic.split(DELIMITER) if isinstance(topic, str) else list(topic)

        with self._lock:
            node = self._root
            for segment in segments:
                child = node.child(segment)
                if child is None:
                    child = self._new_node(segment, node.index)
                    node._attach_child(segment, child.index)
                node = child
            return node

    def publish(
        self,
        topic: Union[str, Sequence[str]],
        payload: Any,
        retained: bool = False,
        received_at: Optional[datetime] = None,
    ) -> TopicNode:
        """Record one message on ``topic`` and return its node."""

        value = Value(
            payload=payload,
            retained=retained,
            received_at=received_at or datetime.now(timezone.utc),
        )

        with self._lock:
            node = self.ensure(topic)
            node._record(value)

        logger.debug(
            "[TREE] publish | topic=%s | retained=%s | messages=%d",
            node.path(),
            retained,
            node.message_count,
        )

        return node

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _new_node(self, name: str, parent_index: Optional[int]) -> TopicNode:
        node = TopicNode(
            self,
            index=len(self._nodes),
            name=name,
            parent_index=parent_index,
            history_capacity=self._history_capacity,
        )
        self._nodes.append(node)
        return node
