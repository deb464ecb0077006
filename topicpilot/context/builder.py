from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional, Tuple

from ..tree.nodes import TopicNode
from .budget import escape_single_line, estimate, format_value

logger = logging.getLogger(__name__)


class _RelatedWalk:
    """Accumulates related-topic entries against one shared token budget."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.used = 0
        self.entries: List[str] = []

    @property
    def exhausted(self) -> bool:
        return self.used >= self.limit

    def offer(self, node: TopicNode, allowance: int) -> bool:
        entry = f"  {escape_single_line(node.path())}: {format_value(node.value.payload, allowance)}"
        cost = estimate(entry)

        if self.used + cost > self.limit:
            return False

        self.entries.append(entry)
        self.used += cost
        return True


class ContextBuilder:
    """
    Builds the topic digest that is prepended to a user question.

    The digest is plain text, one field per line. Payloads are escaped so
    a value never spans more than one line. Related topics are chosen by a
    fixed priority order under a single token budget:

        parent -> siblings -> children -> grandchildren -> cousins

    Within a tier, the first entry that does not fit ends that tier;
    later tiers still get a chance while budget remains.
    """

    VALUE_TOKENS = 200
    NEIGHBOR_TOKENS = 30
    COUSIN_TOKENS = 25
    DEFAULT_NEIGHBOR_LIMIT = 500

    def __init__(self, neighbor_token_limit: int = DEFAULT_NEIGHBOR_LIMIT) -> None:
        if neighbor_token_limit <= 0:
            raise ValueError("neighbor_token_limit must be positive.")
        self.neighbor_token_limit = neighbor_token_limit

    # ------------------------------------------------------------------
    # Digest
    # ------------------------------------------------------------------

    def build(self, node: TopicNode) -> str:

        lines: List[str] = [f"Topic: {escape_single_line(node.path()) or '(root)'}"]

        if node.has_value:
            lines.append(f"Value: {format_value(node.value.payload, self.VALUE_TOKENS)}")

        if node.value is not None and node.value.retained:
            lines.append("Retained: true")

        related = self.related(node)
        if related:
            lines.append(f"\nRelated Topics ({len(related)}):")
            lines.extend(related)

        if node.message_count:
            lines.append(f"\nMessages: {node.message_count}")

        if node.child_count > 0:
            lines.append(f"Subtopics: {node.child_count}")

        digest = "\n".join(lines)

        logger.debug(
            "[CONTEXT] topic=%s | related=%d | tokens~%d",
            node.path(),
            len(related),
            estimate(digest),
        )

        return digest

    def related(self, node: TopicNode) -> List[str]:
        walk = _RelatedWalk(self.neighbor_token_limit)

        for tier, allowance in self._tiers(node):
            if walk.exhausted:
                break
            for candidate in tier:
                if not candidate.has_value:
                    continue
                if not walk.offer(candidate, allowance):
                    break

        return walk.entries

    # ------------------------------------------------------------------
    # Priority Tiers
    # ------------------------------------------------------------------

    def _tiers(self, node: TopicNode) -> Iterator[Tuple[Iterable[TopicNode], int]]:
        parent = node.parent
        siblings = [s for s in parent.children if s is not node] if parent else []

        yield ([parent] if parent is not None else []), self.NEIGHBOR_TOKENS
        yield siblings, self.NEIGHBOR_TOKENS
        yield node.children, self.NEIGHBOR_TOKENS
        yield self._descendants_of(node.children), self.NEIGHBOR_TOKENS
        yield self._descendants_of(siblings), self.COUSIN_TOKENS

    @staticmethod
    def _descendants_of(nodes: List[TopicNode]) -> Iterator[TopicNode]:
        for node in nodes:
            yield from node.children

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    @staticmethod
    def quick_suggestions(node: Optional[TopicNode]) -> List[str]:
        """Canned follow-up prompts for the chat input."""
        suggestions: List[str] = []

        if node is not None:
            if node.has_value:
                suggestions.append("Explain this data structure")
                suggestions.append("What does this value mean?")

            if node.child_count > 0:
                suggestions.append("Summarize all subtopics")

            if node.message_count > 1:
                suggestions.append("Analyze message patterns")

        suggestions.append("What can I do with this topic?")

        return suggestions
