"""
Approximate token accounting for model-facing text.

Estimates use a fixed characters-per-token ratio instead of a real
tokenizer. Budgets are soft ceilings, so the approximation only needs to
be deterministic and monotonic.
"""

from __future__ import annotations

import json
from typing import Any, NamedTuple

CHARS_PER_TOKEN = 4
TRUNCATION_MARKER = "…[TRUNCATED]"

_ESCAPES = (
    ("\\", "\\\\"),  # must run first
    ("\n", "\\n"),
    ("\r", "\\r"),
    ("\t", "\\t"),
    ('"', '\\"'),
)


class Truncation(NamedTuple):
    text: str
    was_truncated: bool


def estimate(text: str) -> int:
    """Approximate token count: ceil(len / CHARS_PER_TOKEN)."""
    if not text:
        return 0
    return -(-len(text) // CHARS_PER_TOKEN)


def truncate(text: str, budget: int) -> Truncation:
    """
    Cut ``text`` so that ``estimate(result.text) <= budget``.

    Text already within budget is returned unchanged. Otherwise the longest
    prefix that leaves room for ``TRUNCATION_MARKER`` is kept and the marker
    appended. Never raises.
    """
    text = text if isinstance(text, str) else ("" if text is None else str(text))

    try:
        budget = max(0, int(budget))
    except (TypeError, ValueError):
        budget = 0

    if estimate(text) <= budget:
        return Truncation(text, False)

    max_chars = budget * CHARS_PER_TOKEN
    keep = max_chars - len(TRUNCATION_MARKER)

    if keep <= 0:
        return Truncation(TRUNCATION_MARKER[:max_chars], True)

    return Truncation(text[:keep] + TRUNCATION_MARKER, True)


def escape_single_line(text: str) -> str:
    """Escape backslash, CR, LF, tab and double quote as two-character sequences."""
    for raw, escaped in _ESCAPES:
        text = text.replace(raw, escaped)
    return text


def render_payload(payload: Any) -> str:
    """Render an opaque payload as text."""
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload).decode("utf-8", errors="replace")

    if isinstance(payload, str):
        return payload

    if payload is None or isinstance(payload, (dict, list, tuple, bool)):
        try:
            return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            return str(payload)

    return str(payload)


def format_value(payload: Any, budget: int) -> str:
    """Single-line, budget-bounded rendering of a payload."""
    return truncate(escape_single_line(render_payload(payload)), budget).text
