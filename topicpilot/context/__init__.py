"""
Model-facing text: token budgeting and topic digests.
"""

from .budget import (
    CHARS_PER_TOKEN,
    TRUNCATION_MARKER,
    Truncation,
    escape_single_line,
    estimate,
    format_value,
    render_payload,
    truncate,
)
from .builder import ContextBuilder

__all__ = [
    "CHARS_PER_TOKEN",
    "TRUNCATION_MARKER",
    "Truncation",
    "ContextBuilder",
    "escape_single_line",
    "estimate",
    "format_value",
    "render_payload",
    "truncate",
]
