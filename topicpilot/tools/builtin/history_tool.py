from typing import Any, Optional

from topicpilot.context.budget import escape_single_line, render_payload, truncate
from topicpilot.tools.schema import Tool
from topicpilot.tree import TopicNode, resolve

from .common import clamp_limit, not_found


HISTORY_DEFAULT_LIMIT = 10
HISTORY_MAX_LIMIT = 20
HISTORY_TOKEN_BUDGET = 200


HISTORY_TOOL = Tool(
    name="query_topic_history",
    description=(
        "Get recent message history for a topic to analyze patterns and trends. "
        "Use an exact topic path; MQTT wildcards (+, #) are not supported."
    ),
    operation="history",
    input_schema={
        "topic": "string",
        "limit": "int?",
    },
    parameter_docs={
        "topic": "Exact topic path, e.g. home/bedroom/lamp",
        "limit": f"Number of most recent messages (default {HISTORY_DEFAULT_LIMIT}, max {HISTORY_MAX_LIMIT})",
    },
    token_budget=HISTORY_TOKEN_BUDGET,
)


def query_topic_history(path: str, limit: Any = None, root: Optional[TopicNode] = None) -> str:
    """
    Most recent ``limit`` messages of a topic, oldest first, one per line.
    """
    node = resolve(path, root)
    if node is None:
        return not_found(path)

    entries = node.history()
    if not entries:
        return f"No messages in history for topic: {path}"

    window = entries[-clamp_limit(limit, HISTORY_DEFAULT_LIMIT, HISTORY_MAX_LIMIT):]

    lines = []
    for value in window:
        timestamp = value.received_at.isoformat() if value.received_at else "unknown"
        lines.append(f"[{timestamp}] {escape_single_line(render_payload(value.payload))}")

    return truncate("\n".join(lines), HISTORY_TOKEN_BUDGET).text
