"""
Built-in read-only topic tree queries.

Each query is callable on its own as ``(path, limit, root) -> str`` and
always answers with text, never an exception.
"""

from .history_tool import HISTORY_TOOL, query_topic_history
from .describe_tool import DESCRIBE_TOOL, get_topic
from .children_tool import CHILDREN_TOOL, list_children
from .parents_tool import PARENTS_TOOL, list_parents


TOPIC_TOOLS = (
    HISTORY_TOOL,
    DESCRIBE_TOOL,
    CHILDREN_TOOL,
    PARENTS_TOOL,
)

# operation name -> handler
TOPIC_HANDLERS = {
    "history": query_topic_history,
    "describe": get_topic,
    "children": list_children,
    "parents": list_parents,
}


def register_topic_tools(registry) -> None:
    """Register the four tree queries on a ToolRegistry."""
    registry.register_many(TOPIC_TOOLS)


__all__ = [
    "HISTORY_TOOL",
    "DESCRIBE_TOOL",
    "CHILDREN_TOOL",
    "PARENTS_TOOL",
    "TOPIC_TOOLS",
    "TOPIC_HANDLERS",
    "query_topic_history",
    "get_topic",
    "list_children",
    "list_parents",
    "register_topic_tools",
]
