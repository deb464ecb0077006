from typing import Any, Optional

from topicpilot.context.budget import truncate
from topicpilot.tools.schema import Tool
from topicpilot.tree import TopicNode, resolve

from .common import clamp_limit, not_found


CHILDREN_DEFAULT_LIMIT = 20
CHILDREN_MAX_LIMIT = 50
CHILDREN_TOKEN_BUDGET = 200

VALUE_MARKER = "✓"
STRUCTURAL_MARKER = "○"


CHILDREN_TOOL = Tool(
    name="list_children",
    description=(
        "List child topics under a parent to explore the hierarchy. "
        "Entries marked ✓ carry a value, ○ are structural only. "
        "Omit topic (or pass an empty string) to list top-level topics."
    ),
    operation="children",
    input_schema={
        "topic": "string?",
        "limit": "int?",
    },
    parameter_docs={
        "topic": "Exact parent topic path; empty for the tree root",
        "limit": f"Maximum children to list (default {CHILDREN_DEFAULT_LIMIT}, max {CHILDREN_MAX_LIMIT})",
    },
    token_budget=CHILDREN_TOKEN_BUDGET,
)


def list_children(path: str = "", limit: Any = None, root: Optional[TopicNode] = None) -> str:
    path = path or ""

    node = resolve(path, root)
    if node is None:
        return not_found(path)

    if node.child_count == 0:
        return f"No child topics found for: {path}"

    selected = node.children[:clamp_limit(limit, CHILDREN_DEFAULT_LIMIT, CHILDREN_MAX_LIMIT)]

    lines = []
    for child in selected:
        marker = VALUE_MARKER if child.has_value else STRUCTURAL_MARKER
        suffix = f" ({child.child_count} subtopics)" if child.child_count > 0 else ""
        lines.append(f"{marker} {child.path()}{suffix}")

    text = f"Child topics ({len(lines)}):\n" + "\n".join(lines)

    return truncate(text, CHILDREN_TOKEN_BUDGET).text
