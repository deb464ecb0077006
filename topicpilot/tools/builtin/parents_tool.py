from typing import Any, List, Optional

from topicpilot.context.budget import truncate
from topicpilot.tools.schema import Tool
from topicpilot.tree import TopicNode, resolve

from .common import not_found


PARENTS_TOKEN_BUDGET = 100


PARENTS_TOOL = Tool(
    name="list_parents",
    description="Get the ancestor path hierarchy of a topic, from the top level down.",
    operation="parents",
    input_schema={
        "topic": "string",
    },
    parameter_docs={
        "topic": "Exact topic path, e.g. home/bedroom/lamp",
    },
    token_budget=PARENTS_TOKEN_BUDGET,
)


def list_parents(path: str, limit: Any = None, root: Optional[TopicNode] = None) -> str:
    node = resolve(path, root)
    if node is None:
        return not_found(path)

    ancestors: List[str] = []
    current = node.parent
    while current is not None and not current.is_root:
        ancestors.append(current.path())
        current = current.parent
    ancestors.reverse()

    if not ancestors:
        return f"No parent topics for: {path} (root level topic)"

    lines = ["Parent hierarchy:"]
    lines.extend(f"{'  ' * depth}{ancestor}" for depth, ancestor in enumerate(ancestors))
    lines.append(f"{'  ' * len(ancestors)}{path} (current)")

    return truncate("\n".join(lines), PARENTS_TOKEN_BUDGET).text
