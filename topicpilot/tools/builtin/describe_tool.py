from typing import Any, Optional

from topicpilot.context.budget import escape_single_line, render_payload, truncate
from topicpilot.tools.schema import Tool
from topicpilot.tree import TopicNode, resolve

from .common import not_found


DESCRIBE_TOKEN_BUDGET = 200


DESCRIBE_TOOL = Tool(
    name="get_topic",
    description=(
        "Get details about a specific topic: current value, retained flag, "
        "message count and number of subtopics."
    ),
    operation="describe",
    input_schema={
        "topic": "string",
    },
    parameter_docs={
        "topic": "Exact topic path, e.g. home/bedroom/lamp",
    },
    token_budget=DESCRIBE_TOKEN_BUDGET,
)


def get_topic(path: str, limit: Any = None, root: Optional[TopicNode] = None) -> str:
    node = resolve(path, root)
    if node is None:
        return not_found(path)

    info = [f"Topic: {path}"]

    if node.has_value:
        info.append(f"Value: {escape_single_line(render_payload(node.value.payload))}")

    if node.value is not None and node.value.retained:
        info.append("Retained: true")

    if node.message_count:
        info.append(f"Messages: {node.message_count}")

    if node.child_count > 0:
        info.append(f"Subtopics: {node.child_count}")

    return truncate("\n".join(info), DESCRIBE_TOKEN_BUDGET).text
