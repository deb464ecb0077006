"""Test helpers shared across modules."""

from __future__ import annotations

import json
import time
from typing import Any, Dict, List, Optional, Sequence

from topicpilot.agent.llm import GatewayReply, ModelGateway
from topicpilot.models import ChatMessage


def tool_call(call_id: str, name: str, arguments: Any) -> Dict[str, Any]:
    """OpenAI-shaped raw tool call."""
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": name, "arguments": arguments},
    }


class RecordedCall:
    def __init__(self, messages: Sequence[ChatMessage], tools: Optional[List[Dict[str, Any]]]) -> None:
        self.messages = list(messages)
        self.tools = tools

    @property
    def tool_names(self) -> List[str]:
        return [t["function"]["name"] for t in (self.tools or [])]


class ScriptedGateway(ModelGateway):
    """
    Replays a fixed script of replies.

    Items may be GatewayReply instances or exceptions (raised when reached).
    Once the script runs out the last item is repeated.
    """

    def __init__(self, script: Sequence[Any]) -> None:
        if not script:
            raise ValueError("script must not be empty")
        self.script = list(script)
        self.calls: List[RecordedCall] = []

    def complete(self, messages, tools=None) -> GatewayReply:
        self.calls.append(RecordedCall(messages, tools))
        index = min(len(self.calls), len(self.script)) - 1
        item = self.script[index]
        if isinstance(item, BaseException):
            raise item
        return item


def text_reply(text: str) -> GatewayReply:
    return GatewayReply(text=text)


def tools_reply(*calls: Dict[str, Any], text: str = "") -> GatewayReply:
    return GatewayReply(text=text, tool_calls=list(calls))


class SlowGateway(ScriptedGateway):
    """ScriptedGateway that pauses before each reply."""

    def __init__(self, script: Sequence[Any], delay: float = 0.05) -> None:
        super().__init__(script)
        self.delay = delay

    def complete(self, messages, tools=None) -> GatewayReply:
        time.sleep(self.delay)
        return super().complete(messages, tools)
