from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional


Role = Literal["system", "user", "assistant", "tool"]


@dataclass
class ChatMessage:
    """
    One entry of a conversation.

    Assistant messages that requested tools keep the gateway's raw
    ``tool_calls`` list untouched; it is echoed back verbatim on the next
    request. Tool messages carry the ``tool_call_id`` they answer.
    """

    role: Role
    content: str = ""
    tool_calls: Optional[List[Dict[str, Any]]] = None
    tool_call_id: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role="user", content=content)

    @classmethod
    def assistant(
        cls,
        content: str,
        tool_calls: Optional[List[Dict[str, Any]]] = None,
    ) -> "ChatMessage":
        return cls(role="assistant", content=content or "", tool_calls=tool_calls)

    @property
    def requests_tools(self) -> bool:
        return self.role == "assistant" and bool(self.tool_calls)

    def to_dict(self) -> Dict[str, Any]:
        """OpenAI chat-completions wire shape."""
        data: Dict[str, Any] = {"role": self.role, "content": self.content}

        if self.tool_calls:
            data["tool_calls"] = self.tool_calls

        if self.tool_call_id is not None:
            data["tool_call_id"] = self.tool_call_id

        return data
