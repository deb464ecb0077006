from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ...models import ChatMessage


class GatewayError(Exception):
    """Raised when a model provider call fails or returns an unusable reply."""
    pass


@dataclass(frozen=True)
class GatewayReply:
    """
    One model response: free text, tool calls, or both.

    ``tool_calls`` holds the provider's raw tool-call dicts so they can be
    echoed back verbatim on the next request.
    """

    text: str = ""
    tool_calls: List[Dict[str, Any]] = field(default_factory=list)
    model: Optional[str] = None
    usage: Dict[str, Any] = field(default_factory=dict)

    @property
    def wants_tools(self) -> bool:
        return bool(self.tool_calls)

    @property
    def is_empty(self) -> bool:
        return not self.text and not self.tool_calls


class ModelGateway(ABC):
    """
    Abstract model transport interface.

    Responsible only for:
        • Sending the ordered message list (+ tool declarations)
        • Returning text and/or raw tool calls
        • Translating transport failures into GatewayError
    """

    @property
    def name(self) -> str:
        """Return backend identity."""
        return self.__class__.__name__

    @abstractmethod
    def complete(
        self,
        messages: Sequence[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> GatewayReply:
        """
        Execute one chat completion.

        Parameters
        ----------
        messages : Sequence[ChatMessage]
            Full conversation so far, system message first.

        tools : list of dict, optional
            OpenAI-style function declarations. None disables tool use.

        Returns
        -------
        GatewayReply

        Raises
        ------
        GatewayError
            On transport, HTTP or response-format failure.
        """
        raise NotImplementedError
