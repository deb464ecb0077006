import requests
from typing import Any, Dict, List, Optional, Sequence

from .llm_client import GatewayError, GatewayReply, ModelGateway
from ...models import ChatMessage


class OllamaGateway(ModelGateway):
    """
    Ollama model gateway.
    Local model backend.

    Ollama tool calls carry no id and send arguments as objects; tool
    results are correlated by ``tool_name`` instead of ``tool_call_id``.
    """

    def __init__(
        self,
        model: str = "llama3.1",
        base_url: str = "http://localhost:11434/api/chat",
        timeout_seconds: int = 60,
    ):
        self.model = model
        self.url = base_url
        self.timeout = timeout_seconds

    # ---------------------------------------------------------
    # Main Chat Interface
    # ---------------------------------------------------------

    def complete(
        self,
        messages: Sequence[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> GatewayReply:

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [self._to_wire(m) for m in messages],
            "stream": False,
        }

        if tools:
            payload["tools"] = tools

        try:
            response = requests.post(
                self.url,
                json=payload,
                timeout=self.timeout,
            )

            response.raise_for_status()

        except requests.Timeout as e:
            raise GatewayError("Ollama request timed out") from e

        except requests.RequestException as e:
            raise GatewayError(f"Ollama request failed: {str(e)}") from e

        try:
            data = response.json()
            message = data["message"]
            return GatewayReply(
                text=message.get("content") or "",
                tool_calls=list(message.get("tool_calls") or []),
                model=data.get("model"),
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise GatewayError(
                f"Unexpected Ollama response format: {str(e)}"
            ) from e

    # ---------------------------------------------------------
    # Wire Format
    # ---------------------------------------------------------

    @staticmethod
    def _to_wire(message: ChatMessage) -> Dict[str, Any]:
        data: Dict[str, Any] = {"role": message.role, "content": message.content}

        if message.tool_calls:
            data["tool_calls"] = message.tool_calls

        if message.role == "tool" and message.name:
            data["tool_name"] = message.name

        return data
