import os
import requests
import logging
from typing import Any, Dict, List, Optional, Sequence

from .llm_client import GatewayError, GatewayReply, ModelGateway
from ...models import ChatMessage

logger = logging.getLogger(__name__)


class GroqGateway(ModelGateway):

    def __init__(
        self,
        model: str = "llama-3.1-8b-instant",
        api_key: Optional[str] = None,
        timeout_seconds: int = 45,
    ):
        self.model = model
        self.url = "https://api.groq.com/openai/v1/chat/completions"
        self.timeout = timeout_seconds

        self.api_key = api_key or os.getenv("GROQ_API_KEY")

        if not self.api_key:
            raise RuntimeError(
                "GROQ_API_KEY environment variable not set"
            )

    def complete(
        self,
        messages: Sequence[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> GatewayReply:

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
        }

        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"

        logger.info(f"[GATEWAY] Groq | model={self.model} | messages={len(messages)}")

        try:
            response = requests.post(
                self.url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=self.timeout,
            )

            response.raise_for_status()

        except requests.Timeout as e:
            raise GatewayError("Groq request timed out") from e

        except requests.RequestException as e:
            raise GatewayError(f"Groq request failed: {e}") from e

        try:
            data = response.json()
            message = data["choices"][0]["message"]
            return GatewayReply(
                text=message.get("content") or "",
                tool_calls=list(message.get("tool_calls") or []),
                model=data.get("model"),
                usage=data.get("usage") or {},
            )
        except (KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
            raise GatewayError(f"Unexpected Groq response format: {e}") from e
