import logging
from typing import Any, Dict, List, Optional, Sequence

from openai import OpenAI, OpenAIError

from .llm_client import GatewayError, GatewayReply, ModelGateway
from ...models import ChatMessage

logger = logging.getLogger(__name__)


class OpenAIGateway(ModelGateway):
    """
    Model gateway backed by the official OpenAI SDK.

    Also works against any OpenAI-compatible endpoint via ``base_url``.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: int = 45,
        max_completion_tokens: Optional[int] = None,
        client: Optional[OpenAI] = None,
    ):
        self.model = model
        self.max_completion_tokens = max_completion_tokens
        if client is None:
            try:
                client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout_seconds)
            except OpenAIError as e:
                raise RuntimeError(f"OpenAI client could not be created: {e}") from e
        self.client = client

    def complete(
        self,
        messages: Sequence[ChatMessage],
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> GatewayReply:

        request: Dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
        }

        if tools:
            request["tools"] = tools

        if self.max_completion_tokens:
            request["max_completion_tokens"] = self.max_completion_tokens

        logger.info(f"[GATEWAY] OpenAI | model={self.model} | messages={len(messages)}")

        try:
            response = self.client.chat.completions.create(**request)
        except OpenAIError as e:
            raise GatewayError(f"OpenAI API error: {e}") from e

        if not response.choices:
            raise GatewayError("No response from OpenAI")

        message = response.choices[0].message
        tool_calls = [
            call.model_dump(exclude_none=True)
            for call in (message.tool_calls or [])
        ]

        usage = response.usage.model_dump() if response.usage else {}

        logger.debug(f"[GATEWAY] OpenAI reply | tool_calls={len(tool_calls)} | usage={usage}")

        return GatewayReply(
            text=message.content or "",
            tool_calls=tool_calls,
            model=response.model,
            usage=usage,
        )
