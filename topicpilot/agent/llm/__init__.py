"""
Model gateway transport layer.

Exposes:
- ModelGateway (abstract interface), GatewayReply, GatewayError
- OpenAIGateway, GroqGateway, OllamaGateway (imported lazily by create_gateway)
"""

from .llm_client import GatewayError, GatewayReply, ModelGateway
from .factory import create_gateway

__all__ = [
    "GatewayError",
    "GatewayReply",
    "ModelGateway",
    "create_gateway",
]
