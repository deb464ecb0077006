"""
TopicPilot: conversational exploration of MQTT-style topic trees.

Exposes:
- TopicPilotApp (session factory)
- AssistantConfig
- TopicTree
- ConversationSession, TurnResult, TurnOutcome
"""

from .config import AssistantConfig
from .tree import TopicTree
from .agent.core import ConversationSession, TurnOutcome, TurnResult
from .app import TopicPilotApp

__all__ = [
    "AssistantConfig",
    "ConversationSession",
    "TopicPilotApp",
    "TopicTree",
    "TurnOutcome",
    "TurnResult",
]
