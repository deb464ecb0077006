from .core import ConversationSession, TurnOutcome, TurnResult
from .state import ConversationState

__all__ = ["ConversationSession", "ConversationState", "TurnOutcome", "TurnResult"]
