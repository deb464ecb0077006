from dataclasses import dataclass, field
from typing import List

from ..models import ChatMessage


@dataclass
class ConversationState:
    """
    Message history of one user session.

    Only the ConversationSession mutates it. The system message is always
    first; after each completed turn the history is trimmed to the system
    message plus the most recent ``history_limit`` entries.
    """

    # ------------------------------------------------------------------
    # Conversation Context
    # ------------------------------------------------------------------

    system_prompt: str
    """
    Content of the leading system message.
    """

    history_limit: int = 10
    """
    Maximum number of non-system messages kept between turns.
    """

    messages: List[ChatMessage] = field(default_factory=list)

    turn_count: int = 0
    """
    Number of turns completed in this session.
    """

    def __post_init__(self) -> None:
        if not self.messages:
            self.messages = [ChatMessage.system(self.system_prompt)]

    # ------------------------------------------------------------------
    # State Update Helpers
    # ------------------------------------------------------------------

    def new_turn(self) -> None:
        self.turn_count += 1

    def append(self, message: ChatMessage) -> None:
        self.messages.append(message)

    def checkpoint(self) -> int:
        """Marker for rolling back a failed turn."""
        return len(self.messages)

    def rollback(self, checkpoint: int) -> None:
        del self.messages[max(1, checkpoint):]

    def trim(self) -> None:
        """
        Keep the system message and the latest ``history_limit`` messages.

        Tool messages left at the head of the window have lost the
        assistant message that requested them, so they are dropped too.
        """
        system, rest = self.messages[0], self.messages[1:]

        if len(rest) <= self.history_limit:
            return

        window = rest[-self.history_limit:]
        while window and window[0].role == "tool":
            window.pop(0)

        self.messages = [system] + window

    def clear(self) -> None:
        self.messages = [self.messages[0]]

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def system_message(self) -> ChatMessage:
        return self.messages[0]

    def __len__(self) -> int:
        return len(self.messages)
