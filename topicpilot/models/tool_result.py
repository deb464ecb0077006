from dataclasses import dataclass
from typing import Literal

from .message import ChatMessage


@dataclass(frozen=True)
class ToolResult:
    """
    Immutable record of one dispatched tool invocation.

    The content is always model-readable text, already cut to the tool's
    token budget. Failures are results too: a missing topic or a malformed
    argument payload becomes descriptive text so the conversation can
    continue.

    Attributes
    ----------
    invocation_id : str
        Correlation id of the ToolInvocation this result answers.

    tool_name : str
        Name of the tool that was requested.

    status : {"success", "failure", "blocked"}
        success → query ran (a "not found" answer is still a success)
        failure → arguments could not be parsed or validated
        blocked → tool is not registered or has no handler

    content : str
        Text sent back to the model.

    latency_ms : int
        Execution time in milliseconds (monotonic).
    """

    invocation_id: str
    tool_name: str
    status: Literal["success", "failure", "blocked"]
    content: str
    latency_ms: int = 0

    # ------------------------------------------------------------------
    # Convenience Properties
    # ------------------------------------------------------------------

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def is_failure(self) -> bool:
        return self.status == "failure"

    @property
    def is_blocked(self) -> bool:
        return self.status == "blocked"

    # ------------------------------------------------------------------
    # Conversation Boundary
    # ------------------------------------------------------------------

    def to_message(self) -> ChatMessage:
        return ChatMessage(
            role="tool",
            content=self.content,
            tool_call_id=self.invocation_id,
            name=self.tool_name,
        )
