"""
Core runtime data models for TopicPilot.

These dataclasses define the structured packets that move between the
gateway, the dispatcher and the conversation state.
"""

from .message import ChatMessage
from .tool_call import ToolInvocation
from .tool_result import ToolResult

__all__ = ["ChatMessage", "ToolInvocation", "ToolResult"]
