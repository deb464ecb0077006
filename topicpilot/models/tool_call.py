from dataclasses import dataclass, field
from typing import Any, Mapping
import json
import uuid


def _new_call_id() -> str:
    return f"call_{uuid.uuid4().hex[:24]}"


@dataclass(frozen=True)
class ToolInvocation:
    """
    Canonical record of one model-issued tool call.

    Gateways return tool calls in several shapes (OpenAI nests name and
    arguments under ``function``; Ollama omits the id and sends arguments
    as an object). Everything is normalized into this record before the
    dispatcher sees it.

    Architectural Role
    ------------------
    Gateway reply → ToolInvocation → ToolDispatcher → ToolResult

    ``raw_arguments`` is kept as the unparsed string so that malformed
    payloads can be reported per invocation instead of failing the round.
    """

    tool_name: str
    """Name of the tool to invoke."""

    raw_arguments: str = ""
    """Unparsed JSON argument payload."""

    # --- System Metadata ---
    id: str = field(default_factory=_new_call_id)
    """Correlation id echoed back on the tool-result message."""

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    @classmethod
    def from_raw(cls, raw: Any) -> "ToolInvocation":
        """
        Build an invocation from a loosely shaped tool call.

        Accepts ``{"id", "function": {"name", "arguments"}}``,
        ``{"id", "name", "arguments"}``, or SDK objects exposing
        ``model_dump()``.
        """
        if hasattr(raw, "model_dump"):
            raw = raw.model_dump()

        if not isinstance(raw, Mapping):
            return cls(tool_name="", raw_arguments=repr(raw))

        function = raw.get("function")
        if not isinstance(function, Mapping):
            function = {}

        name = function.get("name") or raw.get("name") or ""

        arguments = function.get("arguments")
        if arguments is None:
            arguments = raw.get("arguments")

        if arguments is None:
            arguments = ""
        elif not isinstance(arguments, str):
            arguments = json.dumps(arguments)

        call_id = raw.get("id") or _new_call_id()

        return cls(tool_name=str(name), raw_arguments=arguments, id=str(call_id))

    # ------------------------------------------------------------------
    # Debug Representation
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return f"ToolInvocation(id={self.id[:13]}, tool='{self.tool_name}')"
