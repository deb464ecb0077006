from dataclasses import dataclass, field
from typing import Any, Dict


_JSON_TYPES = {
    "string": "string",
    "int": "integer",
    "float": "number",
    "bool": "boolean",
    "dict": "object",
    "list": "array",
}


@dataclass(frozen=True)
class Tool:
    """
    Declarative contract describing one read-only tree query.

    A Tool defines WHAT the model may ask for; the handler registered
    under ``operation`` performs it. This object is the contract shared
    by all runtime layers:

        Gateway schema → ArgumentValidator → ToolDispatcher → handler

    ``input_schema`` uses the compact type map understood by
    ArgumentValidator (``"string"``, ``"int?"`` ...). The JSON schema sent
    to the model is derived from it.
    """

    # ------------------------------------------------------------------
    # Core Identity
    # ------------------------------------------------------------------

    name: str
    description: str
    operation: str

    # ------------------------------------------------------------------
    # Schemas (Contract Layer)
    # ------------------------------------------------------------------

    input_schema: Dict[str, Any]
    parameter_docs: Dict[str, str] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Runtime Policy Metadata
    # ------------------------------------------------------------------

    token_budget: int = 200

    # ------------------------------------------------------------------
    # Validation Layer
    # ------------------------------------------------------------------

    def __post_init__(self):

        if not self.name or not isinstance(self.name, str):
            raise ValueError("Tool name must be a non-empty string.")

        if not self.operation or not isinstance(self.operation, str):
            raise ValueError("Tool operation must be a non-empty string.")

        if not isinstance(self.input_schema, dict):
            raise TypeError("input_schema must be a dictionary.")

        if self.token_budget <= 0:
            raise ValueError("token_budget must be positive.")

    # ------------------------------------------------------------------
    # Gateway Declaration
    # ------------------------------------------------------------------

    def to_function_schema(self) -> Dict[str, Any]:
        """OpenAI-style function declaration for the gateway."""

        properties: Dict[str, Any] = {}
        required = []

        for arg, expected in self.input_schema.items():
            optional = isinstance(expected, str) and expected.endswith("?")
            type_name = expected.rstrip("?") if isinstance(expected, str) else "string"

            prop: Dict[str, Any] = {"type": _JSON_TYPES.get(type_name.lower(), "string")}
            if arg in self.parameter_docs:
                prop["description"] = self.parameter_docs[arg]

            properties[arg] = prop
            if not optional:
                required.append(arg)

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": properties,
                    "required": required,
                },
            },
        }
