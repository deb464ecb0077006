from __future__ import annotations

import json
from typing import Any, Dict, Iterator, Optional

from .registry import ToolRegistry


class ArgumentValidationError(Exception):
    """Raised when a tool argument payload cannot be parsed or violates its schema."""
    pass


# compact schema type -> accepted Python types
_PY_TYPES = {
    "string": (str,),
    "int": (int,),
    "float": (int, float),
    "bool": (bool,),
    "dict": (dict,),
    "list": (list,),
}


class ArgumentValidator:
    """
    Turns the model's raw argument string into a checked dict.

    Schemas use the compact notation of ``Tool.input_schema``: a type name,
    with a trailing ``?`` marking the argument optional. An empty payload
    is read as ``{}`` since some models send nothing for argument-less
    calls.
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry

    def parse_and_validate(self, tool_name: str, raw_arguments: Optional[str]) -> Dict[str, Any]:
        return self.validate(tool_name, self.parse(raw_arguments))

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self, raw_arguments: Optional[str]) -> Dict[str, Any]:
        if raw_arguments is None or not raw_arguments.strip():
            return {}

        try:
            args = json.loads(raw_arguments)
        except json.JSONDecodeError as e:
            raise ArgumentValidationError(f"Arguments are not valid JSON: {e.msg}") from e

        if not isinstance(args, dict):
            raise ArgumentValidationError(
                f"Arguments must be a JSON object, got {type(args).__name__}."
            )

        return args

    # ------------------------------------------------------------------
    # Schema Checks
    # ------------------------------------------------------------------

    def validate(self, tool_name: str, args: Dict[str, Any]) -> Dict[str, Any]:
        schema = self._registry.get_input_schema(tool_name)

        problems = list(self._problems(schema, args))
        if problems:
            raise ArgumentValidationError("; ".join(problems))

        return args

    def _problems(self, schema: Dict[str, str], args: Dict[str, Any]) -> Iterator[str]:
        missing = [
            name for name, declared in schema.items()
            if not declared.endswith("?") and name not in args
        ]
        if missing:
            yield f"Missing required arguments: {missing}"

        unknown = sorted(set(args) - set(schema))
        if unknown:
            yield f"Unknown arguments: {unknown}"

        for name, declared in schema.items():
            if name in args and not _accepts(declared.rstrip("?"), args[name]):
                yield f"Argument '{name}' expected {declared.rstrip('?')}, got {type(args[name]).__name__}"


def _accepts(type_name: str, value: Any) -> bool:
    accepted = _PY_TYPES.get(type_name.lower())
    if accepted is None:
        return True

    # bool is an int subclass; `"limit": true` is a type error
    if isinstance(value, bool) and bool not in accepted:
        return False

    return isinstance(value, accepted)
