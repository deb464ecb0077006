from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Dict, Iterable, List

from .schema import Tool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    The set of tree queries offered to the model.

    Anything the model names that is not registered here is answered with
    a blocked result by the dispatcher and never reaches a handler.
    """

    def __init__(self) -> None:
        self._by_name: Dict[str, Tool] = {}
        self._lock = RLock()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, tool: Tool) -> None:
        self.register_many([tool])

    def register_many(self, tools: Iterable[Tool]) -> None:
        """Register all of ``tools`` or none of them."""
        batch = list(tools)

        with self._lock:
            seen = set(self._by_name)
            for tool in batch:
                if tool.name in seen:
                    raise ValueError(f"Tool '{tool.name}' is already registered.")
                seen.add(tool.name)

            self._by_name.update((tool.name, tool) for tool in batch)

            logger.info(
                "[TOOL REGISTRY] Registered %s | total=%d",
                [tool.name for tool in batch],
                len(self._by_name),
            )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, tool_name: str) -> Tool:
        with self._lock:
            tool = self._by_name.get(tool_name)

        if tool is None:
            logger.warning("[TOOL REGISTRY] Unknown tool requested: %r", tool_name)
            raise KeyError(f"Tool '{tool_name}' is not registered.")

        return tool

    def list_tools(self) -> List[Tool]:
        with self._lock:
            return [self._by_name[name] for name in sorted(self._by_name)]

    def list_tool_names(self) -> List[str]:
        return [tool.name for tool in self.list_tools()]

    def get_input_schema(self, tool_name: str) -> Dict[str, Any]:
        return dict(self.get(tool_name).input_schema)

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_name)

    # ------------------------------------------------------------------
    # Gateway Declarations
    # ------------------------------------------------------------------

    def get_function_schemas(self) -> List[Dict[str, Any]]:
        """Function declarations sent with every gateway request, sorted by name."""
        return [tool.to_function_schema() for tool in self.list_tools()]
