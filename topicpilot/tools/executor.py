from __future__ import annotations

import time
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence

from .registry import ToolRegistry
from .validator import ArgumentValidator, ArgumentValidationError
from .builtin import TOPIC_HANDLERS
from ..context.budget import truncate
from ..models import ToolInvocation, ToolResult
from ..tree import TopicNode

logger = logging.getLogger(__name__)


Handler = Callable[..., str]


class ToolDispatcher:
    """
    Executes model-issued tool invocations against a topic tree.

    Every invocation produces exactly one ToolResult keyed by its id.
    Nothing raised by argument parsing or by a handler escapes: the
    failure is reported as text so sibling invocations and the
    conversation carry on.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        handlers: Optional[Dict[str, Handler]] = None,
        parallel: bool = False,
        max_workers: int = 4,
    ) -> None:
        self._registry = registry
        self._handlers = dict(TOPIC_HANDLERS if handlers is None else handlers)
        self._arg_validator = ArgumentValidator(registry)
        self._parallel = parallel
        self._max_workers = max(1, max_workers)

    # ============================================================
    # MAIN EXECUTION
    # ============================================================

    def dispatch(self, invocation: ToolInvocation, root: Optional[TopicNode]) -> ToolResult:

        start = time.monotonic()
        name = invocation.tool_name

        logger.info(f"[DISPATCH] {name} | id={invocation.id}")
        logger.debug(f"[DISPATCH ARGS] {invocation.raw_arguments}")

        try:
            tool = self._registry.get(name)
        except KeyError:
            return self._blocked_result(invocation, f"Error: Unknown tool '{name}'")

        handler = self._handlers.get(tool.operation)
        if handler is None:
            return self._blocked_result(
                invocation, f"Error: No handler for tool '{name}' ({tool.operation})"
            )

        # ------------------------------------------------------------
        # Argument Validation
        # ------------------------------------------------------------
        try:
            args = self._arg_validator.parse_and_validate(name, invocation.raw_arguments)
        except ArgumentValidationError as e:
            logger.warning(f"[DISPATCH] Invalid arguments for {name}: {e}")
            return self._failure_result(
                invocation, f"Error: invalid arguments for {name}: {e}", start
            )

        # ------------------------------------------------------------
        # Execution
        # ------------------------------------------------------------
        try:
            content = handler(args.get("topic", ""), args.get("limit"), root)
        except Exception as e:
            logger.exception(f"[DISPATCH] Handler failed for {name}")
            return self._failure_result(invocation, f"Error executing tool: {e}", start)

        result = self._success_result(invocation, truncate(content, tool.token_budget).text, start)

        logger.debug(f"[DISPATCH RESULT] {name} | {result.latency_ms}ms | {len(result.content)} chars")

        return result

    def dispatch_all(
        self,
        invocations: Sequence[ToolInvocation],
        root: Optional[TopicNode],
    ) -> List[ToolResult]:
        """
        Run every invocation once; results come back in input order.

        With ``parallel`` enabled the invocations run on a thread pool and
        are joined before returning. Handlers are pure reads, so either
        mode yields the same results.
        """
        if not invocations:
            return []

        if not self._parallel or len(invocations) == 1:
            return [self.dispatch(inv, root) for inv in invocations]

        workers = min(self._max_workers, len(invocations))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="topicpilot-tool") as pool:
            return list(pool.map(lambda inv: self.dispatch(inv, root), invocations))

    # ============================================================
    # RESULT BUILDERS
    # ============================================================

    def _success_result(self, invocation: ToolInvocation, content: str, start_time: float) -> ToolResult:
        return ToolResult(
            invocation_id=invocation.id,
            tool_name=invocation.tool_name,
            status="success",
            content=content,
            latency_ms=self._latency_ms(start_time),
        )

    def _failure_result(self, invocation: ToolInvocation, error: str, start_time: float) -> ToolResult:
        return ToolResult(
            invocation_id=invocation.id,
            tool_name=invocation.tool_name,
            status="failure",
            content=error,
            latency_ms=self._latency_ms(start_time),
        )

    def _blocked_result(self, invocation: ToolInvocation, error: str) -> ToolResult:
        logger.warning(f"[DISPATCH BLOCKED] {error}")
        return ToolResult(
            invocation_id=invocation.id,
            tool_name=invocation.tool_name,
            status="blocked",
            content=error,
            latency_ms=0,
        )

    @staticmethod
    def _latency_ms(start_time: float) -> int:
        return int((time.monotonic() - start_time) * 1000)

    # ------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def function_schemas(self):
        return self._registry.get_function_schemas()
