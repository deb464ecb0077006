import json
import logging
import re
import time
from threading import RLock
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..config import AssistantConfig
from ..context.builder import ContextBuilder
from ..models import ChatMessage, ToolInvocation, ToolResult
from ..tools.executor import ToolDispatcher
from ..tree import TopicNode, find_root
from .llm.llm_client import GatewayError, GatewayReply, ModelGateway
from .prompts import EXHAUSTION_NOTICE, QUESTION_PROMPT, SYSTEM_PROMPT
from .state import ConversationState

logger = logging.getLogger(__name__)


class TurnOutcome(str, Enum):
    DONE = "done"
    NEEDS_MORE_ROUNDS = "needs_more_rounds"
    ROUND_LIMIT_REACHED = "round_limit_reached"


@dataclass(frozen=True)
class TurnResult:
    final_text: str
    invocations_used: int
    rounds_used: int
    outcome: TurnOutcome
    tool_results: Tuple[ToolResult, ...] = field(default_factory=tuple)


class ConversationSession:
    """
    One user's conversation with the model about a topic tree.

    A turn is a bounded loop of rounds. Each round is one gateway call;
    if the model asks for tools, the assistant message carrying the calls
    is appended first, then one tool message per invocation, and the next
    round starts. The loop ends on a plain-text reply or after
    ``max_tool_rounds`` rounds.
    """

    SUGGESTION_CONTEXT_CHARS = 2000
    MAX_SUGGESTIONS = 5

    def __init__(
        self,
        gateway: ModelGateway,
        dispatcher: ToolDispatcher,
        config: Optional[AssistantConfig] = None,
        context_builder: Optional[ContextBuilder] = None,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.config = config or AssistantConfig()
        self.gateway = gateway
        self.dispatcher = dispatcher
        self.context_builder = context_builder or ContextBuilder(self.config.neighbor_token_limit)

        self.state = ConversationState(
            system_prompt=system_prompt,
            history_limit=self.config.history_limit,
        )
        self._turn_lock = RLock()

    # ============================================================
    # PUBLIC ENTRY POINT
    # ============================================================

    def send_turn(
        self,
        user_text: str,
        focus_node: Optional[TopicNode] = None,
        include_context: bool = True,
    ) -> TurnResult:
        """
        Run one user turn to completion.

        Turns on one session never overlap: a second caller waits for the
        running turn. If the turn raises, the history is restored to what it
        was before the turn started and the exception propagates.
        """
        with self._turn_lock:
            return self._send_turn_locked(user_text, focus_node, include_context)

    def _send_turn_locked(
        self,
        user_text: str,
        focus_node: Optional[TopicNode],
        include_context: bool,
    ) -> TurnResult:

        total_start = time.time()
        logger.info(f"[SESSION] New turn #{self.state.turn_count + 1}: {user_text[:120]}")

        checkpoint = self.state.checkpoint()

        try:
            result = self._run_turn(user_text, focus_node, include_context)
        except GatewayError as e:
            self.state.rollback(checkpoint)
            logger.error(f"[SESSION] Gateway failure, turn rolled back: {e}")
            raise
        except Exception:
            self.state.rollback(checkpoint)
            logger.exception("[SESSION] Turn failed, rolled back")
            raise

        self.state.new_turn()
        self.state.trim()

        logger.info(
            f"[SESSION] Turn finished | outcome={result.outcome.value} | "
            f"rounds={result.rounds_used} | invocations={result.invocations_used} | "
            f"{time.time() - total_start:.2f}s"
        )

        return result

    def clear_history(self) -> None:
        with self._turn_lock:
            logger.info("[SESSION] History cleared")
            self.state.clear()

    # ============================================================
    # TURN LOOP
    # ============================================================

    def _run_turn(
        self,
        user_text: str,
        focus_node: Optional[TopicNode],
        include_context: bool,
    ) -> TurnResult:

        self.state.append(ChatMessage.user(self._compose_user_message(user_text, focus_node, include_context)))

        # Queries must see the whole tree, not just the focus subtree
        root = find_root(focus_node)
        if focus_node is not None:
            logger.debug(f"[SESSION] Root resolved from focus '{focus_node.path()}'")

        schemas = self.dispatcher.function_schemas()

        rounds = 0
        partial_text = ""
        results: List[ToolResult] = []
        outcome = TurnOutcome.NEEDS_MORE_ROUNDS
        reply = GatewayReply()

        while rounds < self.config.max_tool_rounds:
            rounds += 1
            logger.info(f"[SESSION] Round {rounds}/{self.config.max_tool_rounds}")

            outcome, reply, round_results = self._run_round(root, schemas)
            results.extend(round_results)

            if outcome is TurnOutcome.DONE:
                break

            if reply.text:
                partial_text = reply.text

        if outcome is TurnOutcome.DONE:
            final_text = reply.text
        else:
            outcome = TurnOutcome.ROUND_LIMIT_REACHED
            logger.warning("[SESSION] Reached maximum tool calling rounds")
            final_text = partial_text or EXHAUSTION_NOTICE
            self.state.append(ChatMessage.assistant(final_text))

        return TurnResult(
            final_text=final_text,
            invocations_used=len(results),
            rounds_used=rounds,
            outcome=outcome,
            tool_results=tuple(results),
        )

    def _run_round(
        self,
        root: Optional[TopicNode],
        schemas: List[Dict[str, Any]],
    ) -> Tuple[TurnOutcome, GatewayReply, List[ToolResult]]:

        t0 = time.time()
        reply = self.gateway.complete(self.state.messages, tools=schemas or None)
        logger.info(f"[GATEWAY] {self.gateway.name} {time.time() - t0:.2f}s")

        if reply.is_empty:
            raise GatewayError("No response from model gateway")

        if not reply.wants_tools:
            self.state.append(ChatMessage.assistant(reply.text))
            return TurnOutcome.DONE, reply, []

        invocations = [ToolInvocation.from_raw(call) for call in reply.tool_calls]
        logger.info(f"[SESSION] Model requested {len(invocations)} tool call(s): {[i.tool_name for i in invocations]}")

        # The assistant message must precede its tool results
        self.state.append(ChatMessage.assistant(reply.text, tool_calls=list(reply.tool_calls)))

        results = self.dispatcher.dispatch_all(invocations, root)
        for result in results:
            self.state.append(result.to_message())

        return TurnOutcome.NEEDS_MORE_ROUNDS, reply, results

    def _compose_user_message(
        self,
        user_text: str,
        focus_node: Optional[TopicNode],
        include_context: bool,
    ) -> str:

        if focus_node is None or not include_context:
            return user_text

        context = self.context_builder.build(focus_node)
        logger.debug(f"[SESSION] Context added | {len(context)} chars")

        return f"Context:\n{context}\n\nUser Question: {user_text}"

    # ============================================================
    # SUGGESTIONS
    # ============================================================

    def suggest_questions(self, node: TopicNode) -> List[str]:
        """
        Ask the model for follow-up questions about ``node``.

        Runs outside the session history. Any failure yields an empty list.
        """
        context = self._sanitize(self.context_builder.build(node))
        messages = [
            self.state.system_message,
            ChatMessage.user(QUESTION_PROMPT.format(context=context)),
        ]

        try:
            reply = self.gateway.complete(messages)
        except GatewayError as e:
            logger.warning(f"[SUGGEST] Gateway failure: {e}")
            return []

        match = re.search(r"\[[\s\S]*\]", reply.text or "")
        if not match:
            return []

        try:
            questions = json.loads(match.group(0))
        except json.JSONDecodeError:
            logger.warning("[SUGGEST] Could not parse suggested questions")
            return []

        if not isinstance(questions, list):
            return []

        return [q for q in questions if isinstance(q, str)][:self.MAX_SUGGESTIONS]

    def _sanitize(self, context: str) -> str:
        context = context.replace("```", "｀｀｀")
        context = re.sub(r"system:|assistant:|user:", "", context, flags=re.IGNORECASE)
        return context[:self.SUGGESTION_CONTEXT_CHARS]

    # ============================================================
    # ACCESSORS
    # ============================================================

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self.state.messages)
