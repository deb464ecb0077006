from typing import Optional

from .agent.core import ConversationSession
from .agent.llm import ModelGateway, create_gateway
from .config import AssistantConfig
from .context.builder import ContextBuilder
from .tools.builtin import register_topic_tools
from .tools.executor import ToolDispatcher
from .tools.registry import ToolRegistry


class TopicPilotApp:
    """
    Top-level facade for constructing a conversation session.

    This class is the public entry point of TopicPilot. It hides the
    wiring between registry, dispatcher, context builder and gateway.

    Design Principles
    -----------------
    • No global state: every call returns a fresh session
    • The topic tree is never owned here; it is passed per turn
    • A gateway may be injected (tests, shared HTTP clients)
    """

    @staticmethod
    def create(
        config: Optional[AssistantConfig] = None,
        *,
        gateway: Optional[ModelGateway] = None,
    ) -> ConversationSession:
        """
        Construct and return a fully wired ConversationSession.

        Parameters
        ----------
        config : AssistantConfig, optional
            Backend and conversation bounds. Defaults to ``AssistantConfig()``.

        gateway : ModelGateway, optional
            Pre-built gateway. When omitted one is created from ``config``.

        Returns
        -------
        ConversationSession
            Ready to process user input via ``send_turn()``.
        """

        config = config or AssistantConfig()

        registry = ToolRegistry()
        register_topic_tools(registry)

        dispatcher = ToolDispatcher(registry, parallel=config.parallel_tools)

        return ConversationSession(
            gateway=gateway or create_gateway(config),
            dispatcher=dispatcher,
            config=config,
            context_builder=ContextBuilder(config.neighbor_token_limit),
        )
