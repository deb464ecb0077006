from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from threading import RLock

from topicpilot.agent.core import ConversationSession
from topicpilot.agent.llm import GatewayError, ModelGateway, create_gateway
from topicpilot.app import TopicPilotApp
from topicpilot.config import AssistantConfig
from topicpilot.context.builder import ContextBuilder
from topicpilot.tree import TopicTree, resolve

import logging

# ============================================================
# LOGGING
# ============================================================

logger = logging.getLogger("topicpilot.server")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

# ============================================================
# Session Manager
# ============================================================

class SessionManager:
    """
    Owns the shared topic tree and one ConversationSession per client.

    The gateway is created lazily so the server can start (and ingest
    messages) before credentials are available.
    """

    def __init__(
        self,
        config: AssistantConfig,
        tree: Optional[TopicTree] = None,
        gateway: Optional[ModelGateway] = None,
    ):
        logger.info("[SESSION MANAGER] Initializing...")
        self.config = config
        self.tree = tree if tree is not None else TopicTree()
        self._gateway = gateway
        self._sessions: Dict[str, ConversationSession] = {}
        self._lock = RLock()
        self.context_builder = ContextBuilder(config.neighbor_token_limit)
        logger.info("[SESSION MANAGER] Ready")

    def _get_gateway(self) -> ModelGateway:
        if self._gateway is None:
            self._gateway = create_gateway(self.config)
        return self._gateway

    def get_session(self, session_id: str) -> ConversationSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                logger.info("[SESSION MANAGER] New session | id=%s", session_id)
                session = TopicPilotApp.create(self.config, gateway=self._get_gateway())
                self._sessions[session_id] = session
            return session

    def clear_session(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            session.clear_history()
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


# ============================================================
# Models
# ============================================================

class PublishRequest(BaseModel):
    topic: str
    payload: Any = None
    retained: bool = False

class ChatRequest(BaseModel):
    message: str
    session_id: str = "default"
    focus: Optional[str] = None

class ChatResponse(BaseModel):
    response: str
    outcome: str
    rounds_used: int
    invocations_used: int

class SuggestionResponse(BaseModel):
    topic: str
    quick: List[str]
    generated: List[str] = []


# ============================================================
# App Factory
# ============================================================

def create_app(
    config: Optional[AssistantConfig] = None,
    tree: Optional[TopicTree] = None,
    gateway: Optional[ModelGateway] = None,
) -> FastAPI:

    manager = SessionManager(config or AssistantConfig.from_env(), tree=tree, gateway=gateway)

    app = FastAPI(title="TopicPilot", version="1.0")
    app.state.manager = manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _focus_or_404(topic: str):
        node = resolve(topic, manager.tree.root)
        if node is None:
            raise HTTPException(status_code=404, detail=f"Topic not found: {topic}")
        return node

    # ------------------------------------------------------------
    # Health
    # ------------------------------------------------------------

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "llm_backend": manager.config.llm_backend,
            "model": manager.config.model,
            "topics": len(manager.tree),
            "sessions": len(manager),
        }

    # ------------------------------------------------------------
    # Tree Ingestion
    # ------------------------------------------------------------

    @app.post("/publish")
    def publish(request: PublishRequest):
        node = manager.tree.publish(request.topic, request.payload, retained=request.retained)
        return {
            "status": "published",
            "topic": node.path(),
            "messages": node.message_count,
        }

    @app.get("/context")
    def context(topic: str = Query(...)):
        node = _focus_or_404(topic)
        return {"topic": topic, "context": manager.context_builder.build(node)}

    # ------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------

    @app.post("/chat", response_model=ChatResponse)
    def chat(request: ChatRequest):

        if request.focus is not None:
            focus, include_context = _focus_or_404(request.focus), True
        else:
            focus, include_context = manager.tree.root, False

        try:
            session = manager.get_session(request.session_id)
            result = session.send_turn(request.message, focus, include_context=include_context)

        except GatewayError as e:
            logger.error("[CHAT] Gateway failure: %s", e)
            raise HTTPException(status_code=503, detail=str(e))

        except RuntimeError as e:
            raise HTTPException(status_code=503, detail=str(e))

        return ChatResponse(
            response=result.final_text,
            outcome=result.outcome.value,
            rounds_used=result.rounds_used,
            invocations_used=result.invocations_used,
        )

    @app.post("/sessions/{session_id}/clear")
    def clear_session(session_id: str):
        if not manager.clear_session(session_id):
            raise HTTPException(status_code=404, detail="Session not found")
        return {"status": "cleared", "session_id": session_id}

    # ------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------

    @app.get("/suggestions", response_model=SuggestionResponse)
    def suggestions(
        topic: str = Query(...),
        session_id: str = "default",
        generate: bool = False,
    ):
        node = _focus_or_404(topic)
        generated: List[str] = []

        if generate:
            try:
                generated = manager.get_session(session_id).suggest_questions(node)
            except RuntimeError as e:
                raise HTTPException(status_code=503, detail=str(e))

        return SuggestionResponse(
            topic=topic,
            quick=ContextBuilder.quick_suggestions(node),
            generated=generated,
        )

    return app


app = create_app()
