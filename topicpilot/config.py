import logging
import os
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


class AssistantConfig:
    """
    Central configuration object for assistant behavior.
    Controls the model backend and the conversation bounds.
    """

    SUPPORTED_BACKENDS = ("openai", "groq", "ollama")

    DEFAULT_MODELS = {
        "openai": "gpt-4o-mini",
        "groq": "llama-3.1-8b-instant",
        "ollama": "llama3.1",
    }

    def __init__(
        self,
        llm_backend: str = "openai",   # "openai", "groq", or "ollama"
        model: str = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        max_tool_rounds: int = 5,
        history_limit: int = 10,
        neighbor_token_limit: int = 500,
        parallel_tools: bool = False,
        timeout_seconds: int = 45,
    ):
        self.llm_backend = llm_backend
        self.model = model or self.DEFAULT_MODELS.get(llm_backend)
        self.api_key = api_key
        self.base_url = base_url
        self.max_tool_rounds = max_tool_rounds
        self.history_limit = history_limit
        self.neighbor_token_limit = neighbor_token_limit
        self.parallel_tools = parallel_tools
        self.timeout_seconds = timeout_seconds

        self._validate()

    def _validate(self):
        if self.llm_backend not in self.SUPPORTED_BACKENDS:
            raise ValueError(f"Unsupported llm_backend: {self.llm_backend}")

        if not self.model:
            raise ValueError("A model name is required")

        if self.max_tool_rounds < 1:
            raise ValueError("max_tool_rounds must be at least 1")

        if self.history_limit < 1:
            raise ValueError("history_limit must be at least 1")

        if self.neighbor_token_limit <= 0:
            raise ValueError("neighbor_token_limit must be positive")

        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AssistantConfig":
        """
        Build a config from environment variables.

        LLM_PROVIDER          openai | groq | ollama
        LLM_MODEL             model name (backend default otherwise)
        LLM_API_KEY           generic key; OPENAI_API_KEY / GROQ_API_KEY also read
        LLM_BASE_URL          custom endpoint
        LLM_NEIGHBORING_TOPICS_TOKEN_LIMIT
                              related-topics budget of the topic digest
        """
        env = os.environ if environ is None else environ

        api_key = env.get("LLM_API_KEY") or env.get("OPENAI_API_KEY") or env.get("GROQ_API_KEY")
        backend = env.get("LLM_PROVIDER") or cls._detect_backend(env)

        if backend == "groq" and not env.get("LLM_API_KEY"):
            api_key = env.get("GROQ_API_KEY") or api_key

        kwargs = {
            "llm_backend": backend,
            "model": env.get("LLM_MODEL") or None,
            "api_key": api_key,
            "base_url": env.get("LLM_BASE_URL") or None,
        }

        limit = _int_or_none(env.get("LLM_NEIGHBORING_TOPICS_TOKEN_LIMIT"))
        if limit is not None and limit > 0:
            kwargs["neighbor_token_limit"] = limit

        config = cls(**kwargs)

        logger.info(
            "[CONFIG] backend=%s | model=%s | neighbor_token_limit=%d",
            config.llm_backend,
            config.model,
            config.neighbor_token_limit,
        )

        return config

    @staticmethod
    def _detect_backend(env: Mapping[str, str]) -> str:
        if env.get("OPENAI_API_KEY"):
            return "openai"
        if env.get("GROQ_API_KEY"):
            return "groq"

        key = env.get("LLM_API_KEY") or ""
        if key.startswith("gsk_"):
            return "groq"
        return "openai"

    def __repr__(self) -> str:
        return (
            f"AssistantConfig(backend={self.llm_backend}, model={self.model}, "
            f"rounds={self.max_tool_rounds}, history={self.history_limit})"
        )


def _int_or_none(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None
