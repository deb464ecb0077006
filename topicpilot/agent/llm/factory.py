from topicpilot.config import AssistantConfig

from .llm_client import ModelGateway


def create_gateway(config: AssistantConfig) -> ModelGateway:
    """
    Factory for constructing the model gateway.

    Supported backends:
    - "openai" → OpenAI SDK (or any compatible endpoint via base_url)
    - "groq"   → Groq OpenAI-compatible REST API
    - "ollama" → local Ollama server
    """

    backend = config.llm_backend

    # Lazy imports prevent unnecessary dependency loading
    if backend == "openai":
        from .openai_client import OpenAIGateway
        return OpenAIGateway(
            model=config.model,
            api_key=config.api_key,
            base_url=config.base_url,
            timeout_seconds=config.timeout_seconds,
        )

    if backend == "groq":
        from .groq_client import GroqGateway
        return GroqGateway(
            model=config.model,
            api_key=config.api_key,
            timeout_seconds=config.timeout_seconds,
        )

    if backend == "ollama":
        from .ollama_client import OllamaGateway
        kwargs = {"model": config.model, "timeout_seconds": config.timeout_seconds}
        if config.base_url:
            kwargs["base_url"] = config.base_url
        return OllamaGateway(**kwargs)

    raise ValueError(f"Unsupported llm_backend: {backend}")
