"""pydantic-ai model construction for the supported completion providers.

All three speak the OpenAI chat API; OpenRouter gets its own model class
for its routing extensions, Ollama is reached through its /v1 shim.
"""

from typing import Callable, Union

from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.models.openrouter import OpenRouterModel
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.providers.openrouter import OpenRouterProvider

from agentcraft.settings import Settings

CompletionModel = Union[OpenAIChatModel, OpenRouterModel]

OLLAMA_DEFAULT_URL = "http://localhost:11434/v1"


def _openrouter(settings: Settings) -> CompletionModel:
    return OpenRouterModel(
        settings.llm_model, provider=OpenRouterProvider(api_key=settings.llm_api_key)
    )


def _openai(settings: Settings) -> CompletionModel:
    # base_url=None keeps the SDK default endpoint.
    provider = OpenAIProvider(base_url=settings.llm_base_url, api_key=settings.llm_api_key)
    return OpenAIChatModel(settings.llm_model, provider=provider)


def _ollama(settings: Settings) -> CompletionModel:
    # Ollama ignores the key but the OpenAI client insists on one.
    provider = OpenAIProvider(base_url=settings.llm_base_url or OLLAMA_DEFAULT_URL, api_key="ollama")
    return OpenAIChatModel(settings.llm_model, provider=provider)


_BUILDERS: dict[str, Callable[[Settings], CompletionModel]] = {
    "openrouter": _openrouter,
    "openai": _openai,
    "ollama": _ollama,
}


def get_llm_model(settings: Settings) -> CompletionModel:
    """
    The model every agent's completions go through.

    Raises:
        ValueError: If ``settings.llm_provider`` has no builder.
    """
    try:
        build = _BUILDERS[settings.llm_provider]
    except KeyError:
        raise ValueError(f"Unsupported provider: {settings.llm_provider}") from None
    return build(settings)


def describe_model(settings: Settings) -> str:
    """``provider/model`` label for logs and the CLI banner."""
    return f"{settings.llm_provider}/{settings.llm_model}"
