"""Completion gateway over the pydantic-ai direct model API.

One outbound request per chat turn. Upstream failures are re-tagged into
the domain taxonomy here and never escape as provider exceptions. No
retries are attempted; retry policy belongs to the caller.
"""

import logging
from typing import Any, Optional, Protocol, Sequence

from pydantic_ai.direct import model_request
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    UserPromptPart,
)
from pydantic_ai.models import Model
from pydantic_ai.settings import ModelSettings

from agentcraft.errors import (
    AgentCraftError,
    CompletionError,
    QuotaExceededError,
    UpstreamInvalidError,
)
from agentcraft.models.conversation_models import ChatMessage, MessageRole
from agentcraft.providers import get_llm_model
from agentcraft.settings import Settings

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I apologize, but I couldn't generate a response. Please try again."


class CompletionGateway(Protocol):
    """Anything that turns a system prompt plus history into reply text."""

    async def complete(self, system_prompt: str, messages: Sequence[ChatMessage]) -> str: ...


def to_model_messages(system_prompt: str, messages: Sequence[ChatMessage]) -> list[ModelMessage]:
    """Map chat history onto pydantic-ai request/response messages.

    The system prompt always comes first. A system entry inside ``messages``
    is sent as an additional system part at its position.
    """
    model_messages: list[ModelMessage] = []
    pending: list[Any] = [SystemPromptPart(content=system_prompt)]

    for message in messages:
        if message.role == MessageRole.ASSISTANT:
            if pending:
                model_messages.append(ModelRequest(parts=pending))
                pending = []
            model_messages.append(ModelResponse(parts=[TextPart(content=message.content)]))
        elif message.role == MessageRole.SYSTEM:
            pending.append(SystemPromptPart(content=message.content))
        else:
            pending.append(UserPromptPart(content=message.content))

    if pending:
        model_messages.append(ModelRequest(parts=pending))
    return model_messages


def _error_markers(body: object) -> set[str]:
    """Collect ``type``/``code`` values from an OpenAI-style error body."""
    markers: set[str] = set()
    if isinstance(body, dict):
        candidates = [body]
        if isinstance(body.get("error"), dict):
            candidates.append(body["error"])
        for candidate in candidates:
            for key in ("type", "code"):
                value = candidate.get(key)
                if isinstance(value, str):
                    markers.add(value)
    return markers


def classify_http_error(error: ModelHTTPError) -> AgentCraftError:
    """Tag an upstream HTTP failure with its domain kind."""
    markers = _error_markers(error.body)
    if error.status_code == 429 or "insufficient_quota" in markers:
        return QuotaExceededError()
    if error.status_code == 400 or "invalid_request_error" in markers:
        return UpstreamInvalidError()
    return CompletionError()


def response_text(response: ModelResponse) -> str:
    return "".join(part.content for part in response.parts if isinstance(part, TextPart))


class PydanticAICompletionGateway:
    """Completion gateway backed by a pydantic-ai model.

    Args:
        model: pydantic-ai model (production: built by ``get_llm_model``)
        temperature: Sampling temperature, fixed per deployment
        max_tokens: Reply length cap, fixed per deployment
        timeout: Request timeout in seconds; expiry is an unknown failure
    """

    def __init__(
        self,
        model: Model,
        temperature: float = 0.7,
        max_tokens: int = 500,
        timeout: Optional[float] = 30.0,
    ) -> None:
        self._model = model
        self._model_settings = ModelSettings(temperature=temperature, max_tokens=max_tokens)
        if timeout is not None:
            self._model_settings["timeout"] = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "PydanticAICompletionGateway":
        return cls(
            model=get_llm_model(settings),
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout=settings.llm_timeout_seconds,
        )

    @property
    def model_name(self) -> str:
        return self._model.model_name

    async def complete(self, system_prompt: str, messages: Sequence[ChatMessage]) -> str:
        """Send one completion request.

        Args:
            system_prompt: Agent system prompt, sent first.
            messages: Ordered history ending with the newest user message.

        Returns:
            Reply text, or FALLBACK_REPLY when the model produced none.

        Raises:
            QuotaExceededError: Upstream quota or rate limit.
            UpstreamInvalidError: Upstream rejected the request.
            CompletionError: Any other failure, timeouts included.
        """
        request_messages = to_model_messages(system_prompt, messages)
        try:
            response = await model_request(
                self._model, request_messages, model_settings=self._model_settings
            )
        except ModelHTTPError as e:
            tagged = classify_http_error(e)
            logger.warning(
                f"completion_http_error: model={self.model_name}, status={e.status_code}, "
                f"kind={tagged.error}"
            )
            raise tagged from e
        except Exception as e:
            logger.exception(
                f"completion_error: model={self.model_name}, error_type={type(e).__name__}"
            )
            raise CompletionError() from e

        text = response_text(response)
        if not text.strip():
            logger.warning(f"completion_empty: model={self.model_name}")
            return FALLBACK_REPLY

        logger.info(
            f"completion_ok: model={self.model_name}, history={len(messages)}, chars={len(text)}"
        )
        return text
