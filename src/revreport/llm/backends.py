"""Provider backends.

Each backend owns one wire protocol: it builds the LangChain chat model for
its provider, shapes the outgoing messages, maps the provider envelope back
to a ``ChatCompletionResult`` and translates SDK exceptions into the
``ProviderError`` hierarchy.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

import anthropic
import httpx
import openai
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, SystemMessage
from langchain_openai import AzureChatOpenAI, ChatOpenAI

from revreport.llm.config import ProviderConfig, ProviderType
from revreport.llm.errors import APIError, NetworkError, ProviderError, ProviderTimeoutError
from revreport.llm.messages import ChatCompletionResult, ChatMessage, TokenUsage
from revreport.prompts.templates import SYSTEM_PROMPT_BASE


AZURE_API_VERSION = "2024-02-01"

ANTHROPIC_MODEL_IDS = {
    "claude-3-opus": "claude-3-opus-20240229",
    "claude-3-sonnet": "claude-3-sonnet-20240229",
    "claude-3-haiku": "claude-3-haiku-20240307",
    "claude-3-5-sonnet": "claude-3-5-sonnet-20241022",
    "claude-3-5-haiku": "claude-3-5-haiku-20241022",
}

_TIMEOUT_ERRORS = (
    openai.APITimeoutError,
    anthropic.APITimeoutError,
    httpx.TimeoutException,
    asyncio.TimeoutError,
    TimeoutError,
)
# Timeout classes subclass these, so timeouts must be matched first.
_CONNECTION_ERRORS = (
    openai.APIConnectionError,
    anthropic.APIConnectionError,
    httpx.TransportError,
)
_STATUS_ERRORS = (openai.APIStatusError, anthropic.APIStatusError)


def _status_error_message(exc: Exception) -> str:
    """Best-effort extraction of the provider's error message."""
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])
    return getattr(exc, "message", None) or str(exc)


def _text_from_content(content: Any) -> str:
    """Flatten LangChain message content (string or content blocks) to text."""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class ProviderBackend(ABC):
    """One provider's request/response protocol."""

    provider: ProviderType
    display_name: str

    @abstractmethod
    def build_model(self, config: ProviderConfig) -> BaseChatModel:
        """Create the chat model that talks to this provider."""

    def build_request(self, messages: list[ChatMessage]) -> list[BaseMessage]:
        return [msg.to_langchain() for msg in messages]

    def parse_response(self, response: BaseMessage) -> ChatCompletionResult:
        """Map the provider's success envelope to a ChatCompletionResult.

        Raises:
            APIError: If the response carries no text content
        """
        content = _text_from_content(response.content)
        if not content:
            raise APIError(f"Invalid response from {self.display_name} API")

        usage = None
        usage_metadata = getattr(response, "usage_metadata", None)
        if usage_metadata:
            prompt_tokens = usage_metadata.get("input_tokens", 0)
            completion_tokens = usage_metadata.get("output_tokens", 0)
            usage = TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=usage_metadata.get("total_tokens")
                or prompt_tokens + completion_tokens,
            )

        return ChatCompletionResult(content=content, token_usage=usage)

    def map_error(self, exc: BaseException) -> ProviderError | None:
        """Translate a transport or SDK exception.

        Returns:
            The matching ProviderError, or None if the exception is not a
            provider failure and should propagate unchanged
        """
        if isinstance(exc, ProviderError):
            return exc
        if isinstance(exc, _TIMEOUT_ERRORS):
            return ProviderTimeoutError(f"{self.display_name} request timed out")
        if isinstance(exc, _STATUS_ERRORS):
            status = exc.status_code
            return APIError(
                f"{self.display_name} API error: {status} - {_status_error_message(exc)}",
                status_code=status,
            )
        if isinstance(exc, _CONNECTION_ERRORS):
            return NetworkError(f"{self.display_name} connection failed: {exc}")
        return None


class OpenAIBackend(ProviderBackend):
    """Chat-completions protocol (``POST {base}/chat/completions``)."""

    provider = ProviderType.OPENAI
    display_name = "OpenAI"

    def build_model(self, config: ProviderConfig) -> BaseChatModel:
        kwargs: dict[str, Any] = {
            "api_key": config.api_key,
            "model": config.model,
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
            "timeout": config.timeout_seconds,
            "max_retries": 0,
        }
        if config.base_url:
            kwargs["base_url"] = config.base_url
        return ChatOpenAI(**kwargs)


class AnthropicBackend(ProviderBackend):
    """Messages protocol (``POST {base}/v1/messages``, system prompt separate)."""

    provider = ProviderType.ANTHROPIC
    display_name = "Anthropic"

    @staticmethod
    def resolve_model(model: str) -> str:
        return ANTHROPIC_MODEL_IDS.get(model, model)

    def build_model(self, config: ProviderConfig) -> BaseChatModel:
        kwargs: dict[str, Any] = {
            "api_key": config.api_key,
            "model": self.resolve_model(config.model),
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
            "timeout": config.timeout_seconds,
            "max_retries": 0,
        }
        if config.base_url:
            kwargs["base_url"] = config.base_url
        return ChatAnthropic(**kwargs)

    def build_request(self, messages: list[ChatMessage]) -> list[BaseMessage]:
        request = super().build_request(messages)
        if not any(isinstance(msg, SystemMessage) for msg in request):
            request.insert(0, SystemMessage(content=SYSTEM_PROMPT_BASE))
        return request


class AzureOpenAIBackend(ProviderBackend):
    """Deployment-scoped chat-completions protocol.

    ``base_url`` is either the full deployment URL
    (``https://<resource>.openai.azure.com/openai/deployments/<name>``) or the
    resource endpoint, in which case ``model`` names the deployment.
    """

    provider = ProviderType.AZURE_OPENAI
    display_name = "Azure OpenAI"

    def build_model(self, config: ProviderConfig) -> BaseChatModel:
        kwargs: dict[str, Any] = {
            "api_key": config.api_key,
            "api_version": AZURE_API_VERSION,
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
            "timeout": config.timeout_seconds,
            "max_retries": 0,
        }
        base_url = (config.base_url or "").rstrip("/")
        if "/openai/deployments/" in base_url:
            kwargs["base_url"] = base_url
            kwargs["model"] = config.model
        else:
            kwargs["azure_endpoint"] = base_url
            kwargs["azure_deployment"] = config.model
        return AzureChatOpenAI(**kwargs)


BACKENDS: dict[ProviderType, ProviderBackend] = {
    backend.provider: backend
    for backend in (OpenAIBackend(), AnthropicBackend(), AzureOpenAIBackend())
}


def get_backend(provider: ProviderType) -> ProviderBackend:
    return BACKENDS[provider]
