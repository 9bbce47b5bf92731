"""Provider adapter: one normalized chat call against a configured backend."""

import asyncio
import logging
import time

from langchain_core.language_models import BaseChatModel

from revreport.llm.backends import ProviderBackend, get_backend
from revreport.llm.config import ProviderConfig
from revreport.llm.errors import ProviderError, ProviderTimeoutError
from revreport.llm.messages import ChatCompletionResult, ChatMessage


logger = logging.getLogger(__name__)


class LLMProvider:
    """Adapter owning one ProviderConfig.

    The config is validated on construction. Calls are never retried here;
    retry policy belongs to the caller (see ``ProviderError.retryable``).
    """

    def __init__(
        self,
        config: ProviderConfig,
        chat_model: BaseChatModel | None = None,
    ):
        """Initialize the provider.

        Args:
            config: Provider configuration
            chat_model: Pre-built LangChain chat model. Built from the config
                by the provider's backend when omitted.

        Raises:
            ConfigError: If the config is invalid
        """
        config.validate()
        self.config = config
        self.backend: ProviderBackend = get_backend(config.provider_type)
        self.model = chat_model or self.backend.build_model(config)

    @property
    def model_name(self) -> str:
        return self.config.model

    async def send(self, messages: list[ChatMessage]) -> ChatCompletionResult:
        """Send a conversation and return the normalized completion.

        Args:
            messages: Ordered conversation

        Returns:
            ChatCompletionResult with the text content and token usage

        Raises:
            ProviderTimeoutError: If the call exceeded ``timeout_ms``
            NetworkError: If no response was received
            APIError: If the provider rejected the request or returned no content
        """
        request = self.backend.build_request(messages)
        started = time.monotonic()

        try:
            response = await asyncio.wait_for(
                self._invoke(request),
                timeout=self.config.timeout_seconds,
            )
        except ProviderError:
            raise
        except asyncio.TimeoutError:
            raise ProviderTimeoutError(
                f"{self.backend.display_name} request timed out after "
                f"{self.config.timeout_ms}ms"
            ) from None

        result = self.backend.parse_response(response)
        logger.debug(
            f"{self.backend.display_name} call to {self.model_name} finished in "
            f"{int((time.monotonic() - started) * 1000)}ms "
            f"(tokens: {result.token_usage.total_tokens if result.token_usage else 'n/a'})"
        )
        return result

    async def _invoke(self, request):
        """Call the model, translating SDK errors into ProviderError."""
        try:
            return await self.model.ainvoke(request)
        except ProviderError:
            raise
        except Exception as e:
            mapped = self.backend.map_error(e)
            if mapped is None or mapped is e:
                raise
            raise mapped from e
