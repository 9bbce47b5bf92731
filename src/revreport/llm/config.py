"""Provider configuration."""

from dataclasses import dataclass, field
from enum import Enum

from revreport.llm.errors import ConfigError


DEFAULT_MAX_TOKENS = 4096
DEFAULT_TEMPERATURE = 0.3
DEFAULT_TIMEOUT_MS = 60_000


class ProviderType(str, Enum):
    """Supported AI backends."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    AZURE_OPENAI = "azure-openai"


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable settings for a single provider adapter.

    The API key is excluded from ``repr`` so configs can be logged safely.
    """

    provider: ProviderType | str
    model: str
    api_key: str = field(repr=False)
    base_url: str | None = None
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    @property
    def provider_type(self) -> ProviderType:
        """Get the provider as an enum member."""
        return ProviderType(self.provider)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def validate(self) -> None:
        """Check the config invariants.

        Raises:
            ConfigError: If provider, model or API key is missing, the provider
                is unknown, or Azure OpenAI has no base URL
        """
        if not self.provider:
            raise ConfigError("AI provider is required")
        if not self.model:
            raise ConfigError("AI model is required")
        if not self.api_key:
            raise ConfigError("API key is required")

        try:
            provider = ProviderType(self.provider)
        except ValueError:
            supported = ", ".join(p.value for p in ProviderType)
            raise ConfigError(
                f"Unsupported AI provider: {self.provider}. Supported: {supported}"
            ) from None

        if provider is ProviderType.AZURE_OPENAI and not self.base_url:
            raise ConfigError("Azure OpenAI requires base_url to be configured")
        if self.timeout_ms <= 0:
            raise ConfigError(f"timeout_ms must be positive, got {self.timeout_ms}")
        if self.max_tokens <= 0:
            raise ConfigError(f"max_tokens must be positive, got {self.max_tokens}")
