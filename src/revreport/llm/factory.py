"""Factory for creating provider adapters from settings."""

from revreport.llm.config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT_MS,
    ProviderConfig,
    ProviderType,
)
from revreport.llm.errors import ConfigError
from revreport.llm.provider import LLMProvider
from revreport.server.config import Settings, get_settings


API_KEY_ENV_VARS = {
    ProviderType.OPENAI: "OPENAI_API_KEY",
    ProviderType.ANTHROPIC: "ANTHROPIC_API_KEY",
    ProviderType.AZURE_OPENAI: "AZURE_OPENAI_API_KEY",
}


def config_from_settings(
    settings: Settings | None = None,
    max_tokens: int | None = None,
    timeout_ms: int | None = None,
) -> ProviderConfig:
    """Build a ProviderConfig for the active provider.

    Args:
        settings: Settings to read. Defaults to the cached environment settings.
        max_tokens: Override for ``AI_MAX_TOKENS``
        timeout_ms: Override for ``AI_TIMEOUT``

    Raises:
        ConfigError: If the provider is unknown or its API key is not set
    """
    settings = settings or get_settings()

    try:
        provider = ProviderType(settings.ai_provider)
    except ValueError:
        supported = ", ".join(p.value for p in ProviderType)
        raise ConfigError(
            f"Unknown provider: {settings.ai_provider}. Supported: {supported}"
        ) from None

    api_key = settings.api_key_for(provider.value)
    if not api_key:
        raise ConfigError(
            f"API key not found for provider: {provider.value}. "
            f"Set {API_KEY_ENV_VARS[provider]} environment variable."
        )

    return ProviderConfig(
        provider=provider,
        model=settings.ai_model,
        api_key=api_key,
        base_url=settings.ai_base_url or None,
        max_tokens=max_tokens or settings.ai_max_tokens,
        temperature=settings.ai_temperature,
        timeout_ms=timeout_ms or settings.ai_timeout,
    )


def get_provider(
    settings: Settings | None = None,
    max_tokens: int | None = None,
    timeout_ms: int | None = None,
) -> LLMProvider:
    """Factory function to get an adapter for the configured provider.

    Raises:
        ConfigError: If configuration is invalid or missing
    """
    return LLMProvider(config_from_settings(settings, max_tokens, timeout_ms))


def openai_config(
    api_key: str,
    model: str = "gpt-4o",
    **options,
) -> ProviderConfig:
    return ProviderConfig(
        provider=ProviderType.OPENAI,
        model=model,
        api_key=api_key,
        base_url=options.get("base_url"),
        max_tokens=options.get("max_tokens", DEFAULT_MAX_TOKENS),
        temperature=options.get("temperature", DEFAULT_TEMPERATURE),
        timeout_ms=options.get("timeout_ms", DEFAULT_TIMEOUT_MS),
    )


def anthropic_config(
    api_key: str,
    model: str = "claude-3-5-sonnet",
    **options,
) -> ProviderConfig:
    return ProviderConfig(
        provider=ProviderType.ANTHROPIC,
        model=model,
        api_key=api_key,
        base_url=options.get("base_url"),
        max_tokens=options.get("max_tokens", DEFAULT_MAX_TOKENS),
        temperature=options.get("temperature", DEFAULT_TEMPERATURE),
        timeout_ms=options.get("timeout_ms", DEFAULT_TIMEOUT_MS),
    )


def azure_openai_config(
    api_key: str,
    base_url: str,
    model: str = "gpt-4o",
    **options,
) -> ProviderConfig:
    return ProviderConfig(
        provider=ProviderType.AZURE_OPENAI,
        model=model,
        api_key=api_key,
        base_url=base_url,
        max_tokens=options.get("max_tokens", DEFAULT_MAX_TOKENS),
        temperature=options.get("temperature", DEFAULT_TEMPERATURE),
        timeout_ms=options.get("timeout_ms", DEFAULT_TIMEOUT_MS),
    )
