"""Configuration for revreport."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False

    # AI provider settings
    ai_provider: str = "openai"
    ai_model: str = "gpt-4o"
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    azure_openai_api_key: str = ""
    ai_base_url: str = ""
    ai_max_tokens: int = 4096
    ai_temperature: float = 0.3
    ai_timeout: int = 60_000  # ms

    # Report generation overrides
    report_max_tokens: int = 8192
    report_timeout: int = 120_000  # ms

    # Review settings
    review_concurrency: int = 4

    # GitHub settings
    github_token: str = ""
    github_api_url: str = "https://api.github.com"

    # Logging
    log_level: str = "INFO"

    def api_key_for(self, provider: str) -> str:
        """Get the API key configured for a provider."""
        return {
            "openai": self.openai_api_key,
            "anthropic": self.anthropic_api_key,
            "azure-openai": self.azure_openai_api_key,
        }.get(provider, "")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
