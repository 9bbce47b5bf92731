"""Base agent class."""

from abc import ABC
from dataclasses import dataclass
import logging
from typing import Generic, TypeVar

from revreport.llm.errors import (
    APIError,
    NetworkError,
    ProviderTimeoutError,
    ResponseError,
)
from revreport.llm.provider import LLMProvider


T = TypeVar("T")


@dataclass(frozen=True)
class AgentResult(Generic[T]):
    """Uniform success/failure envelope returned by agents."""

    success: bool
    data: T | None = None
    error: str | None = None
    code: str | None = None

    @classmethod
    def ok(cls, data: T) -> "AgentResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, code: str | None = None) -> "AgentResult[T]":
        return cls(success=False, error=error, code=code)


def error_code(error: Exception) -> str | None:
    """Classify an exception into a result code."""
    if isinstance(error, ProviderTimeoutError):
        return "TIMEOUT"
    if isinstance(error, ResponseError):
        return "PARSE_ERROR"
    if isinstance(error, NetworkError):
        return "NETWORK_ERROR"
    if isinstance(error, APIError):
        return "API_ERROR"
    return None


class BaseAgent(ABC):
    """Base class for agents built on a provider adapter."""

    def __init__(self, llm_provider: LLMProvider):
        """Initialize the agent.

        Args:
            llm_provider: Adapter used for every model call
        """
        self.llm_provider = llm_provider
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def llm(self) -> LLMProvider:
        """Get the LLM provider."""
        return self.llm_provider

    @property
    def model_name(self) -> str:
        return self.llm_provider.model_name

    def _log_info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def _log_error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def _log_warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def _log_debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)
