"""Normalized chat messages and completion results."""

from dataclasses import dataclass
from typing import Literal

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage


Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """A message in the conversation."""

    role: Role
    content: str

    def to_langchain(self) -> BaseMessage:
        """Convert to LangChain message format."""
        if self.role == "system":
            return SystemMessage(content=self.content)
        elif self.role == "assistant":
            return AIMessage(content=self.content)
        else:
            return HumanMessage(content=self.content)


@dataclass(frozen=True)
class TokenUsage:
    """Token accounting reported by the provider."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    def to_dict(self) -> dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class ChatCompletionResult:
    """Response from a provider call."""

    content: str
    token_usage: TokenUsage | None = None
