"""Agents module for revreport with LangChain integration."""

from revreport.agents.base import AgentResult, BaseAgent, error_code
from revreport.agents.review_agent import FileDiff, ReviewAgent, ReviewType

__all__ = [
    # Base
    "AgentResult",
    "BaseAgent",
    "error_code",
    # Review Agent
    "FileDiff",
    "ReviewAgent",
    "ReviewType",
]
