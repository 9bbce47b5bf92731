"""LLM abstraction layer for revreport using LangChain."""

from revreport.llm.config import ProviderConfig, ProviderType
from revreport.llm.errors import (
    LLMError,
    ConfigError,
    ProviderError,
    NetworkError,
    ProviderTimeoutError,
    APIError,
    ResponseError,
    ExtractionError,
    ParseError,
    ResponseValidationError,
)
from revreport.llm.messages import ChatMessage, ChatCompletionResult, TokenUsage
from revreport.llm.provider import LLMProvider
from revreport.llm.factory import get_provider, config_from_settings
from revreport.llm.parsing import (
    extract_json,
    parse_safe,
    parse_result,
    validate_review_result,
    validate_security_review_result,
    validate_pr_review_result,
    validate_test_report_result,
)
from revreport.llm.schemas import (
    Approval,
    Category,
    Recommendation,
    Severity,
    ReviewComment,
    ReviewResult,
    Vulnerability,
    SecurityReviewResult,
    PRReviewResult,
    AggregatedReviewResult,
    TestReportResult,
)

__all__ = [
    # Config
    "ProviderConfig",
    "ProviderType",
    # Errors
    "LLMError",
    "ConfigError",
    "ProviderError",
    "NetworkError",
    "ProviderTimeoutError",
    "APIError",
    "ResponseError",
    "ExtractionError",
    "ParseError",
    "ResponseValidationError",
    # Provider
    "ChatMessage",
    "ChatCompletionResult",
    "TokenUsage",
    "LLMProvider",
    # Factory
    "get_provider",
    "config_from_settings",
    # Parsing
    "extract_json",
    "parse_safe",
    "parse_result",
    "validate_review_result",
    "validate_security_review_result",
    "validate_pr_review_result",
    "validate_test_report_result",
    # Schemas
    "Approval",
    "Category",
    "Recommendation",
    "Severity",
    "ReviewComment",
    "ReviewResult",
    "Vulnerability",
    "SecurityReviewResult",
    "PRReviewResult",
    "AggregatedReviewResult",
    "TestReportResult",
]
