"""Pydantic schemas for structured LLM outputs.

Models answer in camelCase JSON; fields are snake_case with camelCase
aliases. Structural problems (missing field, wrong type, unknown enum value,
a scalar where a list is expected) fail validation. Out-of-range scores are
clamped instead.
"""

import math
from enum import Enum
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from revreport.llm.messages import TokenUsage


REVIEW_SCORE_RANGE = (0, 10)
DEFAULT_MAX_SCORE = 100

Number = Annotated[float, Field(strict=True, allow_inf_nan=False)]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from zero for positives (6.5 -> 7)."""
    return math.floor(value + 0.5)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _clamped_int_score(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a number")
    if not math.isfinite(value):
        raise ValueError("must be a finite number")
    low, high = REVIEW_SCORE_RANGE
    return round_half_up(clamp(value, low, high))


def _normalize_case(value: Any, upper: bool = False) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value.upper() if upper else value.lower()
    return value


class Severity(str, Enum):
    """Severity of a review comment."""

    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    SUGGESTION = "SUGGESTION"
    INFO = "INFO"


class Category(str, Enum):
    """Category of a review comment."""

    SECURITY = "security"
    PERFORMANCE = "performance"
    MAINTAINABILITY = "maintainability"
    CORRECTNESS = "correctness"
    STYLE = "style"


class Approval(str, Enum):
    """Approval decision of a review."""

    APPROVE = "approve"
    REQUEST_CHANGES = "request_changes"
    COMMENT = "comment"


class VulnerabilitySeverity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Recommendation(str, Enum):
    """Final verdict attached to a test report."""

    MERGE = "MERGE"
    NEEDS_CHANGES = "NEEDS_CHANGES"
    REJECT = "REJECT"


class ResultModel(BaseModel):
    """Base for all result shapes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReviewComment(ResultModel):
    """A single comment produced by a code review."""

    line: StrictInt
    severity: Severity
    category: Category
    comment: StrictStr
    suggestion: StrictStr | None = None
    file_path: StrictStr | None = None

    @field_validator("severity", mode="before")
    @classmethod
    def _severity_case(cls, value: Any) -> Any:
        return _normalize_case(value, upper=True)

    @field_validator("category", mode="before")
    @classmethod
    def _category_case(cls, value: Any) -> Any:
        return _normalize_case(value)


class ReviewResult(ResultModel):
    """Structured code review of one diff."""

    summary: StrictStr
    comments: list[ReviewComment]
    approval: Approval
    score: int = Field(validation_alias=AliasChoices("overallScore", "score"))
    model: str = ""
    file_path: str | None = None
    duration_ms: int = 0
    token_usage: TokenUsage | None = None

    @field_validator("approval", mode="before")
    @classmethod
    def _approval_case(cls, value: Any) -> Any:
        return _normalize_case(value)

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> int:
        return _clamped_int_score(value)


class Vulnerability(ResultModel):
    """A security finding."""

    line: StrictInt
    severity: VulnerabilitySeverity
    type: StrictStr
    description: StrictStr
    impact: StrictStr
    remediation: StrictStr
    references: list[StrictStr] | None = None

    @field_validator("severity", mode="before")
    @classmethod
    def _severity_case(cls, value: Any) -> Any:
        return _normalize_case(value)


class SecurityReviewResult(ResultModel):
    """Structured security review of one diff."""

    vulnerabilities: list[Vulnerability]
    security_score: int
    summary: StrictStr
    model: str = ""
    duration_ms: int = 0

    @field_validator("security_score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> int:
        return _clamped_int_score(value)


class PRReviewResult(ResultModel):
    """Single-call review of a whole pull request."""

    summary: StrictStr
    key_changes: list[StrictStr]
    concerns: list[StrictStr]
    suggestions: list[StrictStr]
    testing_recommendations: list[StrictStr]
    approval: Approval
    score: int = Field(validation_alias=AliasChoices("overallScore", "score"))
    model: str = ""
    duration_ms: int = 0

    @field_validator("approval", mode="before")
    @classmethod
    def _approval_case(cls, value: Any) -> Any:
        return _normalize_case(value)

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> int:
        return _clamped_int_score(value)


class AggregatedReviewResult(ResultModel):
    """Per-file reviews combined into one verdict."""

    results: list[ReviewResult]
    aggregate_score: int


class TestReportResult(ResultModel):
    """AI-generated test report summarizing a completed review."""

    __test__ = False  # not a pytest test class

    summary: StrictStr
    overall_analysis: StrictStr
    score: Number
    max_score: Number
    recommendation: Recommendation
    recommendation_reason: StrictStr
    acceptance_suggestion: StrictStr
    key_findings: list[StrictStr]
    concerns: list[StrictStr]
    positives: list[StrictStr]
    suggestions: list[StrictStr]

    @field_validator("recommendation", mode="before")
    @classmethod
    def _recommendation_case(cls, value: Any) -> Any:
        return _normalize_case(value, upper=True)

    @model_validator(mode="after")
    def _clamp_score(self) -> "TestReportResult":
        self.score = clamp(self.score, 0, max(self.max_score, 0))
        return self
