"""Data models for reviews, comments and persisted test reports."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReviewStatus(str, Enum):
    """Lifecycle status of a review."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CLOSED = "CLOSED"


TERMINAL_STATUSES = frozenset(
    {ReviewStatus.APPROVED, ReviewStatus.REJECTED, ReviewStatus.CLOSED}
)


@dataclass
class Review:
    """A code review (the execution a report is generated for)."""

    id: str
    title: str
    status: str = ReviewStatus.PENDING.value
    description: str | None = None
    source_type: str | None = None
    source_id: str | None = None
    source_url: str | None = None
    author_id: str = ""
    author_name: str | None = None
    branch_name: str | None = None
    commit_sha: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_completed(self) -> bool:
        return self.status in {s.value for s in TERMINAL_STATUSES}


@dataclass
class Comment:
    """A comment in a review thread."""

    id: str
    review_id: str
    content: str
    author_id: str = ""
    author_name: str | None = None
    is_resolved: bool = False
    severity: str | None = None
    file_path: str | None = None
    line_start: int | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class TestReport:
    """A persisted test report, unique per execution (review) id."""

    __test__ = False  # not a pytest test class

    execution_id: str
    title: str
    recommendation: str
    id: str = ""
    description: str | None = None
    recommendation_reason: str | None = None
    summary: str | None = None
    overall_analysis: str | None = None
    score: float | None = None
    max_score: float = 100
    acceptance_suggestion: str | None = None
    key_findings: list[str] = field(default_factory=list)
    concerns: list[str] = field(default_factory=list)
    positives: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    repository_name: str | None = None
    repository_url: str | None = None
    branch_name: str | None = None
    commit_sha: str | None = None
    pull_request_id: str | None = None
    pull_request_url: str | None = None
    total_tasks: int = 0
    completed_tasks: int = 0
    failed_tasks: int = 0
    skipped_tasks: int = 0
    author_id: str | None = None
    author_name: str | None = None
    ai_generated: bool = False
    executed_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        """Convert report to dictionary for serialization."""
        return {
            "id": self.id,
            "execution_id": self.execution_id,
            "title": self.title,
            "description": self.description,
            "recommendation": self.recommendation,
            "recommendation_reason": self.recommendation_reason,
            "summary": self.summary,
            "overall_analysis": self.overall_analysis,
            "score": self.score,
            "max_score": self.max_score,
            "acceptance_suggestion": self.acceptance_suggestion,
            "key_findings": list(self.key_findings),
            "concerns": list(self.concerns),
            "positives": list(self.positives),
            "suggestions": list(self.suggestions),
            "repository_name": self.repository_name,
            "repository_url": self.repository_url,
            "branch_name": self.branch_name,
            "commit_sha": self.commit_sha,
            "pull_request_id": self.pull_request_id,
            "pull_request_url": self.pull_request_url,
            "total_tasks": self.total_tasks,
            "completed_tasks": self.completed_tasks,
            "failed_tasks": self.failed_tasks,
            "skipped_tasks": self.skipped_tasks,
            "author_id": self.author_id,
            "author_name": self.author_name,
            "ai_generated": self.ai_generated,
            "executed_at": self.executed_at.isoformat() if self.executed_at else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
