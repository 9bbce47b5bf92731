"""Immutable context snapshot consumed by report generation."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from revreport.github.models import PRDiffInfo
from revreport.store.models import utcnow


TaskState = Literal["pending", "in_progress", "completed", "failed", "skipped"]


@dataclass(frozen=True)
class ExecutionData:
    """The reviewed unit a report is generated for."""

    id: str
    title: str
    status: str
    description: str | None = None
    source_type: str | None = None
    source_id: str | None = None
    source_url: str | None = None
    author_id: str = ""
    author_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class PlanInfo:
    """Repository and pull request coordinates derived from the execution."""

    repository_name: str | None = None
    repository_url: str | None = None
    branch_name: str | None = None
    commit_sha: str | None = None
    pull_request_id: str | None = None
    pull_request_url: str | None = None


@dataclass(frozen=True)
class TaskStatus:
    """A unit of review work inferred from comments.

    Derived, not authoritative: comments grouped by file path stand in for
    a real task tracker.
    """

    task_id: str
    title: str
    status: TaskState
    assignee_id: str | None = None
    assignee_name: str | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None
    failed_at: datetime | None = None


@dataclass(frozen=True)
class ConversationComment:
    id: str
    content: str
    created_at: datetime
    is_resolved: bool
    author_name: str | None = None
    severity: str | None = None
    file_path: str | None = None
    line_start: int | None = None


@dataclass(frozen=True)
class ConversationSummary:
    total_comments: int = 0
    resolved_comments: int = 0
    unresolved_comments: int = 0
    comments: tuple[ConversationComment, ...] = ()


@dataclass(frozen=True)
class ReportContext:
    """Everything known about an execution at generation time."""

    execution: ExecutionData | None
    plan: PlanInfo | None = None
    tasks: tuple[TaskStatus, ...] = ()
    conversation: ConversationSummary = field(default_factory=ConversationSummary)
    pr_diff: PRDiffInfo | None = None
    collected_at: datetime = field(default_factory=utcnow)

    def count_tasks(self, status: TaskState) -> int:
        return sum(1 for task in self.tasks if task.status == status)
