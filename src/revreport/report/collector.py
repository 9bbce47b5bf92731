"""Context Collector: builds a ReportContext snapshot for one review."""

import asyncio
import logging
from typing import Protocol
from urllib.parse import urlparse

from revreport.github.client import GitHubClient
from revreport.github.models import PRDiffInfo, PRParams
from revreport.server.config import Settings, get_settings
from revreport.report.models import (
    ConversationComment,
    ConversationSummary,
    ExecutionData,
    PlanInfo,
    ReportContext,
    TaskStatus,
)
from revreport.store.base import ReviewStore
from revreport.store.models import Comment


logger = logging.getLogger(__name__)


class ContextCollectionError(Exception):
    """Raised when a sub-fetch fails for an infrastructure reason."""

    def __init__(self, review_id: str, step: str, cause: BaseException):
        super().__init__(f"Failed to collect {step} for review {review_id}: {cause}")
        self.review_id = review_id
        self.step = step


class DiffSource(Protocol):
    """Anything that can fetch a pull request diff (blocking)."""

    def get_diff(self, params: PRParams) -> PRDiffInfo: ...


def derive_plan(execution: ExecutionData | None) -> PlanInfo | None:
    """Derive repository / PR coordinates from the execution's source URL."""
    if execution is None:
        return None

    repository_name = None
    repository_url = None
    pull_request_id = None
    pull_request_url = None

    if execution.source_url:
        parsed = urlparse(execution.source_url)
        parts = [p for p in parsed.path.split("/") if p]
        if parsed.scheme and parsed.netloc and len(parts) >= 2:
            repository_name = f"{parts[0]}/{parts[1]}"
            repository_url = f"{parsed.scheme}://{parsed.netloc}/{repository_name}"
            if len(parts) >= 4 and parts[2] == "pull" and parts[3].isdigit():
                pull_request_id = parts[3]
                pull_request_url = execution.source_url

    return PlanInfo(
        repository_name=repository_name,
        repository_url=repository_url,
        pull_request_id=pull_request_id,
        pull_request_url=pull_request_url,
    )


def infer_tasks(comments: list[Comment]) -> list[TaskStatus]:
    """Group comments into tasks.

    Comments sharing a file path form one task; a comment without a path is
    its own task. A task is completed iff its latest comment is resolved.
    The first comment supplies the task id, assignee and creation time.
    ``comments`` must be ordered oldest first.
    """
    groups: dict[str, list[Comment]] = {}
    for comment in comments:
        key = comment.file_path or f"comment-{comment.id}"
        groups.setdefault(key, []).append(comment)

    tasks = []
    for group in groups.values():
        first, latest = group[0], group[-1]
        completed = latest.is_resolved
        tasks.append(
            TaskStatus(
                task_id=first.id,
                title=f"Review for {first.file_path}" if first.file_path else "General comment",
                status="completed" if completed else "in_progress",
                assignee_id=first.author_id or None,
                assignee_name=first.author_name,
                created_at=first.created_at,
                completed_at=latest.updated_at if completed else None,
            )
        )
    return tasks


def summarize_conversation(comments: list[Comment]) -> ConversationSummary:
    resolved = sum(1 for c in comments if c.is_resolved)
    return ConversationSummary(
        total_comments=len(comments),
        resolved_comments=resolved,
        unresolved_comments=len(comments) - resolved,
        comments=tuple(
            ConversationComment(
                id=c.id,
                content=c.content,
                created_at=c.created_at,
                is_resolved=c.is_resolved,
                author_name=c.author_name,
                severity=c.severity or None,
                file_path=c.file_path or None,
                line_start=c.line_start,
            )
            for c in comments
        ),
    )


class ContextCollector:
    """Collects execution, task, conversation and diff data concurrently."""

    def __init__(self, store: ReviewStore, diff_client: DiffSource | None = None):
        """Initialize the collector.

        Args:
            store: Persistence boundary for reviews and comments
            diff_client: Optional PR diff source. Without one, diffs are skipped.
        """
        self.store = store
        self.diff_client = diff_client

    @classmethod
    def from_settings(
        cls, store: ReviewStore, settings: Settings | None = None
    ) -> "ContextCollector":
        """Build a collector, enabling diffs only when a GitHub token is configured."""
        settings = settings or get_settings()
        diff_client = None
        if settings.github_token:
            diff_client = GitHubClient(
                token=settings.github_token, base_url=settings.github_api_url
            )
        return cls(store, diff_client)

    async def _execution(self, review_id: str) -> ExecutionData | None:
        review = await self.store.get_review(review_id)
        if review is None:
            logger.warning(f"Review {review_id} not found during context collection")
            return None
        return ExecutionData(
            id=review.id,
            title=review.title,
            status=review.status,
            description=review.description,
            source_type=review.source_type,
            source_id=review.source_id,
            source_url=review.source_url,
            author_id=review.author_id,
            author_name=review.author_name,
            created_at=review.created_at,
            updated_at=review.updated_at,
        )

    async def _tasks(self, review_id: str) -> list[TaskStatus]:
        return infer_tasks(await self.store.list_comments(review_id))

    async def _conversation(self, review_id: str) -> ConversationSummary:
        return summarize_conversation(await self.store.list_comments(review_id))

    async def _pr_diff(self, pr_params: PRParams | None) -> PRDiffInfo | None:
        if pr_params is None:
            logger.debug("No PR params provided, skipping diff collection")
            return None
        if self.diff_client is None:
            logger.debug("No diff client configured, skipping diff collection")
            return None
        try:
            return await asyncio.to_thread(self.diff_client.get_diff, pr_params)
        except Exception as e:
            logger.warning(
                f"Failed to fetch PR diff for "
                f"{pr_params.owner}/{pr_params.repo}#{pr_params.pull_number}: {e}"
            )
            return None

    async def collect(
        self, review_id: str, pr_params: PRParams | None = None
    ) -> ReportContext:
        """Build a fresh ReportContext.

        A missing review yields ``execution=None``; a failed diff fetch yields
        ``pr_diff=None``.

        Raises:
            ContextCollectionError: If reading the review or its comments fails
        """
        logger.info(f"Starting report context collection for review {review_id}")

        steps = ("execution data", "task status", "conversation summary", "PR diff")
        outcomes = await asyncio.gather(
            self._execution(review_id),
            self._tasks(review_id),
            self._conversation(review_id),
            self._pr_diff(pr_params),
            return_exceptions=True,
        )
        for step, outcome in zip(steps, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Failed to collect {step} for review {review_id}: {outcome}")
                raise ContextCollectionError(review_id, step, outcome) from outcome

        execution, tasks, conversation, pr_diff = outcomes
        context = ReportContext(
            execution=execution,
            plan=derive_plan(execution),
            tasks=tuple(tasks),
            conversation=conversation,
            pr_diff=pr_diff,
        )

        logger.info(
            f"Report context collected for review {review_id}: "
            f"{len(context.tasks)} tasks, "
            f"{context.conversation.total_comments} comments, "
            f"diff={'yes' if context.pr_diff else 'no'}"
        )
        return context
