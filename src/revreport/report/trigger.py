"""Completion Trigger: generates exactly one report per completed review."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

from revreport.agents.base import AgentResult
from revreport.github.client import GitHubClient
from revreport.llm.schemas import Recommendation, TestReportResult
from revreport.report.collector import ContextCollector
from revreport.report.generator import ReportGenerator
from revreport.report.models import ReportContext
from revreport.store.base import DuplicateReportError, ReviewStore
from revreport.store.models import Review, ReviewStatus, TERMINAL_STATUSES, TestReport


logger = logging.getLogger(__name__)

GeneratorFactory = Callable[[], ReportGenerator]

_TERMINAL_VALUES = frozenset(s.value for s in TERMINAL_STATUSES)


@dataclass(frozen=True)
class TriggerOutcome:
    """Result of a trigger run."""

    success: bool
    report_id: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return {"success": self.success, "report_id": self.report_id, "error": self.error}


def is_review_completed(status: str) -> bool:
    return status in _TERMINAL_VALUES


def map_status_to_recommendation(status: str) -> Recommendation:
    """Map a review status to a report recommendation.

    APPROVED -> MERGE, REJECTED -> REJECT, anything else -> NEEDS_CHANGES.
    """
    if status == ReviewStatus.APPROVED.value:
        return Recommendation.MERGE
    if status == ReviewStatus.REJECTED.value:
        return Recommendation.REJECT
    return Recommendation.NEEDS_CHANGES


def build_report(
    review: Review,
    context: ReportContext,
    result: TestReportResult | None,
    title: str | None = None,
    description: str | None = None,
) -> TestReport:
    """Assemble the persisted report.

    Without an AI result the report is populated from context data only and
    ``ai_generated`` is False.
    """
    plan = context.plan
    conversation = context.conversation

    report = TestReport(
        execution_id=review.id,
        title=title or f"{review.title} - Test Report",
        description=description or review.description,
        recommendation=map_status_to_recommendation(review.status).value,
        repository_name=plan.repository_name if plan else None,
        repository_url=plan.repository_url if plan else None,
        branch_name=(plan.branch_name if plan else None) or review.branch_name,
        commit_sha=(plan.commit_sha if plan else None) or review.commit_sha,
        pull_request_id=plan.pull_request_id if plan else None,
        pull_request_url=plan.pull_request_url if plan else None,
        total_tasks=len(context.tasks),
        completed_tasks=context.count_tasks("completed"),
        failed_tasks=context.count_tasks("failed"),
        skipped_tasks=context.count_tasks("skipped"),
        author_id=review.author_id or None,
        author_name=review.author_name,
        executed_at=context.collected_at,
    )

    if result is None:
        if conversation.total_comments > 0:
            report.summary = (
                f"Collected {conversation.total_comments} comments "
                f"with {conversation.resolved_comments} resolved"
            )
        return report

    report.summary = result.summary
    report.overall_analysis = result.overall_analysis
    report.score = result.score
    report.max_score = result.max_score
    report.recommendation_reason = result.recommendation_reason
    report.acceptance_suggestion = result.acceptance_suggestion
    report.key_findings = list(result.key_findings)
    report.concerns = list(result.concerns)
    report.positives = list(result.positives)
    report.suggestions = list(result.suggestions)
    report.ai_generated = True
    return report


class ReportTrigger:
    """Reacts to reviews reaching a terminal status.

    The existing-report lookup and the create run under a per-review lock,
    and the store rejects a second report for the same execution id, so
    concurrent triggers converge on one report.
    """

    def __init__(
        self,
        store: ReviewStore,
        collector: ContextCollector,
        generator_factory: GeneratorFactory,
    ):
        """Initialize the trigger.

        Args:
            store: Persistence boundary for reviews and reports
            collector: Builds the ReportContext
            generator_factory: Returns a ReportGenerator. Called once per
                generation so configuration errors degrade like any other
                generation failure.
        """
        self.store = store
        self.collector = collector
        self.generator_factory = generator_factory
        # review id -> (lock, holders and waiters)
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}
        self._background: set[asyncio.Task] = set()

    @asynccontextmanager
    async def _review_lock(self, review_id: str) -> AsyncIterator[None]:
        """Serialize work on one review; the entry is dropped once unused."""
        lock, users = self._locks.get(review_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[review_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[review_id]
            if users == 1:
                del self._locks[review_id]
            else:
                self._locks[review_id] = (lock, users - 1)

    async def _generate(
        self, context: ReportContext, additional_context: str | None = None
    ) -> TestReportResult | None:
        """Run the generator; any failure is logged and yields None."""
        review_id = context.execution.id if context.execution else "unknown"
        try:
            generator = self.generator_factory()
            outcome: AgentResult[TestReportResult] = await generator.generate(
                context, additional_context
            )
        except Exception as e:
            logger.warning(
                f"AI report generation error for review {review_id}, "
                f"falling back to context-only report: {e}"
            )
            return None

        if not outcome.success:
            logger.warning(
                f"AI report generation failed for review {review_id} "
                f"[{outcome.code}], falling back to context-only report: {outcome.error}"
            )
            return None
        return outcome.data

    async def _load_completed(
        self, review_id: str
    ) -> tuple[Review | None, TriggerOutcome | None]:
        review = await self.store.get_review(review_id)
        if review is None:
            logger.warning(f"Review {review_id} not found for test report trigger")
            return None, TriggerOutcome(success=False, error="Review not found")
        if not is_review_completed(review.status):
            logger.debug(
                f"Review {review_id} is {review.status}, skipping test report trigger"
            )
            return None, TriggerOutcome(success=False, error="Review not completed")
        return review, None

    async def on_review_completed(
        self,
        review_id: str,
        status: str | None = None,
        title: str | None = None,
        description: str | None = None,
    ) -> TriggerOutcome:
        """Create the report for a completed review, once.

        Args:
            review_id: Review that changed status
            status: The observed status, if the caller knows it. A non-terminal
                value short-circuits; the stored status is authoritative otherwise.
            title: Report title. Defaults to ``"<review title> - Test Report"``.
            description: Report description. Defaults to the review's.

        Returns:
            TriggerOutcome with the id of the new or already existing report
        """
        if status is not None and not is_review_completed(status):
            return TriggerOutcome(success=False, error="Review not completed")

        try:
            async with self._review_lock(review_id):
                review, rejected = await self._load_completed(review_id)
                if rejected:
                    return rejected

                existing = await self.store.get_report_by_execution(review_id)
                if existing is not None:
                    logger.info(
                        f"Test report {existing.id} already exists for review {review_id}"
                    )
                    return TriggerOutcome(success=True, report_id=existing.id)

                pr_params = GitHubClient.parse_pr_url(review.source_url)
                context = await self.collector.collect(review_id, pr_params)
                result = await self._generate(context)
                report = build_report(review, context, result, title, description)

                try:
                    created = await self.store.create_report(report)
                except DuplicateReportError:
                    winner = await self.store.get_report_by_execution(review_id)
                    if winner is None:
                        raise
                    logger.info(
                        f"Test report {winner.id} was created concurrently for review {review_id}"
                    )
                    return TriggerOutcome(success=True, report_id=winner.id)

                logger.info(
                    f"Test report {created.id} created for review {review_id}: "
                    f"recommendation={created.recommendation}, ai_generated={created.ai_generated}"
                )
                return TriggerOutcome(success=True, report_id=created.id)
        except Exception as e:
            logger.error(f"Failed to trigger test report for review {review_id}: {e}")
            return TriggerOutcome(success=False, error=str(e) or e.__class__.__name__)

    async def regenerate(
        self, review_id: str, additional_context: str | None = None
    ) -> TriggerOutcome:
        """Re-collect and re-generate the report, updating it in place.

        Creates the report when none exists yet. Reports are never deleted.
        """
        try:
            async with self._review_lock(review_id):
                review, rejected = await self._load_completed(review_id)
                if rejected:
                    return rejected

                pr_params = GitHubClient.parse_pr_url(review.source_url)
                context = await self.collector.collect(review_id, pr_params)
                result = await self._generate(context, additional_context)

                existing = await self.store.get_report_by_execution(review_id)
                report = build_report(
                    review,
                    context,
                    result,
                    title=existing.title if existing else None,
                    description=existing.description if existing else None,
                )
                if existing is None:
                    saved = await self.store.create_report(report)
                else:
                    report.id = existing.id
                    saved = await self.store.update_report(report)

                logger.info(
                    f"Test report {saved.id} regenerated for review {review_id}: "
                    f"ai_generated={saved.ai_generated}"
                )
                return TriggerOutcome(success=True, report_id=saved.id)
        except Exception as e:
            logger.error(f"Failed to regenerate test report for review {review_id}: {e}")
            return TriggerOutcome(success=False, error=str(e) or e.__class__.__name__)

    async def _run_safely(self, review_id: str, status: str | None) -> None:
        try:
            outcome = await self.on_review_completed(review_id, status)
        except Exception:
            logger.exception(f"Unexpected error in background trigger for review {review_id}")
            return
        if not outcome.success:
            logger.info(f"Background trigger for review {review_id} did not run: {outcome.error}")

    def trigger_in_background(
        self, review_id: str, status: str | None = None
    ) -> asyncio.Task:
        """Schedule ``on_review_completed`` without waiting for it.

        Must be called from a running event loop. The task never raises.
        """
        task = asyncio.create_task(self._run_safely(review_id, status))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def drain(self) -> None:
        """Wait for all scheduled background triggers."""
        if self._background:
            await asyncio.gather(*self._background)
