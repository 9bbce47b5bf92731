"""In-memory review store."""

import asyncio
import copy
import uuid
from dataclasses import replace

from revreport.store.base import DuplicateReportError, StoreError
from revreport.store.models import Comment, Review, TestReport, utcnow


class InMemoryReviewStore:
    """Process-local ReviewStore.

    Reports are keyed uniquely by execution id; creation checks and inserts
    under one lock so two concurrent creators cannot both succeed.
    """

    def __init__(self) -> None:
        self._reviews: dict[str, Review] = {}
        self._comments: dict[str, list[Comment]] = {}
        self._reports: dict[str, TestReport] = {}
        self._report_ids: dict[str, str] = {}  # report id -> execution id
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Reviews / comments
    # ------------------------------------------------------------------

    def add_review(self, review: Review) -> Review:
        self._reviews[review.id] = review
        self._comments.setdefault(review.id, [])
        return review

    def add_comment(self, comment: Comment) -> Comment:
        if comment.review_id not in self._reviews:
            raise StoreError(f"Review {comment.review_id} not found")
        self._comments.setdefault(comment.review_id, []).append(comment)
        return comment

    def set_review_status(self, review_id: str, status: str) -> Review:
        """Update the status of a review.

        Raises:
            StoreError: If the review does not exist
        """
        review = self._reviews.get(review_id)
        if review is None:
            raise StoreError(f"Review {review_id} not found")
        review.status = status
        review.updated_at = utcnow()
        return review

    async def get_review(self, review_id: str) -> Review | None:
        review = self._reviews.get(review_id)
        return copy.deepcopy(review) if review else None

    async def list_comments(self, review_id: str) -> list[Comment]:
        comments = sorted(self._comments.get(review_id, []), key=lambda c: c.created_at)
        return [copy.deepcopy(c) for c in comments]

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    async def get_report_by_execution(self, execution_id: str) -> TestReport | None:
        report = self._reports.get(execution_id)
        return copy.deepcopy(report) if report else None

    async def get_report(self, report_id: str) -> TestReport | None:
        execution_id = self._report_ids.get(report_id)
        if execution_id is None:
            return None
        return await self.get_report_by_execution(execution_id)

    async def create_report(self, report: TestReport) -> TestReport:
        async with self._lock:
            if report.execution_id in self._reports:
                raise DuplicateReportError(report.execution_id)
            stored = replace(report, id=report.id or uuid.uuid4().hex)
            self._reports[stored.execution_id] = stored
            self._report_ids[stored.id] = stored.execution_id
            return copy.deepcopy(stored)

    async def update_report(self, report: TestReport) -> TestReport:
        async with self._lock:
            existing = self._reports.get(report.execution_id)
            if existing is None or existing.id != report.id:
                raise StoreError(f"Test report {report.id} not found")
            stored = replace(report, created_at=existing.created_at, updated_at=utcnow())
            self._reports[stored.execution_id] = stored
            return copy.deepcopy(stored)

    def report_count(self) -> int:
        return len(self._reports)
