"""Persistence boundary consumed by the report pipeline."""

from typing import Protocol, runtime_checkable

from revreport.store.models import Comment, Review, TestReport


class StoreError(Exception):
    """Raised when the persistence layer fails."""


class DuplicateReportError(StoreError):
    """Raised when a report already exists for an execution id."""

    def __init__(self, execution_id: str):
        super().__init__(f"Test report already exists for execution {execution_id}")
        self.execution_id = execution_id


@runtime_checkable
class ReviewStore(Protocol):
    """Reads reviews and comments, reads/creates/updates reports.

    ``create_report`` must enforce uniqueness of ``execution_id`` and raise
    DuplicateReportError on conflict. Reports are never deleted.
    """

    async def get_review(self, review_id: str) -> Review | None: ...

    async def list_comments(self, review_id: str) -> list[Comment]:
        """Comments of a review, oldest first."""
        ...

    async def get_report_by_execution(self, execution_id: str) -> TestReport | None: ...

    async def create_report(self, report: TestReport) -> TestReport: ...

    async def update_report(self, report: TestReport) -> TestReport: ...
