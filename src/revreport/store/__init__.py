"""Persistence boundary for revreport."""

from revreport.store.models import (
    Comment,
    Review,
    ReviewStatus,
    TERMINAL_STATUSES,
    TestReport,
)
from revreport.store.base import DuplicateReportError, ReviewStore, StoreError
from revreport.store.memory import InMemoryReviewStore

__all__ = [
    "Comment",
    "Review",
    "ReviewStatus",
    "TERMINAL_STATUSES",
    "TestReport",
    "DuplicateReportError",
    "ReviewStore",
    "StoreError",
    "InMemoryReviewStore",
]
