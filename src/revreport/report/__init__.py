"""Test report pipeline: context collection, generation and completion trigger."""

from revreport.report.models import (
    ConversationComment,
    ConversationSummary,
    ExecutionData,
    PlanInfo,
    ReportContext,
    TaskStatus,
)
from revreport.report.collector import ContextCollectionError, ContextCollector
from revreport.report.generator import (
    ReportGenerator,
    create_report_generator,
    create_review_agent,
)
from revreport.report.trigger import (
    ReportTrigger,
    TriggerOutcome,
    map_status_to_recommendation,
)

__all__ = [
    "ConversationComment",
    "ConversationSummary",
    "ExecutionData",
    "PlanInfo",
    "ReportContext",
    "TaskStatus",
    "ContextCollectionError",
    "ContextCollector",
    "ReportGenerator",
    "create_report_generator",
    "create_review_agent",
    "ReportTrigger",
    "TriggerOutcome",
    "map_status_to_recommendation",
]
