"""API endpoints for review completion, reports and multi-file reviews."""

import logging
from collections.abc import Callable
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from revreport.agents.review_agent import FileDiff, ReviewAgent
from revreport.llm.errors import ConfigError
from revreport.llm.schemas import AggregatedReviewResult
from revreport.report.trigger import ReportTrigger, TriggerOutcome
from revreport.store.base import ReviewStore


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


class FileDiffRequest(BaseModel):
    """A changed file submitted for review."""

    path: str
    diff: str


class ReviewFilesRequest(BaseModel):
    """Request body for a multi-file review."""

    files: list[FileDiffRequest] = Field(default_factory=list)
    pr_title: Optional[str] = None
    pr_description: Optional[str] = None


class RegenerateRequest(BaseModel):
    """Request body for report regeneration."""

    additional_context: Optional[str] = None


class TriggerResponse(BaseModel):
    success: bool
    report_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: TriggerOutcome) -> "TriggerResponse":
        return cls(success=outcome.success, report_id=outcome.report_id, error=outcome.error)


def get_store(request: Request) -> ReviewStore:
    return request.app.state.store


def get_trigger(request: Request) -> ReportTrigger:
    return request.app.state.trigger


def get_review_agent_factory(request: Request) -> Callable[[], ReviewAgent]:
    return request.app.state.review_agent_factory


@router.post("/reviews/{review_id}/completed", status_code=202)
async def review_completed(
    review_id: str,
    trigger: ReportTrigger = Depends(get_trigger),
):
    """Notify that a review changed status.

    Report generation runs in the background; this call never waits for it.
    """
    trigger.trigger_in_background(review_id)
    return {"status": "accepted", "review_id": review_id}


@router.post("/reviews/{review_id}/report", response_model=TriggerResponse)
async def create_report(
    review_id: str,
    trigger: ReportTrigger = Depends(get_trigger),
) -> TriggerResponse:
    """Create the test report for a completed review and wait for it."""
    outcome = await trigger.on_review_completed(review_id)
    return TriggerResponse.from_outcome(outcome)


@router.post("/reviews/{review_id}/report/regenerate", response_model=TriggerResponse)
async def regenerate_report(
    review_id: str,
    body: Optional[RegenerateRequest] = None,
    trigger: ReportTrigger = Depends(get_trigger),
) -> TriggerResponse:
    """Re-generate the test report of a completed review in place."""
    additional_context = body.additional_context if body else None
    outcome = await trigger.regenerate(review_id, additional_context)
    return TriggerResponse.from_outcome(outcome)


@router.get("/reports/{review_id}")
async def get_report(
    review_id: str,
    store: ReviewStore = Depends(get_store),
):
    """Get the test report of a review."""
    report = await store.get_report_by_execution(review_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Test report not found")
    return report.to_dict()


@router.post("/review-files")
async def review_files(
    request: ReviewFilesRequest,
    agent_factory: Callable[[], ReviewAgent] = Depends(get_review_agent_factory),
):
    """Review several files and return the per-file results plus the aggregate score."""
    logger.info(f"Multi-file review request for {len(request.files)} files")

    try:
        agent = agent_factory()
    except ConfigError as e:
        logger.error(f"Review agent misconfigured: {e}")
        raise HTTPException(status_code=503, detail=str(e))

    result = await agent.review_files(
        [FileDiff(path=f.path, diff=f.diff) for f in request.files],
        pr_title=request.pr_title,
        pr_description=request.pr_description,
    )
    if not result.success:
        raise HTTPException(
            status_code=400 if result.code == "NO_FILES" else 502,
            detail={"error": result.error, "code": result.code},
        )

    aggregated: AggregatedReviewResult = result.data
    return aggregated.model_dump(mode="json")
