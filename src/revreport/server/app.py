"""FastAPI application exposing the report pipeline."""

import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI

from revreport.agents.review_agent import ReviewAgent
from revreport.report.collector import ContextCollector
from revreport.report.generator import create_report_generator, create_review_agent
from revreport.report.trigger import ReportTrigger
from revreport.server.api import router as api_router
from revreport.server.config import get_settings
from revreport.store.base import ReviewStore
from revreport.store.memory import InMemoryReviewStore


# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    logger.info(f"Starting revreport server on {settings.host}:{settings.port}")
    logger.info(f"AI provider: {settings.ai_provider} ({settings.ai_model})")
    yield
    await app.state.trigger.drain()
    logger.info("Shutting down revreport server")


def create_app(
    store: ReviewStore | None = None,
    trigger: ReportTrigger | None = None,
    review_agent_factory: Callable[[], ReviewAgent] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Persistence boundary. Defaults to an in-memory store.
        trigger: Completion trigger. Defaults to one built from settings.
        review_agent_factory: Builds the agent for multi-file reviews

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()
    store = store or InMemoryReviewStore()
    if trigger is None:
        trigger = ReportTrigger(
            store,
            ContextCollector.from_settings(store, settings),
            create_report_generator,
        )

    app = FastAPI(
        title="revreport",
        description="AI review orchestration and test report generation",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.store = store
    app.state.trigger = trigger
    app.state.review_agent_factory = review_agent_factory or create_review_agent

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "ai_provider": settings.ai_provider}

    app.include_router(api_router)

    return app


# Create default app instance
app = create_app()
