"""Unit tests for the HTTP surface."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from conftest import ai_message, fenced, report_payload, review_payload
from revreport.agents.base import AgentResult
from revreport.agents.review_agent import ReviewAgent
from revreport.llm.errors import ConfigError
from revreport.report.collector import ContextCollector
from revreport.report.generator import ReportGenerator
from revreport.report.trigger import ReportTrigger, TriggerOutcome
from revreport.server.app import create_app


@pytest.fixture
def app_with_trigger(store, mock_chat_model, llm_provider):
    mock_chat_model.ainvoke.return_value = ai_message(fenced(report_payload()))
    generator = ReportGenerator(llm_provider)
    trigger = ReportTrigger(store, ContextCollector(store), lambda: generator)
    return create_app(store=store, trigger=trigger, review_agent_factory=lambda: ReviewAgent(llm_provider))


class TestHealth:
    """Tests for the health endpoint."""

    def test_health(self, store):
        """Test that the health check responds."""
        client = TestClient(create_app(store=store, trigger=MagicMock(spec=ReportTrigger)))
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestReportEndpoints:
    """Tests for report endpoints."""

    def test_completed_is_fire_and_forget(self, store):
        """Test that the completion hook schedules the trigger and returns 202."""
        trigger = MagicMock(spec=ReportTrigger)
        client = TestClient(create_app(store=store, trigger=trigger))

        response = client.post("/api/reviews/rev-1/completed")

        assert response.status_code == 202
        assert response.json() == {"status": "accepted", "review_id": "rev-1"}
        trigger.trigger_in_background.assert_called_once_with("rev-1")
        trigger.on_review_completed.assert_not_called()

    def test_create_and_fetch_report(self, app_with_trigger, approved_review):
        """Test synchronous creation followed by a read."""
        client = TestClient(app_with_trigger)

        created = client.post(f"/api/reviews/{approved_review.id}/report")
        fetched = client.get(f"/api/reports/{approved_review.id}")

        assert created.status_code == 200
        assert created.json()["success"] is True
        assert fetched.status_code == 200
        assert fetched.json()["id"] == created.json()["report_id"]
        assert fetched.json()["recommendation"] == "MERGE"

    def test_create_report_not_completed(self, store):
        """Test that trigger failures are returned in the body."""
        trigger = MagicMock(spec=ReportTrigger)
        trigger.on_review_completed = AsyncMock(
            return_value=TriggerOutcome(success=False, error="Review not completed")
        )
        client = TestClient(create_app(store=store, trigger=trigger))

        response = client.post("/api/reviews/r/report")

        assert response.json() == {"success": False, "report_id": None, "error": "Review not completed"}

    def test_regenerate_with_context(self, store):
        """Test that regeneration forwards additional context."""
        trigger = MagicMock(spec=ReportTrigger)
        trigger.regenerate = AsyncMock(return_value=TriggerOutcome(success=True, report_id="rep"))
        client = TestClient(create_app(store=store, trigger=trigger))

        response = client.post("/api/reviews/r/report/regenerate", json={"additional_context": "focus"})

        assert response.json()["report_id"] == "rep"
        trigger.regenerate.assert_awaited_once_with("r", "focus")

    def test_missing_report_is_404(self, store):
        """Test reading a report that does not exist."""
        client = TestClient(create_app(store=store, trigger=MagicMock(spec=ReportTrigger)))
        assert client.get("/api/reports/nope").status_code == 404


class TestReviewFilesEndpoint:
    """Tests for the multi-file review endpoint."""

    def test_review_files(self, app_with_trigger, mock_chat_model):
        """Test a successful aggregated review."""
        mock_chat_model.ainvoke.return_value = ai_message(fenced(review_payload(score=6)))
        client = TestClient(app_with_trigger)

        response = client.post(
            "/api/review-files",
            json={"files": [{"path": "a.py", "diff": "+a"}, {"path": "b.py", "diff": "+b"}]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["aggregate_score"] == 6
        assert [r["file_path"] for r in body["results"]] == ["a.py", "b.py"]

    def test_review_files_failure_is_502(self, store):
        """Test that an aggregate failure maps to 502 with its code."""
        agent = MagicMock()
        agent.review_files = AsyncMock(return_value=AgentResult.fail("File review failed: a.py: boom", "API_ERROR"))
        client = TestClient(create_app(store=store, trigger=MagicMock(spec=ReportTrigger), review_agent_factory=lambda: agent))

        response = client.post("/api/review-files", json={"files": [{"path": "a.py", "diff": "+a"}]})

        assert response.status_code == 502
        assert response.json()["detail"]["code"] == "API_ERROR"

    def test_review_files_empty_is_400(self, app_with_trigger):
        """Test that an empty file list is a client error."""
        response = TestClient(app_with_trigger).post("/api/review-files", json={"files": []})
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "NO_FILES"

    def test_review_files_misconfigured_is_503(self, store):
        """Test that a provider configuration error maps to 503."""

        def factory():
            raise ConfigError("API key not found for provider: openai")

        client = TestClient(create_app(store=store, trigger=MagicMock(spec=ReportTrigger), review_agent_factory=factory))
        response = client.post("/api/review-files", json={"files": [{"path": "a.py", "diff": "+a"}]})
        assert response.status_code == 503
