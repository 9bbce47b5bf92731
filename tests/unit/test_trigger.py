"""Unit tests for the completion trigger."""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from conftest import ai_message, fenced, report_payload
from revreport.agents.base import AgentResult
from revreport.llm.errors import ConfigError
from revreport.llm.schemas import Recommendation
from revreport.report.collector import ContextCollector
from revreport.report.generator import ReportGenerator
from revreport.report.trigger import ReportTrigger, map_status_to_recommendation
from revreport.store.base import DuplicateReportError
from revreport.store.models import Review


@pytest.fixture
def generator(mock_chat_model, llm_provider):
    """Real generator over the mock chat model, answering with a valid report."""
    mock_chat_model.ainvoke.return_value = ai_message(fenced(report_payload()))
    return ReportGenerator(llm_provider)


@pytest.fixture
def trigger(store, generator):
    return ReportTrigger(store, ContextCollector(store), lambda: generator)


class TestStatusMapping:
    """Tests for status to recommendation mapping."""

    @pytest.mark.parametrize(
        "status, expected",
        [
            ("APPROVED", Recommendation.MERGE),
            ("REJECTED", Recommendation.REJECT),
            ("CHANGES_REQUESTED", Recommendation.NEEDS_CHANGES),
            ("CLOSED", Recommendation.NEEDS_CHANGES),
            ("SOMETHING_ELSE", Recommendation.NEEDS_CHANGES),
        ],
    )
    def test_mapping(self, status, expected):
        """Test the fixed mapping and its fallback."""
        assert map_status_to_recommendation(status) is expected


class TestOnReviewCompleted:
    """Tests for ReportTrigger.on_review_completed."""

    @pytest.mark.asyncio
    async def test_approved_review_creates_merge_report(self, trigger, store, approved_review, mock_chat_model):
        """Test that an approved review yields one generation and a MERGE report."""
        outcome = await trigger.on_review_completed(approved_review.id)

        assert outcome.success
        assert mock_chat_model.ainvoke.call_count == 1
        report = await store.get_report_by_execution(approved_review.id)
        assert report.id == outcome.report_id
        assert report.recommendation == "MERGE"
        assert report.ai_generated
        assert report.score == 82
        assert report.title == "Add parser - Test Report"
        assert report.repository_name == "acme/widgets"
        assert report.pull_request_id == "42"
        assert (report.total_tasks, report.completed_tasks) == (1, 0)
        assert report.author_name == "Dana"

    @pytest.mark.asyncio
    async def test_recommendation_follows_status_not_model(self, trigger, store, mock_chat_model):
        """Test that a rejected review is REJECT even if the model says MERGE."""
        store.add_review(Review(id="r2", title="Risky", status="REJECTED"))

        outcome = await trigger.on_review_completed("r2")

        report = await store.get_report_by_execution("r2")
        assert outcome.success
        assert report.recommendation == "REJECT"
        assert report.recommendation_reason == "All critical issues resolved"

    @pytest.mark.asyncio
    async def test_idempotent(self, trigger, store, approved_review, mock_chat_model):
        """Test that triggering twice yields the same report id and one report."""
        first = await trigger.on_review_completed(approved_review.id)
        second = await trigger.on_review_completed(approved_review.id)

        assert first.success and second.success
        assert first.report_id == second.report_id
        assert store.report_count() == 1
        assert mock_chat_model.ainvoke.call_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_triggers_create_one_report(self, trigger, store, approved_review, mock_chat_model):
        """Test that racing triggers for one review converge on one report."""
        outcomes = await asyncio.gather(*(trigger.on_review_completed(approved_review.id) for _ in range(5)))

        assert len({o.report_id for o in outcomes}) == 1
        assert store.report_count() == 1
        assert mock_chat_model.ainvoke.call_count == 1
        assert trigger._locks == {}

    @pytest.mark.asyncio
    async def test_review_locks_are_released(self, trigger, store):
        """Test that no per-review lock outlives its triggers."""
        for i in range(50):
            store.add_review(Review(id=f"r{i}", title=f"Review {i}", status="APPROVED"))

        await asyncio.gather(*(trigger.on_review_completed(f"r{i}") for i in range(50)))
        await trigger.regenerate("r0")

        assert store.report_count() == 50
        assert trigger._locks == {}

    @pytest.mark.asyncio
    async def test_generator_failure_degrades(self, trigger, store, approved_review, mock_chat_model, caplog):
        """Test that a failed generation still creates a context-only report."""
        mock_chat_model.ainvoke.return_value = ai_message("no json here")

        with caplog.at_level("WARNING"):
            outcome = await trigger.on_review_completed(approved_review.id)

        assert outcome.success
        report = await store.get_report_by_execution(approved_review.id)
        assert not report.ai_generated
        assert report.score is None
        assert report.overall_analysis is None
        assert report.key_findings == []
        assert report.recommendation == "MERGE"
        assert report.summary == "Collected 3 comments with 2 resolved"
        assert report.repository_name == "acme/widgets"
        assert report.total_tasks == 1
        assert approved_review.id in caplog.text

    @pytest.mark.asyncio
    async def test_generator_construction_failure_degrades(self, store, approved_review):
        """Test that a misconfigured provider degrades instead of failing."""

        def broken_factory():
            raise ConfigError("API key not found for provider: openai")

        trigger = ReportTrigger(store, ContextCollector(store), broken_factory)

        outcome = await trigger.on_review_completed(approved_review.id)

        assert outcome.success
        assert not (await store.get_report_by_execution(approved_review.id)).ai_generated

    @pytest.mark.asyncio
    async def test_review_not_found(self, trigger):
        """Test that a missing review is reported, not raised."""
        outcome = await trigger.on_review_completed("ghost")
        assert outcome.success is False
        assert outcome.error == "Review not found"

    @pytest.mark.asyncio
    async def test_review_not_completed(self, trigger, store, mock_chat_model):
        """Test that a non-terminal review is skipped."""
        store.add_review(Review(id="r3", title="WIP", status="IN_PROGRESS"))

        outcome = await trigger.on_review_completed("r3")

        assert outcome.error == "Review not completed"
        assert store.report_count() == 0
        mock_chat_model.ainvoke.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_terminal_status_hint_short_circuits(self, trigger, store, approved_review):
        """Test that a caller-supplied non-terminal status skips the lookup."""
        outcome = await trigger.on_review_completed(approved_review.id, status="PENDING")
        assert outcome.error == "Review not completed"
        assert store.report_count() == 0

    @pytest.mark.asyncio
    async def test_custom_title(self, trigger, store, approved_review):
        """Test that an explicit title overrides the default."""
        await trigger.on_review_completed(approved_review.id, title="Release gate")
        assert (await store.get_report_by_execution(approved_review.id)).title == "Release gate"

    @pytest.mark.asyncio
    async def test_duplicate_from_other_writer_resolves_to_winner(self, store, approved_review, generator):
        """Test that a unique-key conflict returns the other writer's report id."""
        winner = MagicMock(id="winner-id")
        racing_store = MagicMock(wraps=store)
        racing_store.get_review = store.get_review
        racing_store.list_comments = store.list_comments
        racing_store.get_report_by_execution = AsyncMock(side_effect=[None, winner])
        racing_store.create_report = AsyncMock(side_effect=DuplicateReportError(approved_review.id))
        trigger = ReportTrigger(racing_store, ContextCollector(racing_store), lambda: generator)

        outcome = await trigger.on_review_completed(approved_review.id)

        assert outcome.success
        assert outcome.report_id == "winner-id"

    @pytest.mark.asyncio
    async def test_store_failure_is_returned(self, store, approved_review, generator):
        """Test that an infrastructure failure becomes an unsuccessful outcome."""
        failing_store = MagicMock(wraps=store)
        failing_store.get_review = store.get_review
        failing_store.list_comments = AsyncMock(side_effect=ConnectionError("db down"))
        failing_store.get_report_by_execution = store.get_report_by_execution
        trigger = ReportTrigger(failing_store, ContextCollector(failing_store), lambda: generator)

        outcome = await trigger.on_review_completed(approved_review.id)

        assert outcome.success is False
        assert "db down" in outcome.error


class TestRegenerate:
    """Tests for ReportTrigger.regenerate."""

    @pytest.mark.asyncio
    async def test_updates_existing_report(self, trigger, store, approved_review, mock_chat_model):
        """Test that regeneration updates the report in place."""
        mock_chat_model.ainvoke.return_value = ai_message("garbage")
        first = await trigger.on_review_completed(approved_review.id)
        assert not (await store.get_report_by_execution(approved_review.id)).ai_generated

        mock_chat_model.ainvoke.return_value = ai_message(fenced(report_payload(score=64)))
        second = await trigger.regenerate(approved_review.id)

        report = await store.get_report_by_execution(approved_review.id)
        assert second.report_id == first.report_id
        assert store.report_count() == 1
        assert report.ai_generated
        assert report.score == 64

    @pytest.mark.asyncio
    async def test_creates_when_absent(self, trigger, store, approved_review):
        """Test that regeneration creates a missing report."""
        outcome = await trigger.regenerate(approved_review.id)

        assert outcome.success
        assert store.report_count() == 1

    @pytest.mark.asyncio
    async def test_passes_additional_context(self, trigger, approved_review, mock_chat_model):
        """Test that extra instructions reach the prompt."""
        await trigger.regenerate(approved_review.id, "Mention the migration")

        prompt = mock_chat_model.ainvoke.call_args.args[0][-1].content
        assert "Mention the migration" in prompt


class TestFireAndForget:
    """Tests for the background trigger."""

    @pytest.mark.asyncio
    async def test_returns_before_generation(self, store, approved_review):
        """Test that scheduling does not wait for generation."""
        release = asyncio.Event()
        generator = MagicMock()

        async def slow_generate(context, additional_context=None):
            await release.wait()
            return AgentResult.fail("late", "TIMEOUT")

        generator.generate = AsyncMock(side_effect=slow_generate)
        trigger = ReportTrigger(store, ContextCollector(store), lambda: generator)

        task = trigger.trigger_in_background(approved_review.id)
        await asyncio.sleep(0)

        assert not task.done()
        assert store.report_count() == 0

        release.set()
        await trigger.drain()
        assert store.report_count() == 1

    @pytest.mark.asyncio
    async def test_swallows_unexpected_errors(self, store, approved_review, caplog):
        """Test that a crash inside the trigger is only logged."""
        trigger = ReportTrigger(store, ContextCollector(store), lambda: None)
        trigger.on_review_completed = AsyncMock(side_effect=RuntimeError("kaboom"))

        with caplog.at_level("ERROR"):
            task = trigger.trigger_in_background(approved_review.id)
            await task

        assert task.exception() is None
        assert "kaboom" in caplog.text
