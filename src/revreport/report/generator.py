"""Report Generator: turns a ReportContext into a validated TestReportResult."""

import time

from revreport.agents.base import AgentResult, BaseAgent, error_code
from revreport.agents.review_agent import ReviewAgent
from revreport.llm.factory import get_provider
from revreport.llm.messages import ChatMessage
from revreport.llm.parsing import parse_result
from revreport.llm.schemas import TestReportResult
from revreport.report.models import ReportContext
from revreport.report.prompts import SYSTEM_PROMPT_TEST_REPORT, render_report_prompt
from revreport.server.config import Settings, get_settings


class ReportGenerator(BaseAgent):
    """Agent that generates the final test report for a completed review."""

    async def generate(
        self,
        context: ReportContext,
        additional_context: str | None = None,
    ) -> AgentResult[TestReportResult]:
        """Generate a test report.

        Args:
            context: Snapshot produced by the ContextCollector
            additional_context: Extra instructions appended to the prompt

        Returns:
            AgentResult wrapping the TestReportResult. Failure codes are
            ``INVALID_CONTEXT`` (no execution, no model call made),
            ``TIMEOUT``, ``PARSE_ERROR``, ``NETWORK_ERROR`` and ``API_ERROR``.
        """
        if context.execution is None:
            message = "Execution data is required for generating a test report"
            self._log_error(message)
            return AgentResult.fail(message, "INVALID_CONTEXT")

        review_id = context.execution.id
        started = time.monotonic()
        self._log_info(
            f"Starting test report generation for review {review_id} "
            f"(diff={'yes' if context.pr_diff else 'no'})"
        )

        try:
            messages = [
                ChatMessage(role="system", content=SYSTEM_PROMPT_TEST_REPORT),
                ChatMessage(
                    role="user",
                    content=render_report_prompt(context, additional_context),
                ),
            ]
            response = await self.llm.send(messages)
            result = parse_result(response.content, TestReportResult)
        except Exception as e:
            code = error_code(e)
            if code is None:
                self.logger.exception(f"Test report generation failed for review {review_id}")
            else:
                self._log_error(
                    f"Test report generation failed for review {review_id} [{code}]: {e}"
                )
            return AgentResult.fail(str(e) or e.__class__.__name__, code)

        duration_ms = int((time.monotonic() - started) * 1000)
        self._log_info(
            f"Test report generated for review {review_id}: "
            f"score={result.score}/{result.max_score}, "
            f"recommendation={result.recommendation.value}, {duration_ms}ms"
        )
        return AgentResult.ok(result)


def create_report_generator(settings: Settings | None = None) -> ReportGenerator:
    """Create a ReportGenerator from environment settings.

    Report calls use ``REPORT_MAX_TOKENS`` and ``REPORT_TIMEOUT``.

    Raises:
        ConfigError: If provider configuration is invalid or missing
    """
    settings = settings or get_settings()
    provider = get_provider(
        settings,
        max_tokens=settings.report_max_tokens,
        timeout_ms=settings.report_timeout,
    )
    return ReportGenerator(provider)


def create_review_agent(settings: Settings | None = None) -> ReviewAgent:
    """Create a ReviewAgent from environment settings.

    Raises:
        ConfigError: If provider configuration is invalid or missing
    """
    settings = settings or get_settings()
    return ReviewAgent(get_provider(settings), max_concurrency=settings.review_concurrency)
