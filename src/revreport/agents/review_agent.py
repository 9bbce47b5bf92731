"""Review Agent: per-diff, security, whole-PR and multi-file reviews."""

import asyncio
import time
from dataclasses import dataclass
from typing import Literal

from revreport.agents.base import AgentResult, BaseAgent, error_code
from revreport.llm.messages import ChatCompletionResult, ChatMessage
from revreport.llm.parsing import parse_result
from revreport.llm.provider import LLMProvider
from revreport.llm.schemas import (
    AggregatedReviewResult,
    PRReviewResult,
    ReviewResult,
    SecurityReviewResult,
    round_half_up,
)
from revreport.prompts.templates import (
    SYSTEM_PROMPT_BASE,
    SYSTEM_PROMPT_PERFORMANCE,
    SYSTEM_PROMPT_SECURITY,
    detect_language,
    format_pr_summary_prompt,
    format_review_prompt,
    format_security_review_prompt,
    truncate_diff,
)


ReviewType = Literal["comprehensive", "security", "performance"]

SYSTEM_PROMPTS: dict[str, str] = {
    "comprehensive": SYSTEM_PROMPT_BASE,
    "security": SYSTEM_PROMPT_SECURITY,
    "performance": SYSTEM_PROMPT_PERFORMANCE,
}


@dataclass(frozen=True)
class FileDiff:
    """A changed file submitted for review."""

    path: str
    diff: str


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class ReviewAgent(BaseAgent):
    """Agent that reviews diffs and aggregates per-file verdicts."""

    PR_FILE_DIFF_LIMIT = 5_000

    def __init__(self, llm_provider: LLMProvider, max_concurrency: int = 4):
        """Initialize the review agent.

        Args:
            llm_provider: Adapter used for every model call
            max_concurrency: Upper bound on simultaneous per-file calls
        """
        super().__init__(llm_provider)
        self.max_concurrency = max(1, max_concurrency)

    async def _call(self, system_prompt: str, user_prompt: str) -> ChatCompletionResult:
        messages = [
            ChatMessage(role="system", content=system_prompt),
            ChatMessage(role="user", content=user_prompt),
        ]
        return await self.llm.send(messages)

    def _failure(self, action: str, error: Exception) -> AgentResult:
        code = error_code(error)
        if code is None:
            self.logger.exception(f"{action} failed unexpectedly")
        else:
            self._log_warning(f"{action} failed [{code}]: {error}")
        return AgentResult.fail(str(error) or error.__class__.__name__, code)

    async def review(
        self,
        diff: str,
        file_path: str | None = None,
        pr_title: str | None = None,
        pr_description: str | None = None,
        additional_context: str | None = None,
        review_type: ReviewType = "comprehensive",
    ) -> AgentResult[ReviewResult]:
        """Review a single diff.

        Args:
            diff: Unified diff to review
            file_path: Path of the changed file
            pr_title: Pull request title
            pr_description: Pull request description
            additional_context: Extra reviewer instructions
            review_type: Selects the system prompt

        Returns:
            AgentResult wrapping the ReviewResult
        """
        started = time.monotonic()
        try:
            user_prompt = format_review_prompt(
                diff=truncate_diff(diff),
                file_path=file_path,
                language=detect_language(file_path) if file_path else None,
                pr_title=pr_title,
                pr_description=pr_description,
                additional_context=additional_context,
            )
            response = await self._call(SYSTEM_PROMPTS[review_type], user_prompt)
            result = parse_result(response.content, ReviewResult)
        except Exception as e:
            return self._failure(f"Review of {file_path or 'diff'}", e)

        comments = [
            comment.model_copy(update={"file_path": file_path})
            for comment in result.comments
        ]
        return AgentResult.ok(
            result.model_copy(
                update={
                    "comments": comments,
                    "model": self.model_name,
                    "file_path": file_path,
                    "duration_ms": _elapsed_ms(started),
                    "token_usage": response.token_usage,
                }
            )
        )

    async def security_review(
        self,
        diff: str,
        file_path: str | None = None,
    ) -> AgentResult[SecurityReviewResult]:
        """Run a security-focused review of a single diff."""
        started = time.monotonic()
        try:
            user_prompt = format_security_review_prompt(
                diff=truncate_diff(diff),
                file_path=file_path,
                language=detect_language(file_path) if file_path else None,
            )
            response = await self._call(SYSTEM_PROMPT_SECURITY, user_prompt)
            result = parse_result(response.content, SecurityReviewResult)
        except Exception as e:
            return self._failure(f"Security review of {file_path or 'diff'}", e)

        return AgentResult.ok(
            result.model_copy(
                update={"model": self.model_name, "duration_ms": _elapsed_ms(started)}
            )
        )

    async def review_pr(
        self,
        files: list[FileDiff],
        pr_title: str,
        pr_description: str | None = None,
    ) -> AgentResult[PRReviewResult]:
        """Review a whole pull request in one call."""
        started = time.monotonic()
        try:
            user_prompt = format_pr_summary_prompt(
                [(f.path, truncate_diff(f.diff, self.PR_FILE_DIFF_LIMIT)) for f in files],
                pr_title=pr_title,
                pr_description=pr_description,
            )
            response = await self._call(SYSTEM_PROMPT_BASE, user_prompt)
            result = parse_result(response.content, PRReviewResult)
        except Exception as e:
            return self._failure(f"PR review '{pr_title}'", e)

        return AgentResult.ok(
            result.model_copy(
                update={"model": self.model_name, "duration_ms": _elapsed_ms(started)}
            )
        )

    async def review_files(
        self,
        files: list[FileDiff],
        pr_title: str | None = None,
        pr_description: str | None = None,
    ) -> AgentResult[AggregatedReviewResult]:
        """Review each file separately and combine the verdicts.

        Any failed file fails the whole aggregate, since an average over a
        subset of files would be misleading. Callers retry the batch.

        Returns:
            AgentResult wrapping the per-file results (input order) and the
            mean score rounded half up
        """
        if not files:
            return AgentResult.fail("No files to review", "NO_FILES")

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def review_one(file: FileDiff) -> AgentResult[ReviewResult]:
            async with semaphore:
                return await self.review(
                    diff=file.diff,
                    file_path=file.path,
                    pr_title=pr_title,
                    pr_description=pr_description,
                )

        self._log_info(f"Reviewing {len(files)} files")
        outcomes = await asyncio.gather(*(review_one(f) for f in files))

        failures = [
            (file, outcome) for file, outcome in zip(files, outcomes) if not outcome.success
        ]
        if failures:
            details = "; ".join(f"{file.path}: {outcome.error}" for file, outcome in failures)
            self._log_error(f"{len(failures)} of {len(files)} file reviews failed: {details}")
            return AgentResult.fail(
                f"File review failed: {details}",
                failures[0][1].code or "FILE_REVIEW_FAILED",
            )

        results = [outcome.data for outcome in outcomes]
        aggregate_score = round_half_up(sum(r.score for r in results) / len(results))
        self._log_info(f"Aggregate score over {len(results)} files: {aggregate_score}")

        return AgentResult.ok(
            AggregatedReviewResult(results=results, aggregate_score=aggregate_score)
        )
