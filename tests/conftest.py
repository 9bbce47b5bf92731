"""Pytest fixtures for revreport tests."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage

from revreport.llm.factory import openai_config
from revreport.llm.provider import LLMProvider
from revreport.store.memory import InMemoryReviewStore
from revreport.store.models import Comment, Review


BASE_TIME = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def ai_message(content: str, prompt_tokens: int = 100, completion_tokens: int = 50) -> AIMessage:
    """Build a LangChain AI message as returned by a chat model."""
    return AIMessage(
        content=content,
        usage_metadata={
            "input_tokens": prompt_tokens,
            "output_tokens": completion_tokens,
            "total_tokens": prompt_tokens + completion_tokens,
        },
    )


def fenced(data: dict) -> str:
    """Wrap a JSON object in prose and a markdown fence, like a model would."""
    return f"Here is my analysis:\n\n```json\n{json.dumps(data)}\n```\n\nLet me know if you need more."


def review_payload(score=8, **overrides) -> dict:
    payload = {
        "summary": "Looks reasonable",
        "comments": [
            {
                "line": 3,
                "severity": "warning",
                "category": "correctness",
                "comment": "Possible off-by-one",
                "suggestion": "Use <= instead of <",
            }
        ],
        "approval": "comment",
        "overallScore": score,
    }
    payload.update(overrides)
    return payload


def report_payload(**overrides) -> dict:
    payload = {
        "summary": "Solid change with minor issues",
        "overallAnalysis": "Most comments were addressed.",
        "score": 82,
        "maxScore": 100,
        "recommendation": "MERGE",
        "recommendationReason": "All critical issues resolved",
        "acceptanceSuggestion": "Merge after CI passes",
        "keyFindings": ["Two of three comments resolved"],
        "concerns": ["One open comment on src/a.ts"],
        "positives": ["Small, focused diff"],
        "suggestions": ["Add a regression test"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def mock_chat_model():
    """Mock LangChain chat model with an async ``ainvoke``."""
    model = MagicMock()
    model.ainvoke = AsyncMock(return_value=ai_message(fenced(review_payload())))
    return model


@pytest.fixture
def llm_provider(mock_chat_model):
    """Adapter backed by the mock chat model."""
    return LLMProvider(openai_config("test-key", model="test-model"), chat_model=mock_chat_model)


@pytest.fixture
def store():
    """Empty in-memory review store."""
    return InMemoryReviewStore()


@pytest.fixture
def approved_review(store):
    """An approved review with three comments on src/a.ts, two resolved."""
    review = store.add_review(
        Review(
            id="rev-1",
            title="Add parser",
            status="APPROVED",
            description="Adds the expression parser",
            source_type="github",
            source_url="https://github.com/acme/widgets/pull/42",
            author_id="user-1",
            author_name="Dana",
            created_at=BASE_TIME,
            updated_at=BASE_TIME,
        )
    )
    for index, resolved in enumerate([True, True, False]):
        store.add_comment(
            Comment(
                id=f"c-{index}",
                review_id=review.id,
                content=f"Comment {index}",
                author_id=f"user-{index + 2}",
                author_name=f"Reviewer {index}",
                is_resolved=resolved,
                file_path="src/a.ts",
                line_start=10 + index,
                created_at=BASE_TIME + timedelta(minutes=index),
                updated_at=BASE_TIME + timedelta(minutes=index),
            )
        )
    return review
