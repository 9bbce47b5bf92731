"""Extraction and validation of JSON results from free-form model output."""

import json
import re
from typing import Any, TypeVar

from pydantic import ValidationError

from revreport.llm.errors import ExtractionError, ParseError, ResponseValidationError
from revreport.llm.schemas import (
    PRReviewResult,
    ResultModel,
    ReviewResult,
    SecurityReviewResult,
    TestReportResult,
)


T = TypeVar("T", bound=ResultModel)

# Opening fence only; a fenced object ends where its braces balance.
FENCE_OPEN_PATTERN = re.compile(r"```[a-zA-Z0-9_-]*[ \t]*\n?")


def _object_end(text: str, start: int) -> int | None:
    """Index just past the object opening at ``start``, honouring JSON strings."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    return None


def _balanced_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` in text."""
    start = text.find("{")
    while start != -1:
        end = _object_end(text, start)
        if end is not None:
            return text[start:end]
        start = text.find("{", start + 1)
    return None


def extract_json(raw: str) -> str:
    """Locate the JSON object in a model response.

    An object opening right after a code fence is preferred; otherwise the
    whole text is scanned for the outermost balanced object.

    Raises:
        ExtractionError: If no balanced object exists
    """
    for match in FENCE_OPEN_PATTERN.finditer(raw):
        start = match.end()
        while start < len(raw) and raw[start].isspace():
            start += 1
        if raw.startswith("{", start):
            end = _object_end(raw, start)
            if end is not None:
                return raw[start:end]

    candidate = _balanced_object(raw)
    if candidate is None:
        preview = raw[:200].replace("\n", " ")
        raise ExtractionError(f"No JSON object found in AI response: {preview}")
    return candidate.strip()


def parse_safe(raw: str) -> Any:
    """Extract and decode the JSON object in a model response.

    Raises:
        ExtractionError: If no object can be located
        ParseError: If the located text is not valid JSON
    """
    text = extract_json(raw)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(
            f"Failed to parse AI response as JSON ({e.msg}): {text[:200]}..."
        ) from e


def _format_location(loc: tuple) -> str:
    parts: list[str] = []
    for item in loc:
        if isinstance(item, int):
            parts.append(f"[{item}]")
        else:
            parts.append(f".{item}" if parts else str(item))
    return "".join(parts) or "<root>"


def validate(schema: type[T], data: Any) -> T:
    """Validate decoded JSON against a result schema.

    Raises:
        ResponseValidationError: With one line per offending field
    """
    if not isinstance(data, dict):
        raise ResponseValidationError(
            f"Invalid response: expected an object, got {type(data).__name__}"
        )
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        fields: list[str] = []
        problems: list[str] = []
        for error in e.errors():
            location = _format_location(error["loc"])
            fields.append(location)
            problems.append(f'missing or invalid "{location}" field: {error["msg"]}')
        raise ResponseValidationError(
            f"Invalid {schema.__name__} response: " + "; ".join(problems),
            fields=fields,
        ) from None


def validate_review_result(data: Any) -> ReviewResult:
    return validate(ReviewResult, data)


def validate_security_review_result(data: Any) -> SecurityReviewResult:
    return validate(SecurityReviewResult, data)


def validate_pr_review_result(data: Any) -> PRReviewResult:
    return validate(PRReviewResult, data)


def validate_test_report_result(data: Any) -> TestReportResult:
    return validate(TestReportResult, data)


def parse_result(raw: str, schema: type[T]) -> T:
    """Extract, decode and validate a model response in one step."""
    return validate(schema, parse_safe(raw))
