"""Prompt rendering for test report generation."""

from datetime import datetime

from revreport.prompts.templates import truncate_diff
from revreport.report.models import ReportContext


SYSTEM_PROMPT_TEST_REPORT = """You are an expert software quality analyst specializing in code review assessment and test report generation. Your role is to analyze review data, code changes, and conversation history to generate comprehensive test reports with objective scoring and actionable recommendations.

## Scoring Criteria (0-100 points)

### Code Quality (0-30 points)
- **Correctness** (0-10): Does the code work as intended? Are there logical errors or bugs?
- **Completeness** (0-10): Does the implementation cover all requirements? Are edge cases handled?
- **Code Style** (0-5): Is the code readable and well-formatted? Follows project conventions?
- **Complexity** (0-5): Is the solution appropriately complex?

### Review Quality (0-25 points)
- **Comment Thoroughness** (0-10): Are reviews detailed and actionable?
- **Issue Identification** (0-10): Are issues correctly identified with proper severity levels?
- **Resolution Rate** (0-5): What percentage of identified issues are resolved?

### Process Quality (0-25 points)
- **Communication** (0-10): Is the review process well-documented?
- **Collaboration** (0-10): Are reviewers and authors working effectively together?
- **Timeliness** (0-5): Is the review process completed in a reasonable time?

### Security & Risk (0-20 points)
- **Security Concerns** (0-10): Are security vulnerabilities identified and addressed?
- **Technical Debt** (0-5): Does the change introduce unnecessary technical debt?
- **Risk Assessment** (0-5): What is the overall risk level of the changes?

## Acceptance Suggestion Standards

- MERGE: score >= 70, critical and security issues resolved, comments addressed.
- NEEDS_CHANGES: score 40-69, non-critical issues remain, missing tests or docs.
- REJECT: score < 40, critical bugs or vulnerabilities, fundamental design flaws.

## Output Format

Respond with a single JSON object:

```json
{
  "summary": "Brief overview of the test report",
  "overallAnalysis": "Comprehensive analysis of the review process and code changes",
  "score": <number 0-100>,
  "maxScore": 100,
  "recommendation": "MERGE|NEEDS_CHANGES|REJECT",
  "recommendationReason": "Detailed explanation for the recommendation",
  "acceptanceSuggestion": "Specific actionable suggestion for the reviewer",
  "keyFindings": ["List of key findings from the review"],
  "concerns": ["List of concerns or issues found"],
  "positives": ["List of positive aspects observed"],
  "suggestions": ["List of improvement suggestions"]
}
```

Be objective and evidence-based, reference specific data points (comment counts, issue types), and balance positive reinforcement with constructive criticism."""

COMMENT_PREVIEW_LENGTH = 200

NA = "N/A"


def _value(value) -> str:
    if value is None or value == "":
        return NA
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _bullets(fields: list[tuple[str, object]]) -> str:
    return "".join(f"- **{label}**: {_value(value)}\n" for label, value in fields)


def _preview(content: str) -> str:
    if len(content) <= COMMENT_PREVIEW_LENGTH:
        return content
    return content[:COMMENT_PREVIEW_LENGTH] + "..."


def render_report_prompt(
    context: ReportContext,
    additional_context: str | None = None,
) -> str:
    """Render a ReportContext into the user prompt.

    Output depends only on the arguments. Every section is always present;
    absent values and sections render as ``N/A``.
    """
    prompt = (
        "# AI Test Report Generation Request\n\n"
        "Please analyze the following review data and generate a comprehensive "
        "test report with scoring and recommendations.\n\n"
        f"## Analysis Date\n{_value(context.collected_at)}\n\n"
    )

    execution = context.execution
    prompt += "## Execution Information\n"
    if execution is None:
        prompt += f"{NA}\n\n"
    else:
        prompt += _bullets(
            [
                ("ID", execution.id),
                ("Title", execution.title),
                ("Description", execution.description),
                ("Status", execution.status),
                ("Source Type", execution.source_type),
                ("Source ID", execution.source_id),
                ("Source URL", execution.source_url),
                ("Author ID", execution.author_id),
                ("Author", execution.author_name),
                ("Created At", execution.created_at),
                ("Updated At", execution.updated_at),
            ]
        ) + "\n"

    plan = context.plan
    prompt += "## Plan Information\n"
    if plan is None:
        prompt += f"{NA}\n\n"
    else:
        prompt += _bullets(
            [
                ("Repository", plan.repository_name),
                ("Repository URL", plan.repository_url),
                ("Branch", plan.branch_name),
                ("Commit", plan.commit_sha[:7] if plan.commit_sha else None),
                ("Pull Request", plan.pull_request_id),
                ("PR URL", plan.pull_request_url),
            ]
        ) + "\n"

    prompt += "## Task Statistics\n" + _bullets(
        [
            ("Total Tasks", len(context.tasks)),
            ("Completed", context.count_tasks("completed")),
            ("In Progress", context.count_tasks("in_progress")),
            ("Pending", context.count_tasks("pending")),
            ("Failed", context.count_tasks("failed")),
            ("Skipped", context.count_tasks("skipped")),
        ]
    ) + "\n"

    prompt += "### Task Details\n"
    if not context.tasks:
        prompt += f"{NA}\n"
    for index, task in enumerate(context.tasks, start=1):
        prompt += (
            f"{index}. **{task.title}**\n"
            f"   - ID: {task.task_id}\n"
            f"   - Status: {task.status}\n"
            f"   - Assignee: {task.assignee_name or 'Unassigned'}\n"
            f"   - Assignee ID: {_value(task.assignee_id)}\n"
            f"   - Created At: {_value(task.created_at)}\n"
            f"   - Completed At: {_value(task.completed_at)}\n"
            f"   - Failed At: {_value(task.failed_at)}\n"
        )
    prompt += "\n"

    conversation = context.conversation
    prompt += "## Conversation Summary\n" + _bullets(
        [
            ("Total Comments", conversation.total_comments),
            ("Resolved Comments", conversation.resolved_comments),
            ("Unresolved Comments", conversation.unresolved_comments),
        ]
    ) + "\n"

    prompt += "### Comments\n"
    if not conversation.comments:
        prompt += f"{NA}\n"
    for index, comment in enumerate(conversation.comments, start=1):
        prompt += (
            f"{index}. **{comment.author_name or 'Anonymous'}** at {_value(comment.created_at)}\n"
            f"   - ID: {comment.id}\n"
            f"   - File: {_value(comment.file_path)}\n"
            f"   - Line: {_value(comment.line_start)}\n"
            f"   - Severity: {_value(comment.severity)}\n"
            f"   - Resolved: {'Yes' if comment.is_resolved else 'No'}\n"
            f"   - Content: {_preview(comment.content)}\n"
        )
    prompt += "\n"

    diff = context.pr_diff
    prompt += "## Pull Request Information\n"
    if diff is None:
        prompt += f"{NA}\n\n"
    else:
        prompt += _bullets(
            [
                ("Owner", diff.owner),
                ("Repository", diff.repo),
                ("Pull Request #", diff.pull_number),
                ("Total Additions", f"+{diff.total_additions}"),
                ("Total Deletions", f"-{diff.total_deletions}"),
                ("Total Changes", diff.total_changes),
                ("Files Changed", len(diff.files)),
            ]
        ) + "\n### Files Changed\n"
        if not diff.files:
            prompt += f"{NA}\n"
        for index, file in enumerate(diff.files, start=1):
            prompt += (
                f"{index}. **{file.filename}**\n"
                f"   - Status: {file.status}\n"
                f"   - Additions: +{file.additions}\n"
                f"   - Deletions: -{file.deletions}\n"
                f"   - Changes: {file.changes}\n"
                f"   - Previous Name: {_value(file.previous_filename)}\n"
                f"   - Patch:\n```diff\n{truncate_diff(file.patch) if file.patch else NA}\n```\n"
            )
        prompt += "\n"

    prompt += f"## Additional Context\n{additional_context or NA}\n\n"

    prompt += (
        "## Analysis Instructions\n\n"
        "Based on the data provided above, please generate a comprehensive test report with:\n\n"
        "1. An overall score (0-100) based on the criteria in your system prompt\n"
        "2. A clear recommendation (MERGE, NEEDS_CHANGES, or REJECT)\n"
        "3. Detailed analysis of the review process\n"
        "4. Key findings, concerns, and positives\n"
        "5. Actionable suggestions for improvement\n\n"
        "Please ensure your JSON response is valid and complete."
    )
    return prompt
