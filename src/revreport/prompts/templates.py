"""Prompt templates for code review calls."""

from pathlib import PurePosixPath


# =============================================================================
# SYSTEM PROMPTS
# =============================================================================

SYSTEM_PROMPT_BASE = """You are an expert code reviewer with deep knowledge of software engineering best practices, security, and code quality. Your role is to provide constructive, actionable feedback on code changes.

Guidelines for your reviews:
- Be specific and reference exact line numbers when possible
- Prioritize issues by severity (critical > warning > suggestion > info)
- Explain WHY something is an issue, not just WHAT the issue is
- Provide concrete suggestions for improvement when possible
- Be respectful and constructive in your feedback
- Focus on significant issues rather than nitpicking style preferences
- Consider the context and intent of the changes"""

SYSTEM_PROMPT_SECURITY = """You are a security-focused code reviewer specializing in identifying vulnerabilities and security issues. Your expertise includes:

- OWASP Top 10 vulnerabilities
- Injection attacks (SQL, Command, XSS, etc.)
- Authentication and authorization flaws
- Sensitive data exposure
- Security misconfigurations
- Cryptographic weaknesses
- Input validation issues

Guidelines:
- Identify potential security vulnerabilities with specific CVE references when applicable
- Assess the severity and potential impact of each issue
- Provide remediation steps for identified vulnerabilities
- Consider the attack surface and threat model
- Flag any hardcoded secrets or credentials"""

SYSTEM_PROMPT_PERFORMANCE = """You are a performance-focused code reviewer specializing in identifying performance issues and optimization opportunities. Your expertise includes:

- Algorithm complexity analysis (time and space)
- Memory management and leak prevention
- Database query optimization
- Caching strategies
- Asynchronous programming patterns
- Resource utilization

Guidelines:
- Identify performance bottlenecks and their impact
- Suggest concrete optimizations with expected improvements
- Consider trade-offs between readability and performance
- Flag N+1 queries, unnecessary iterations, and memory issues
- Recommend appropriate data structures and algorithms"""


# =============================================================================
# OUTPUT FORMATS
# =============================================================================

REVIEW_OUTPUT_FORMAT = """## Review Instructions:
Please analyze the code changes and provide feedback in the following JSON format:

```json
{
  "summary": "Brief summary of the changes and overall assessment",
  "comments": [
    {
      "line": <line_number>,
      "severity": "critical|warning|suggestion|info",
      "category": "security|performance|maintainability|correctness|style",
      "comment": "Description of the issue or suggestion",
      "suggestion": "Optional: Suggested fix or improvement"
    }
  ],
  "approval": "approve|request_changes|comment",
  "overallScore": <0-10>
}
```

Focus on:
1. Correctness and potential bugs
2. Security vulnerabilities
3. Performance issues
4. Code maintainability and readability
5. Best practices and patterns"""

SECURITY_OUTPUT_FORMAT = """## Security Review Checklist:
- [ ] Input validation and sanitization
- [ ] Authentication and authorization
- [ ] SQL/NoSQL injection vulnerabilities
- [ ] Cross-site scripting (XSS)
- [ ] Command injection
- [ ] Path traversal
- [ ] Sensitive data exposure
- [ ] Insecure cryptography
- [ ] Hardcoded secrets or credentials
- [ ] Insecure dependencies

Provide your security assessment in the following JSON format:

```json
{
  "vulnerabilities": [
    {
      "line": <line_number>,
      "severity": "critical|high|medium|low",
      "type": "OWASP category or vulnerability type",
      "description": "Detailed description of the vulnerability",
      "impact": "Potential impact if exploited",
      "remediation": "Steps to fix the vulnerability",
      "references": ["Optional: CVE or reference links"]
    }
  ],
  "securityScore": <0-10>,
  "summary": "Overall security assessment"
}
```"""

PR_SUMMARY_OUTPUT_FORMAT = """Provide an overall PR review in JSON format:

```json
{
  "summary": "High-level summary of what this PR does",
  "keyChanges": ["List of key changes"],
  "concerns": ["List of concerns or issues"],
  "suggestions": ["List of improvement suggestions"],
  "testingRecommendations": ["What should be tested"],
  "approval": "approve|request_changes|comment",
  "overallScore": <0-10>
}
```"""


LANGUAGE_BY_EXTENSION = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".py": "python",
    ".rb": "ruby",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".kt": "kotlin",
    ".swift": "swift",
    ".cs": "csharp",
    ".cpp": "cpp",
    ".c": "c",
    ".php": "php",
    ".vue": "vue",
    ".svelte": "svelte",
    ".sql": "sql",
    ".sh": "bash",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
    ".md": "markdown",
    ".html": "html",
    ".css": "css",
    ".scss": "scss",
}


# =============================================================================
# HELPERS
# =============================================================================

def truncate_diff(diff: str, max_length: int = 10_000) -> str:
    """Truncate a diff at the last full line before ``max_length``.

    Args:
        diff: The diff content
        max_length: Maximum number of characters to keep

    Returns:
        The diff, with a truncation marker appended if it was cut
    """
    if len(diff) <= max_length:
        return diff

    truncated = diff[:max_length]
    last_newline = truncated.rfind("\n")
    if last_newline == -1:
        last_newline = max_length

    omitted = len(diff) - last_newline
    return f"{truncated[:last_newline]}\n\n... [truncated - {omitted} characters omitted]"


def detect_language(file_path: str) -> str | None:
    """Guess the programming language of a file from its extension."""
    return LANGUAGE_BY_EXTENSION.get(PurePosixPath(file_path).suffix.lower())


# =============================================================================
# PROMPT BUILDERS
# =============================================================================

def format_review_prompt(
    diff: str,
    file_path: str | None = None,
    language: str | None = None,
    pr_title: str | None = None,
    pr_description: str | None = None,
    additional_context: str | None = None,
) -> str:
    """Build the user prompt for a comprehensive review of one diff."""
    prompt = "Please review the following code changes and provide detailed feedback.\n\n"

    if pr_title:
        prompt += f"## Pull Request: {pr_title}\n\n"
    if pr_description:
        prompt += f"## Description:\n{pr_description}\n\n"
    if file_path:
        prompt += f"## File: {file_path}\n"
    if language:
        prompt += f"## Language: {language}\n"

    prompt += f"\n## Changes:\n```diff\n{diff}\n```\n\n"

    if additional_context:
        prompt += f"## Additional Context:\n{additional_context}\n\n"

    return prompt + REVIEW_OUTPUT_FORMAT


def format_security_review_prompt(
    diff: str,
    file_path: str | None = None,
    language: str | None = None,
) -> str:
    """Build the user prompt for a security review of one diff."""
    prompt = "Perform a security-focused review of the following code changes.\n\n"

    if file_path:
        prompt += f"## File: {file_path}\n"
    if language:
        prompt += f"## Language: {language}\n"

    prompt += f"\n## Changes:\n```diff\n{diff}\n```\n\n"
    return prompt + SECURITY_OUTPUT_FORMAT


def format_pr_summary_prompt(
    files: list[tuple[str, str]],
    pr_title: str,
    pr_description: str | None = None,
) -> str:
    """Build the user prompt for a single-call review of a whole PR.

    Args:
        files: (path, diff) pairs
        pr_title: Pull request title
        pr_description: Pull request description
    """
    prompt = "Review the following pull request and provide an overall assessment.\n\n"
    prompt += f"## Pull Request: {pr_title}\n\n"

    if pr_description:
        prompt += f"## Description:\n{pr_description}\n\n"

    prompt += f"## Changed Files ({len(files)}):\n\n"
    for path, diff in files:
        prompt += f"### {path}\n```diff\n{diff}\n```\n\n"

    return prompt + PR_SUMMARY_OUTPUT_FORMAT
