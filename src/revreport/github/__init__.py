"""GitHub integration module for revreport."""

from revreport.github.client import GitHubClient, GitHubClientError
from revreport.github.models import PRDiffInfo, PRFile, PRParams

__all__ = [
    "GitHubClient",
    "GitHubClientError",
    "PRDiffInfo",
    "PRFile",
    "PRParams",
]
