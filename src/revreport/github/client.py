"""GitHub client wrapping PyGithub for pull request diffs."""

import logging
import os
import re

from github import Auth, Github, GithubException

from revreport.github.models import PRDiffInfo, PRFile, PRParams


logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"

PR_URL_PATTERN = re.compile(
    r"^https?://(?:www\.)?github\.com/([^/]+)/([^/]+)/pull/(\d+)(?:/.*)?$",
    re.IGNORECASE,
)


class GitHubClientError(Exception):
    """Raised when GitHub operations fail."""


class GitHubClient:
    """Read-only pull request client used as the diff source for reports."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
    ):
        self.token = token or os.getenv("GITHUB_TOKEN")
        if not self.token:
            raise GitHubClientError(
                "GitHub token not found. Set GITHUB_TOKEN environment variable."
            )

        self.base_url = base_url or os.getenv("GITHUB_API_URL") or DEFAULT_API_URL
        self._github = Github(auth=Auth.Token(self.token), base_url=self.base_url)

    # ------------------------------------------------------------------
    # Pull Requests
    # ------------------------------------------------------------------

    def get_diff(self, params: PRParams) -> PRDiffInfo:
        """Get the changed files of a pull request.

        Blocking; async callers run it in a worker thread.

        Args:
            params: Owner, repository and PR number

        Returns:
            PRDiffInfo with per-file stats and totals
        """
        try:
            repo = self._github.get_repo(params.full_name)
            pr = repo.get_pull(number=params.pull_number)
            files = [
                PRFile(
                    filename=f.filename,
                    status=f.status,
                    additions=f.additions,
                    deletions=f.deletions,
                    changes=f.changes,
                    patch=f.patch,
                    previous_filename=f.previous_filename,
                )
                for f in pr.get_files()
            ]
        except GithubException as e:
            raise GitHubClientError(
                f"Failed to get diff for {params.full_name}#{params.pull_number}: {e}"
            ) from e

        logger.debug(
            f"Fetched {len(files)} files for {params.full_name}#{params.pull_number}"
        )
        return PRDiffInfo.from_files(params, files)

    # ------------------------------------------------------------------
    # Utils
    # ------------------------------------------------------------------

    @staticmethod
    def parse_pr_url(url: str | None) -> PRParams | None:
        """Parse ``https://github.com/<owner>/<repo>/pull/<n>`` into PRParams.

        Returns None for anything that is not a GitHub pull request URL.
        """
        if not url:
            return None
        match = PR_URL_PATTERN.match(url.strip())
        if not match:
            return None
        pull_number = int(match.group(3))
        if pull_number <= 0:
            return None
        return PRParams(owner=match.group(1), repo=match.group(2), pull_number=pull_number)
