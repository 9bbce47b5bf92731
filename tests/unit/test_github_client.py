"""Unit tests for GitHub client."""

import pytest
from unittest.mock import MagicMock, patch

from github import GithubException

from revreport.github.client import GitHubClient, GitHubClientError
from revreport.github.models import PRParams


class TestGitHubClientInit:
    """Tests for GitHubClient initialization."""

    def test_init_without_token_raises_error(self):
        """Test that missing token raises error."""
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(GitHubClientError, match="GitHub token"):
                GitHubClient()

    def test_init_with_token(self):
        """Test initialization with token and default API URL."""
        with patch.dict("os.environ", {}, clear=True):
            client = GitHubClient(token="test-token")
        assert client.token == "test-token"
        assert client.base_url == "https://api.github.com"

    def test_init_from_env(self):
        """Test initialization from environment."""
        with patch.dict(
            "os.environ",
            {"GITHUB_TOKEN": "env-token", "GITHUB_API_URL": "https://ghe.example.com/api/v3"},
        ):
            client = GitHubClient()
            assert client.token == "env-token"
            assert client.base_url == "https://ghe.example.com/api/v3"


class TestGitHubClientURLParsing:
    """Tests for PR URL parsing."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/owner/repo/pull/123",
            "https://github.com/owner/repo/pull/123/",
            "https://www.github.com/owner/repo/pull/123",
            "http://github.com/owner/repo/pull/123/files",
        ],
    )
    def test_parse_pr_url(self, url):
        """Test supported PR URL shapes."""
        assert GitHubClient.parse_pr_url(url) == PRParams("owner", "repo", 123)

    @pytest.mark.parametrize(
        "url",
        [
            None,
            "",
            "https://example.com/owner/repo/pull/1",
            "https://github.com/owner/repo/issues/5",
            "https://github.com/owner/repo/pull/0",
            "not a url",
        ],
    )
    def test_parse_invalid_pr_url(self, url):
        """Test that anything else parses to None."""
        assert GitHubClient.parse_pr_url(url) is None


class TestGitHubClientDiff:
    """Tests for get_diff."""

    def _client(self) -> GitHubClient:
        client = GitHubClient(token="test-token")
        client._github = MagicMock()
        return client

    def test_get_diff_collects_files_and_totals(self):
        """Test that files and totals are collected from the PR."""
        client = self._client()
        files = [
            MagicMock(filename="a.py", status="modified", additions=3, deletions=1, changes=4, patch="@@", previous_filename=None),
            MagicMock(filename="b.py", status="added", additions=10, deletions=0, changes=10, patch=None, previous_filename=None),
        ]
        client._github.get_repo.return_value.get_pull.return_value.get_files.return_value = files

        diff = client.get_diff(PRParams("owner", "repo", 7))

        client._github.get_repo.assert_called_once_with("owner/repo")
        client._github.get_repo.return_value.get_pull.assert_called_once_with(number=7)
        assert [f.filename for f in diff.files] == ["a.py", "b.py"]
        assert diff.files[1].patch is None
        assert (diff.total_additions, diff.total_deletions, diff.total_changes) == (13, 1, 14)

    def test_get_diff_wraps_github_errors(self):
        """Test that PyGithub failures raise GitHubClientError."""
        client = self._client()
        client._github.get_repo.side_effect = GithubException(404, {"message": "Not Found"}, None)

        with pytest.raises(GitHubClientError, match="owner/repo#7"):
            client.get_diff(PRParams("owner", "repo", 7))
