"""Data models for GitHub pull request diffs."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PRParams:
    """Identifies a pull request."""

    owner: str
    repo: str
    pull_number: int

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class PRFile:
    """A file changed in a pull request."""

    filename: str
    status: str = "modified"  # added, removed, modified, renamed, copied, changed, unchanged
    additions: int = 0
    deletions: int = 0
    changes: int = 0
    patch: str | None = None
    previous_filename: str | None = None


@dataclass(frozen=True)
class PRDiffInfo:
    """Changed files of a pull request plus line totals."""

    owner: str
    repo: str
    pull_number: int
    files: tuple[PRFile, ...] = field(default_factory=tuple)
    total_additions: int = 0
    total_deletions: int = 0
    total_changes: int = 0

    @classmethod
    def from_files(cls, params: PRParams, files: list[PRFile]) -> "PRDiffInfo":
        return cls(
            owner=params.owner,
            repo=params.repo,
            pull_number=params.pull_number,
            files=tuple(files),
            total_additions=sum(f.additions for f in files),
            total_deletions=sum(f.deletions for f in files),
            total_changes=sum(f.changes for f in files),
        )
