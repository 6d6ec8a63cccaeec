"""Abstract base for Git platform adapters."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from ghrelay.models import PullRequest, ReviewComment


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitPlatformAdapter(ABC):
    """Platform operations the relay performs on behalf of one installation.

    ``repo`` is always the full name (owner/repo). Issues and pull requests
    share one number space, so label and assignee calls accept either.
    """

    @abstractmethod
    def list_issue_labels(self, repo: str, issue_number: int) -> List[str]:
        """Return current label names of an issue or PR."""
        ...

    @abstractmethod
    def add_labels(self, repo: str, issue_number: int, labels: List[str]) -> None:
        """Add labels to an issue or PR (keeps existing ones)."""
        ...

    @abstractmethod
    def add_assignees(self, repo: str, issue_number: int, assignees: List[str]) -> None:
        """Add assignees to an issue or PR."""
        ...

    @abstractmethod
    def list_matching_branches(self, repo: str, prefix: str) -> List[str]:
        """Return names of branches starting with prefix."""
        ...

    @abstractmethod
    def get_branch_sha(self, repo: str, branch: str) -> str:
        """Return the commit sha the branch points to."""
        ...

    @abstractmethod
    def create_branch(self, repo: str, branch: str, sha: str) -> None:
        """Create a branch ref at sha."""
        ...

    @abstractmethod
    def update_branch(self, repo: str, branch: str, sha: str, force: bool = False) -> None:
        """Move a branch ref to sha."""
        ...

    @abstractmethod
    def create_empty_commit(self, repo: str, parent_sha: str, message: str) -> str:
        """Create a commit with the parent's tree; return its sha."""
        ...

    @abstractmethod
    def create_pr(
        self,
        repo: str,
        title: str,
        body: str,
        head: str,
        base: str,
        draft: bool = False,
    ) -> PullRequest:
        """Open a pull request."""
        ...

    @abstractmethod
    def get_pr(self, repo: str, pr_number: int) -> PullRequest:
        """Fetch PR by number."""
        ...

    @abstractmethod
    def update_pr_title(self, repo: str, pr_number: int, title: str) -> None:
        """Change a PR's title."""
        ...

    @abstractmethod
    def mark_pr_ready_for_review(self, pr: PullRequest) -> None:
        """Turn a draft PR into a ready-for-review PR."""
        ...

    @abstractmethod
    def list_review_comments(self, repo: str, pr_number: int, review_id: int) -> List[ReviewComment]:
        """List inline comments of one review, in API order."""
        ...

    @abstractmethod
    def create_issue_reaction(self, repo: str, issue_number: int, content: str) -> None:
        """React to an issue or PR description."""
        ...

    @abstractmethod
    def create_issue_comment_reaction(self, repo: str, comment_id: int, content: str) -> None:
        """React to an issue (or PR conversation) comment."""
        ...

    @abstractmethod
    def create_review_comment_reaction(self, repo: str, comment_id: int, content: str) -> None:
        """React to an inline review comment."""
        ...

    @abstractmethod
    def create_repository_dispatch(self, repo: str, event_type: str, client_payload: Dict[str, Any]) -> None:
        """Trigger a repository_dispatch event."""
        ...
