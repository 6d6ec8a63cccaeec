"""Shared fixtures: config and an in-memory GitHub adapter."""

from typing import Any, Dict, List

import pytest

from ghrelay.adapters.base import GitPlatformAdapter, GitPlatformError
from ghrelay.config import AppConfig, GitHubConfig, WebhookConfig, WorkflowConfig
from ghrelay.models import PullRequest, ReviewComment

MUTATING_CALLS = {
    "add_labels",
    "add_assignees",
    "create_branch",
    "update_branch",
    "create_empty_commit",
    "create_pr",
    "update_pr_title",
    "mark_pr_ready_for_review",
    "create_issue_reaction",
    "create_issue_comment_reaction",
    "create_review_comment_reaction",
    "create_repository_dispatch",
}


class FakeGitHub(GitPlatformAdapter):
    """Repository state held in dicts; every call is recorded in ``calls``."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.labels: Dict[int, List[str]] = {}
        self.branches: Dict[str, str] = {"main": "sha-main"}
        self.prs: Dict[int, PullRequest] = {}
        self.review_comments: Dict[int, List[ReviewComment]] = {}
        self.dispatches: List[Dict[str, Any]] = []
        self.failing: set[str] = set()
        self.next_number = 100

    def _call(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        if name in self.failing:
            raise GitPlatformError(f"500: {name} failed", status_code=500)

    @property
    def mutating_calls(self) -> List[tuple]:
        return [c for c in self.calls if c[0] in MUTATING_CALLS]

    def list_issue_labels(self, repo: str, issue_number: int) -> List[str]:
        self._call("list_issue_labels", repo, issue_number)
        return list(self.labels.get(issue_number, []))

    def add_labels(self, repo: str, issue_number: int, labels: List[str]) -> None:
        self._call("add_labels", repo, issue_number, labels)
        self.labels.setdefault(issue_number, []).extend(labels)

    def add_assignees(self, repo: str, issue_number: int, assignees: List[str]) -> None:
        self._call("add_assignees", repo, issue_number, assignees)
        self.prs[issue_number].assignees.extend(assignees)

    def list_matching_branches(self, repo: str, prefix: str) -> List[str]:
        self._call("list_matching_branches", repo, prefix)
        return [b for b in self.branches if b.startswith(prefix)]

    def get_branch_sha(self, repo: str, branch: str) -> str:
        self._call("get_branch_sha", repo, branch)
        return self.branches[branch]

    def create_branch(self, repo: str, branch: str, sha: str) -> None:
        self._call("create_branch", repo, branch, sha)
        if branch in self.branches:
            raise GitPlatformError("422: Reference already exists", status_code=422)
        self.branches[branch] = sha

    def update_branch(self, repo: str, branch: str, sha: str, force: bool = False) -> None:
        self._call("update_branch", repo, branch, sha, force)
        self.branches[branch] = sha

    def create_empty_commit(self, repo: str, parent_sha: str, message: str) -> str:
        self._call("create_empty_commit", repo, parent_sha, message)
        return f"{parent_sha}-empty"

    def create_pr(
        self,
        repo: str,
        title: str,
        body: str,
        head: str,
        base: str,
        draft: bool = False,
    ) -> PullRequest:
        self._call("create_pr", repo, title, head, base, draft)
        number = self.next_number
        self.next_number += 1
        raw = {"number": number, "title": title, "draft": draft, "head": {"ref": head}, "base": {"ref": base}}
        pr = PullRequest(
            number=number,
            title=title,
            body=body,
            head_branch=head,
            base_branch=base,
            draft=draft,
            node_id=f"PR_{number}",
            raw=raw,
        )
        self.prs[number] = pr
        return pr

    def get_pr(self, repo: str, pr_number: int) -> PullRequest:
        self._call("get_pr", repo, pr_number)
        if pr_number not in self.prs:
            raise GitPlatformError(f"404: PR {pr_number}", status_code=404)
        return self.prs[pr_number].model_copy(deep=True)

    def update_pr_title(self, repo: str, pr_number: int, title: str) -> None:
        self._call("update_pr_title", repo, pr_number, title)
        self.prs[pr_number].title = title

    def mark_pr_ready_for_review(self, pr: PullRequest) -> None:
        self._call("mark_pr_ready_for_review", pr.number)
        self.prs[pr.number].draft = False

    def list_review_comments(self, repo: str, pr_number: int, review_id: int) -> List[ReviewComment]:
        self._call("list_review_comments", repo, pr_number, review_id)
        return list(self.review_comments.get(review_id, []))

    def create_issue_reaction(self, repo: str, issue_number: int, content: str) -> None:
        self._call("create_issue_reaction", repo, issue_number, content)

    def create_issue_comment_reaction(self, repo: str, comment_id: int, content: str) -> None:
        self._call("create_issue_comment_reaction", repo, comment_id, content)

    def create_review_comment_reaction(self, repo: str, comment_id: int, content: str) -> None:
        self._call("create_review_comment_reaction", repo, comment_id, content)

    def create_repository_dispatch(self, repo: str, event_type: str, client_payload: Dict[str, Any]) -> None:
        self._call("create_repository_dispatch", repo, event_type)
        self.dispatches.append({"event_type": event_type, "client_payload": client_payload})


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def config() -> AppConfig:
    """Valid config with the default workflow settings and label 'claude'."""
    return AppConfig(
        github=GitHubConfig(app_id="12345", private_key="-----BEGIN KEY-----\nx\n-----END KEY-----"),
        webhook=WebhookConfig(secret="s3cret-value"),
        workflow=WorkflowConfig(
            target_label="claude",
            default_branch="main",
            branch_prefix="claude/issue-",
            dispatch_event="claude_copilot",
            pr_title_prefix="[WIP] ",
            reaction="eyes",
        ),
    )
