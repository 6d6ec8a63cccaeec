"""Tests for webhook routing and the four event handlers."""

from unittest.mock import MagicMock

import pytest

from ghrelay.adapters.base import GitPlatformError
from ghrelay.models import PullRequest, ReviewComment
from ghrelay.services.review import FEEDBACK_HEADER
from ghrelay.webhook.handlers import handle_github_event

REPOSITORY = {"name": "repo", "full_name": "owner/repo", "owner": {"login": "owner"}}
INSTALLATION = {"id": 77}


@pytest.fixture
def connect(fake_github):
    """Adapter factory returning the fake and a fixed installation token."""
    factory = MagicMock(return_value=(fake_github, "ghs_token"))
    return factory


def _managed_pr(fake_github, number: int = 42, branch: str = "claude/issue-7-fix-typo-1") -> None:
    fake_github.prs[number] = PullRequest(number=number, title="[WIP] Fix typo", head_branch=branch, draft=True)
    fake_github.labels[number] = ["claude"]


def _issues_payload(action: str = "labeled", label: str = "claude") -> dict:
    return {
        "action": action,
        "label": {"name": label},
        "issue": {"number": 7, "title": "Fix typo", "body": "There is a typo in README."},
        "repository": REPOSITORY,
        "sender": {"login": "alice", "type": "User"},
        "installation": INSTALLATION,
    }


def _comment_payload(sender: dict | None = None, is_pr: bool = True, action: str = "created") -> dict:
    issue = {"number": 42, "title": "[WIP] Fix typo"}
    if is_pr:
        issue["pull_request"] = {"url": "https://api.github.com/repos/owner/repo/pulls/42"}
    return {
        "action": action,
        "comment": {"id": 555, "body": "Please also update docs"},
        "issue": issue,
        "repository": REPOSITORY,
        "sender": sender or {"login": "carol", "type": "User"},
        "installation": INSTALLATION,
    }


def _review_payload(state: str = "commented", body: str | None = None, sender: dict | None = None) -> dict:
    return {
        "action": "submitted",
        "review": {"id": 9, "body": body, "state": state},
        "pull_request": {"number": 42, "head": {"ref": "claude/issue-7-fix-typo-1"}},
        "repository": REPOSITORY,
        "sender": sender or {"login": "dave", "type": "User"},
        "installation": INSTALLATION,
    }


def _run_payload(action: str = "completed", conclusion: str | None = "success", title: str = "Build PR#42 - User:bob"):
    return {
        "action": action,
        "workflow_run": {
            "id": 1,
            "name": "Claude",
            "display_title": title,
            "status": "completed" if action == "completed" else "in_progress",
            "conclusion": conclusion,
        },
        "workflow": {"name": "Claude"},
        "repository": REPOSITORY,
        "sender": {"login": "github-actions[bot]", "type": "Bot"},
        "installation": INSTALLATION,
    }


class TestRouting:
    def test_unsupported_event_is_ignored(self, config, connect) -> None:
        response = handle_github_event(config, "push", {"ref": "refs/heads/main"}, adapter_factory=connect)
        assert response.status == "ignored"
        connect.assert_not_called()

    def test_adapter_created_for_event_installation(self, config, connect, fake_github) -> None:
        _managed_pr(fake_github)
        handle_github_event(config, "issue_comment", _comment_payload(), adapter_factory=connect)
        connect.assert_called_once_with(77)

    def test_missing_installation_raises(self, config, connect) -> None:
        payload = _comment_payload()
        del payload["installation"]
        with pytest.raises(GitPlatformError, match="installation"):
            handle_github_event(config, "issue_comment", payload, adapter_factory=connect)


class TestIssuesLabeled:
    def test_creates_branch_draft_pr_and_dispatches(self, config, connect, fake_github) -> None:
        response = handle_github_event(config, "issues", _issues_payload(), adapter_factory=connect)

        assert response.status == "processed"
        branch = "claude/issue-7-fix-typo-1"
        assert fake_github.branches[branch] == "sha-main-empty"
        assert ("create_branch", "owner/repo", branch, "sha-main") in fake_github.calls
        assert ("create_issue_reaction", "owner/repo", 7, "eyes") in fake_github.calls

        pr = fake_github.prs[100]
        assert pr.title == "[WIP] Fix typo"
        assert pr.draft is True
        assert pr.head_branch == branch
        assert pr.base_branch == "main"
        assert "#7" in pr.body
        assert "There is a typo in README." in pr.body
        assert fake_github.labels[100] == ["claude"]

        assert len(fake_github.dispatches) == 1
        dispatch = fake_github.dispatches[0]
        assert dispatch["event_type"] == "claude_copilot"
        client_payload = dispatch["client_payload"]
        assert client_payload["original_event_name"] == "pull_request"
        assert client_payload["assignee_user"] == "alice"
        assert client_payload["branch"] == branch
        assert client_payload["pr_number"] == 100
        assert client_payload["github_app_token"] == "ghs_token"
        event = client_payload["original_event_payload"]
        assert event["action"] == "opened"
        assert event["number"] == 100
        assert event["pull_request"]["number"] == 100
        assert event["installation"] == INSTALLATION

    def test_relabel_creates_next_sequence_branch(self, config, connect, fake_github) -> None:
        fake_github.branches["claude/issue-7-fix-typo-1"] = "old"
        handle_github_event(config, "issues", _issues_payload(), adapter_factory=connect)
        assert "claude/issue-7-fix-typo-2" in fake_github.branches

    @pytest.mark.parametrize(
        "action,label",
        [("labeled", "bug"), ("unlabeled", "claude"), ("opened", "claude")],
    )
    def test_other_actions_or_labels_ignored(self, config, connect, fake_github, action, label) -> None:
        response = handle_github_event(config, "issues", _issues_payload(action, label), adapter_factory=connect)
        assert response.status == "ignored"
        connect.assert_not_called()
        assert fake_github.calls == []

    def test_reaction_follows_branch_naming(self, config, connect, fake_github) -> None:
        handle_github_event(config, "issues", _issues_payload(), adapter_factory=connect)
        names = [c[0] for c in fake_github.calls]
        assert names.index("list_matching_branches") < names.index("create_issue_reaction")
        assert names.index("create_issue_reaction") < names.index("create_pr")

    def test_reaction_failure_does_not_stop_flow(self, config, connect, fake_github) -> None:
        fake_github.failing.add("create_issue_reaction")
        response = handle_github_event(config, "issues", _issues_payload(), adapter_factory=connect)
        assert response.status == "processed"
        assert len(fake_github.dispatches) == 1

    def test_pr_creation_failure_propagates_without_dispatch(self, config, connect, fake_github) -> None:
        fake_github.failing.add("create_pr")
        with pytest.raises(GitPlatformError):
            handle_github_event(config, "issues", _issues_payload(), adapter_factory=connect)
        assert fake_github.dispatches == []


class TestIssueComment:
    def test_dispatches_on_pr_head_branch(self, config, connect, fake_github) -> None:
        _managed_pr(fake_github)
        payload = _comment_payload()
        response = handle_github_event(config, "issue_comment", payload, adapter_factory=connect)

        assert response.status == "processed"
        assert ("create_issue_comment_reaction", "owner/repo", 555, "eyes") in fake_github.calls
        assert len(fake_github.dispatches) == 1
        client_payload = fake_github.dispatches[0]["client_payload"]
        assert client_payload["original_event_name"] == "issue_comment"
        assert client_payload["original_event_payload"] == payload
        assert client_payload["branch"] == "claude/issue-7-fix-typo-1"
        assert client_payload["pr_number"] == 42
        assert client_payload["assignee_user"] == "carol"

    def test_comment_on_plain_issue_ignored(self, config, connect, fake_github) -> None:
        response = handle_github_event(
            config, "issue_comment", _comment_payload(is_pr=False), adapter_factory=connect
        )
        assert response.status == "ignored"
        connect.assert_not_called()

    def test_edited_comment_ignored(self, config, connect) -> None:
        response = handle_github_event(config, "issue_comment", _comment_payload(action="edited"), adapter_factory=connect)
        assert response.status == "ignored"

    @pytest.mark.parametrize("sender", [{"login": "claude[bot]"}, {"login": "ci", "type": "Bot"}])
    def test_bot_comment_ignored(self, config, connect, fake_github, sender) -> None:
        _managed_pr(fake_github)
        response = handle_github_event(config, "issue_comment", _comment_payload(sender), adapter_factory=connect)
        assert response.status == "ignored"
        assert fake_github.dispatches == []

    def test_unlabeled_pr_ignored(self, config, connect, fake_github) -> None:
        _managed_pr(fake_github)
        fake_github.labels[42] = ["bug"]
        response = handle_github_event(config, "issue_comment", _comment_payload(), adapter_factory=connect)
        assert response.status == "ignored"
        assert fake_github.mutating_calls == []

    def test_label_fetch_failure_is_hard_failure(self, config, connect, fake_github) -> None:
        fake_github.failing.add("list_issue_labels")
        with pytest.raises(GitPlatformError):
            handle_github_event(config, "issue_comment", _comment_payload(), adapter_factory=connect)
        assert fake_github.dispatches == []


class TestPullRequestReview:
    def test_single_inline_comment_dispatched_as_code_comment(self, config, connect, fake_github) -> None:
        _managed_pr(fake_github)
        fake_github.review_comments[9] = [
            ReviewComment(id=21, path="README.md", line=3, body="typo here", raw={"id": 21, "path": "README.md"})
        ]
        response = handle_github_event(config, "pull_request_review", _review_payload(), adapter_factory=connect)

        assert response.type == "SingleCodeComment"
        assert len(fake_github.dispatches) == 1
        client_payload = fake_github.dispatches[0]["client_payload"]
        assert client_payload["original_event_name"] == "pull_request_review_comment"
        assert client_payload["original_event_payload"]["comment"] == {"id": 21, "path": "README.md"}
        assert client_payload["assignee_user"] == "dave"
        assert client_payload["branch"] == "claude/issue-7-fix-typo-1"

    def test_changes_requested_with_three_comments_is_consolidated(self, config, connect, fake_github) -> None:
        _managed_pr(fake_github)
        fake_github.review_comments[9] = [
            ReviewComment(id=1, path="a.py", line=1, body="one"),
            ReviewComment(id=2, path="b.py", line=2, body="two"),
            ReviewComment(id=3, path="c.py", body="three"),
        ]
        response = handle_github_event(
            config,
            "pull_request_review",
            _review_payload(state="changes_requested"),
            adapter_factory=connect,
        )

        assert response.type == "PullRequestReviewCompleted"
        assert len(fake_github.dispatches) == 1
        client_payload = fake_github.dispatches[0]["client_payload"]
        assert client_payload["original_event_name"] == "pull_request_review"
        event = client_payload["original_event_payload"]
        assert event["review"]["body"] == f"{FEEDBACK_HEADER}\n\n- a.py:1: one\n- b.py:2: two\n- c.py: three"
        assert len(event["review_comments"]) == 3
        reacted = [c[2] for c in fake_github.calls if c[0] == "create_review_comment_reaction"]
        assert reacted == [1, 2, 3]

    def test_review_reaction_failures_do_not_block_dispatch(self, config, connect, fake_github) -> None:
        _managed_pr(fake_github)
        fake_github.review_comments[9] = [ReviewComment(id=1, path="a.py", body="x")]
        fake_github.failing.add("create_review_comment_reaction")
        handle_github_event(config, "pull_request_review", _review_payload(), adapter_factory=connect)
        assert len(fake_github.dispatches) == 1

    def test_bot_review_ignored(self, config, connect, fake_github) -> None:
        _managed_pr(fake_github)
        payload = _review_payload(sender={"login": "reviewer[bot]"})
        response = handle_github_event(config, "pull_request_review", payload, adapter_factory=connect)
        assert response.status == "ignored"
        connect.assert_not_called()

    def test_dismissed_review_ignored(self, config, connect) -> None:
        payload = _review_payload()
        payload["action"] = "dismissed"
        response = handle_github_event(config, "pull_request_review", payload, adapter_factory=connect)
        assert response.status == "ignored"

    def test_review_comment_fetch_failure_propagates(self, config, connect, fake_github) -> None:
        _managed_pr(fake_github)
        fake_github.failing.add("list_review_comments")
        with pytest.raises(GitPlatformError):
            handle_github_event(config, "pull_request_review", _review_payload(), adapter_factory=connect)
        assert fake_github.dispatches == []


class TestWorkflowRun:
    def test_success_reconciles_pr(self, config, connect, fake_github) -> None:
        fake_github.prs[42] = PullRequest(
            number=42, title="[WIP] Add feature", head_branch="b", draft=True, node_id="PR_42"
        )
        fake_github.labels[42] = ["claude"]
        response = handle_github_event(config, "workflow_run", _run_payload(), adapter_factory=connect)

        assert response.status == "processed"
        pr = fake_github.prs[42]
        assert pr.assignees == ["bob"]
        assert pr.title == "Add feature"
        assert pr.draft is False
        assert fake_github.dispatches == []

    @pytest.mark.parametrize(
        "action,conclusion",
        [("completed", "failure"), ("completed", "cancelled"), ("requested", None), ("in_progress", None)],
    )
    def test_other_runs_logged_and_ignored(self, config, connect, action, conclusion) -> None:
        response = handle_github_event(
            config, "workflow_run", _run_payload(action, conclusion), adapter_factory=connect
        )
        assert response.status == "ignored"
        connect.assert_not_called()

    def test_foreign_run_title_ignored(self, config, connect, fake_github) -> None:
        response = handle_github_event(
            config, "workflow_run", _run_payload(title="CI on main"), adapter_factory=connect
        )
        assert response.status == "ignored"
        assert fake_github.calls == []
