"""Typed views of the GitHub webhook payloads the relay handles.

Supported events (X-GitHub-Event):
- issues: an issue labeled with the trigger label starts a new work branch and draft PR
- issue_comment: a comment on a managed PR
- pull_request_review: a review submitted on a managed PR
- workflow_run: the downstream automation run finished

Each variant keeps the raw payload for forwarding to the executor.
"""

from typing import Any, Dict, Type

from pydantic import BaseModel, Field

from ghrelay.models import Actor, IssueContext, Review, WorkflowRunRef


class WebhookEvent(BaseModel):
    """Fields shared by every supported event."""

    action: str = ""
    owner: str = ""
    repo_name: str = ""
    sender: Actor
    installation_id: int | None = None
    payload: Dict[str, Any] = Field(default_factory=dict, repr=False)

    @property
    def repo(self) -> str:
        """Repository full name (owner/repo)."""
        return f"{self.owner}/{self.repo_name}"

    @classmethod
    def _common(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        repository = payload.get("repository") or {}
        owner = (repository.get("owner") or {}).get("login") or ""
        name = repository.get("name") or ""
        if (not owner or not name) and "/" in (repository.get("full_name") or ""):
            owner, name = repository["full_name"].split("/", 1)
        installation = payload.get("installation") or {}
        return {
            "action": payload.get("action") or "",
            "owner": owner,
            "repo_name": name,
            "sender": Actor.from_sender(payload.get("sender") or {}),
            "installation_id": installation.get("id"),
            "payload": payload,
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "WebhookEvent":
        raise NotImplementedError


def _issue_context(issue: Dict[str, Any]) -> IssueContext:
    return IssueContext(
        number=issue.get("number") or 0,
        title=issue.get("title") or "",
        body=issue.get("body") or "",
        is_pull_request=bool(issue.get("pull_request")),
    )


class IssuesEvent(WebhookEvent):
    """``issues`` webhook (labeled, opened, closed, ...)."""

    issue: IssueContext
    label_name: str | None = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "IssuesEvent":
        label = payload.get("label") or {}
        return cls(
            **cls._common(payload),
            issue=_issue_context(payload.get("issue") or {}),
            label_name=label.get("name"),
        )


class IssueCommentEvent(WebhookEvent):
    """``issue_comment`` webhook; issue.is_pull_request marks PR comments."""

    issue: IssueContext
    comment_id: int | None = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "IssueCommentEvent":
        comment = payload.get("comment") or {}
        return cls(
            **cls._common(payload),
            issue=_issue_context(payload.get("issue") or {}),
            comment_id=comment.get("id"),
        )


class PullRequestReviewEvent(WebhookEvent):
    """``pull_request_review`` webhook."""

    review: Review
    pr_number: int
    head_branch: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PullRequestReviewEvent":
        review = payload.get("review") or {}
        pull = payload.get("pull_request") or {}
        return cls(
            **cls._common(payload),
            review=Review(
                id=review.get("id") or 0,
                body=review.get("body") or "",
                state=review.get("state") or "",
            ),
            pr_number=pull.get("number") or 0,
            head_branch=(pull.get("head") or {}).get("ref") or "",
        )


class WorkflowRunEvent(WebhookEvent):
    """``workflow_run`` webhook."""

    run: WorkflowRunRef
    workflow_name: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "WorkflowRunEvent":
        run = payload.get("workflow_run") or {}
        workflow = payload.get("workflow") or {}
        return cls(
            **cls._common(payload),
            run=WorkflowRunRef(
                id=run.get("id"),
                name=run.get("name") or "",
                display_title=run.get("display_title") or "",
                status=run.get("status") or "",
                conclusion=run.get("conclusion"),
            ),
            workflow_name=workflow.get("name") or run.get("name") or "",
        )


EVENT_TYPES: Dict[str, Type[WebhookEvent]] = {
    "issues": IssuesEvent,
    "issue_comment": IssueCommentEvent,
    "pull_request_review": PullRequestReviewEvent,
    "workflow_run": WorkflowRunEvent,
}


def parse_event(event: str, payload: Dict[str, Any]) -> WebhookEvent | None:
    """Return the typed event, or None for unsupported event names."""
    event_cls = EVENT_TYPES.get(event)
    if event_cls is None:
        return None
    return event_cls.from_payload(payload)
