"""Data models for senders, issues, pull requests, reviews and dispatches
(Pydantic)."""

from ghrelay.models.actor import Actor
from ghrelay.models.dispatch import DispatchPayload, WebhookResponse
from ghrelay.models.issue import IssueContext
from ghrelay.models.pr import PullRequest
from ghrelay.models.review_comment import Review, ReviewBundle, ReviewComment
from ghrelay.models.workflow_run import RunTarget, WorkflowRunRef

__all__ = [
    "Actor",
    "DispatchPayload",
    "IssueContext",
    "PullRequest",
    "Review",
    "ReviewBundle",
    "ReviewComment",
    "RunTarget",
    "WebhookResponse",
    "WorkflowRunRef",
]
