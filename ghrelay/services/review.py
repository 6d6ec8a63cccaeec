"""Classify submitted PR reviews and build their dispatch payloads.

A review with exactly one inline comment and no verdict (state
``commented``) is routed like a single code comment. Anything else is a
consolidated review carrying every inline comment.
"""

import enum
import logging
from typing import Any, Dict, List, Tuple

from ghrelay.adapters.base import GitPlatformAdapter, GitPlatformError
from ghrelay.models import ReviewBundle, ReviewComment

FEEDBACK_HEADER = "Please address the following review feedback:"
GENERIC_REVIEW_BODY = "Please review and improve this pull request."


class ReviewKind(str, enum.Enum):
    STANDALONE_CODE_COMMENT = "SingleCodeComment"
    CONSOLIDATED_REVIEW = "PullRequestReviewCompleted"


def is_standalone_code_comment(comments_count: int, review_state: str) -> bool:
    return comments_count == 1 and (review_state or "").lower() == "commented"


def classify_review(comments_count: int, review_state: str) -> ReviewKind:
    if is_standalone_code_comment(comments_count, review_state):
        return ReviewKind.STANDALONE_CODE_COMMENT
    return ReviewKind.CONSOLIDATED_REVIEW


def _comment_object(comment: ReviewComment) -> Dict[str, Any]:
    return comment.raw or comment.model_dump(exclude={"raw"})


def render_review_body(review_body: str, comments: List[ReviewComment]) -> str:
    """Effective review text: the review's own body, else a bullet list of
    ``path[:line]: body`` lines, else a generic request."""
    body = (review_body or "").strip()
    if body:
        return body
    if comments:
        lines = []
        for c in comments:
            location = f"{c.path}:{c.line}" if c.line else c.path
            lines.append(f"- {location}: {c.body.strip()}")
        return f"{FEEDBACK_HEADER}\n\n" + "\n".join(lines)
    return GENERIC_REVIEW_BODY


def build_review_dispatch(
    bundle: ReviewBundle,
    payload: Dict[str, Any],
) -> Tuple[ReviewKind, str, Dict[str, Any]]:
    """Return (kind, event name, event payload) for a submitted review.

    payload is the original pull_request_review webhook body; it is not
    modified.
    """
    kind = classify_review(len(bundle.comments), bundle.review.state)
    if kind is ReviewKind.STANDALONE_CODE_COMMENT:
        event_payload = {
            "action": "created",
            "comment": _comment_object(bundle.comments[0]),
            "pull_request": payload.get("pull_request"),
            "repository": payload.get("repository"),
            "sender": payload.get("sender"),
            "installation": payload.get("installation"),
        }
        return kind, "pull_request_review_comment", event_payload

    review = dict(payload.get("review") or {})
    review["body"] = render_review_body(bundle.review.body, bundle.comments)
    event_payload = {
        **payload,
        "review": review,
        "review_comments": [_comment_object(c) for c in bundle.comments],
    }
    return kind, "pull_request_review", event_payload


def acknowledge_review_comments(
    adapter: GitPlatformAdapter,
    repo: str,
    comments: List[ReviewComment],
    reaction: str,
    log: logging.Logger | None = None,
) -> int:
    """React to every comment; failures are logged and skipped.

    Returns the number of reactions posted.
    """
    logger = log or logging.getLogger("ghrelay.services.review")
    posted = 0
    for comment in comments:
        try:
            adapter.create_review_comment_reaction(repo, comment.id, reaction)
            posted += 1
        except GitPlatformError as e:
            logger.warning("Comment reaction failed: comment %s: %s", comment.id, e)
    return posted
