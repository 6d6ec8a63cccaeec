"""Admission checks, branch naming, review classification, dispatch and
reconciliation."""

from ghrelay.services.branch import create_issue_branch, generate_branch_name, sanitize_issue_title
from ghrelay.services.dispatch import dispatch_workflow
from ghrelay.services.labels import has_trigger_label
from ghrelay.services.reconcile import ReconcileResult, parse_run_title, reconcile_workflow_run
from ghrelay.services.review import (
    ReviewKind,
    acknowledge_review_comments,
    build_review_dispatch,
    classify_review,
    render_review_body,
)
from ghrelay.services.senders import is_bot

__all__ = [
    "ReconcileResult",
    "ReviewKind",
    "acknowledge_review_comments",
    "build_review_dispatch",
    "classify_review",
    "create_issue_branch",
    "dispatch_workflow",
    "generate_branch_name",
    "has_trigger_label",
    "is_bot",
    "parse_run_title",
    "reconcile_workflow_run",
    "render_review_body",
    "sanitize_issue_title",
]
