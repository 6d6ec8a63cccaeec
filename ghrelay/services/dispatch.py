"""Trigger the downstream automation workflow."""

import logging
from typing import Any, Dict

from ghrelay.adapters.base import GitPlatformAdapter
from ghrelay.models import DispatchPayload


def dispatch_workflow(
    adapter: GitPlatformAdapter,
    repo: str,
    event_type: str,
    event_name: str,
    event_payload: Dict[str, Any],
    token: str,
    branch: str,
    pr_number: int,
    assignee_user: str,
    log: logging.Logger | None = None,
) -> DispatchPayload:
    """Send one repository_dispatch with the standard client payload.

    No retry; API errors propagate to the caller.
    """
    logger = log or logging.getLogger("ghrelay.services.dispatch")
    payload = DispatchPayload(
        original_event_name=event_name,
        original_event_payload=event_payload,
        github_app_token=token,
        branch=branch,
        pr_number=pr_number,
        assignee_user=assignee_user,
    )
    adapter.create_repository_dispatch(repo, event_type, payload.model_dump())
    logger.info("Workflow dispatched: %s for PR #%s, assignee: %s", event_name, pr_number, assignee_user)
    return payload
