"""Trigger label check for managed issues and PRs."""

import logging

from ghrelay.adapters.base import GitPlatformAdapter, GitPlatformError


def has_trigger_label(
    adapter: GitPlatformAdapter,
    repo: str,
    issue_number: int,
    target_label: str,
    log: logging.Logger | None = None,
) -> bool:
    """Return True if the issue or PR currently carries target_label.

    Labels are re-fetched on every call. Fetch errors are re-raised.
    """
    logger = log or logging.getLogger("ghrelay.services.labels")
    try:
        labels = adapter.list_issue_labels(repo, issue_number)
    except GitPlatformError as e:
        logger.error("Label fetch failed: %s#%s: %s", repo, issue_number, e)
        raise
    return target_label in labels
