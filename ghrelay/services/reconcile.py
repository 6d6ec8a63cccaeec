"""Reconcile a managed PR after its automation run succeeded.

The run's display title carries ``PR#<number> - User:<login>``; that is the
only link back from the workflow run to the PR and the person who asked for
the work. Each step below is skipped when already done, so reconciling an
up-to-date PR makes no write calls.
"""

import logging
import re
from typing import List

from pydantic import BaseModel, Field

from ghrelay.adapters.base import GitPlatformAdapter, GitPlatformError
from ghrelay.models import PullRequest, RunTarget, WorkflowRunRef
from ghrelay.services.labels import has_trigger_label

RUN_TITLE_RE = re.compile(r"PR#(\d+) - User:([\w-]+)")


class ReconcileResult(BaseModel):
    """Outcome of one reconcile call."""

    target: RunTarget | None = None
    skipped_reason: str | None = None
    changes: List[str] = Field(default_factory=list)
    failures: List[str] = Field(default_factory=list)


def parse_run_title(display_title: str) -> RunTarget | None:
    match = RUN_TITLE_RE.search(display_title or "")
    if not match:
        return None
    return RunTarget(pr_number=int(match.group(1)), assignee_user=match.group(2))


def _assign(adapter: GitPlatformAdapter, repo: str, pr: PullRequest, user: str) -> bool:
    if user in pr.assignees:
        return False
    adapter.add_assignees(repo, pr.number, [user])
    return True


def _strip_title_prefix(adapter: GitPlatformAdapter, repo: str, pr: PullRequest, prefix: str) -> bool:
    if not prefix or not pr.title.startswith(prefix):
        return False
    adapter.update_pr_title(repo, pr.number, pr.title[len(prefix) :])
    return True


def _mark_ready(adapter: GitPlatformAdapter, repo: str, pr: PullRequest) -> bool:
    if not pr.draft:
        return False
    adapter.mark_pr_ready_for_review(pr)
    return True


def reconcile_workflow_run(
    adapter: GitPlatformAdapter,
    repo: str,
    run: WorkflowRunRef,
    target_label: str,
    pr_title_prefix: str,
    log: logging.Logger | None = None,
) -> ReconcileResult:
    """Assign the requester, drop the draft title prefix and mark the PR
    ready.

    Label and PR lookups raise on API errors. Failures of the three write
    steps are logged and do not stop the remaining steps.
    """
    logger = log or logging.getLogger("ghrelay.services.reconcile")
    target = parse_run_title(run.display_title)
    if target is None:
        logger.warning("Could not parse PR info from workflow title: %s", run.display_title)
        return ReconcileResult(skipped_reason="unparseable title")

    pr_number = target.pr_number
    if not has_trigger_label(adapter, repo, pr_number, target_label, log=logger):
        logger.warning('PR #%s missing target label "%s", skipping', pr_number, target_label)
        return ReconcileResult(target=target, skipped_reason="missing label")

    pr = adapter.get_pr(repo, pr_number)
    result = ReconcileResult(target=target)
    steps = [
        ("assignee", lambda: _assign(adapter, repo, pr, target.assignee_user)),
        ("title", lambda: _strip_title_prefix(adapter, repo, pr, pr_title_prefix)),
        ("ready_for_review", lambda: _mark_ready(adapter, repo, pr)),
    ]
    for name, step in steps:
        try:
            if step():
                result.changes.append(name)
        except GitPlatformError as e:
            logger.error("PR #%s: %s update failed: %s", pr_number, name, e)
            result.failures.append(name)

    if result.changes:
        logger.info("PR #%s reconciled for %s: %s", pr_number, target.assignee_user, ", ".join(result.changes))
    else:
        logger.info("PR #%s already reconciled for %s", pr_number, target.assignee_user)
    return result
