"""Handle GitHub webhook events for automation-managed issues and PRs.

Each handler runs a short admission pipeline and stops at the first failed
check with an "ignored" response. Admitted events end in exactly one
workflow dispatch (or, for workflow_run, in PR reconciliation).
"""

import logging
from typing import Any, Callable, Dict, Tuple

from ghrelay.adapters.auth import GitHubAppAuth
from ghrelay.adapters.base import GitPlatformAdapter, GitPlatformError
from ghrelay.config import AppConfig
from ghrelay.models import ReviewBundle, WebhookResponse
from ghrelay.services.branch import create_issue_branch
from ghrelay.services.dispatch import dispatch_workflow
from ghrelay.services.labels import has_trigger_label
from ghrelay.services.reconcile import reconcile_workflow_run
from ghrelay.services.review import acknowledge_review_comments, build_review_dispatch
from ghrelay.services.senders import is_bot
from ghrelay.webhook.events import (
    IssueCommentEvent,
    IssuesEvent,
    PullRequestReviewEvent,
    WebhookEvent,
    WorkflowRunEvent,
    parse_event,
)

# installation id -> (adapter, installation token)
AdapterFactory = Callable[[int], Tuple[GitPlatformAdapter, str]]


def _ignored(message: str) -> WebhookResponse:
    return WebhookResponse(status="ignored", message=message)


def _react(action: Callable[[], None], what: str, log: logging.Logger) -> None:
    """Post an acknowledgment reaction; failures are only logged."""
    try:
        action()
    except GitPlatformError as e:
        log.warning("Reaction failed on %s: %s", what, e)


def _connect(connect: AdapterFactory, event: WebhookEvent) -> Tuple[GitPlatformAdapter, str]:
    if event.installation_id is None:
        raise GitPlatformError(f"{event.repo}: payload has no installation id")
    return connect(int(event.installation_id))


def _pr_body(issue_number: int, issue_body: str) -> str:
    return (
        f"This PR is being automatically worked on to address issue #{issue_number}.\n\n"
        f"**Original Issue Description:**\n\n> {issue_body or 'No description provided.'}"
    )


def _handle_issues(
    config: AppConfig,
    event: IssuesEvent,
    connect: AdapterFactory,
    log: logging.Logger,
) -> WebhookResponse:
    """On issue labeled with the trigger label: branch, empty commit, draft
    PR, label, dispatch."""
    wf = config.workflow
    if event.action != "labeled" or event.label_name != wf.target_label:
        log.info("Issue ignored: action=%s, label=%s", event.action, event.label_name)
        return _ignored("Ignored")

    issue = event.issue
    repo = event.repo
    log.info("Processing labeled issue: #%s in %s", issue.number, repo)
    adapter, token = _connect(connect, event)

    base_sha = adapter.get_branch_sha(repo, wf.default_branch)
    branch = create_issue_branch(
        adapter,
        repo,
        issue.number,
        issue.title,
        wf.branch_prefix,
        base_sha,
        log=log,
    )
    _react(
        lambda: adapter.create_issue_reaction(repo, issue.number, wf.reaction),
        f"issue #{issue.number}",
        log,
    )
    # The empty commit gives the branch a diff base so a PR can be opened
    commit_sha = adapter.create_empty_commit(repo, base_sha, f"chore: initial commit for issue #{issue.number}")
    adapter.update_branch(repo, branch, commit_sha, force=True)

    pr = adapter.create_pr(
        repo,
        title=f"{wf.pr_title_prefix}{issue.title}",
        body=_pr_body(issue.number, issue.body),
        head=branch,
        base=wf.default_branch,
        draft=True,
    )
    log.info("PR created: draft #%s", pr.number)
    adapter.add_labels(repo, pr.number, [wf.target_label])
    log.info("PR labeled: #%s with %s", pr.number, wf.target_label)

    payload = event.payload
    dispatch_workflow(
        adapter,
        repo,
        wf.dispatch_event,
        "pull_request",
        {
            "action": "opened",
            "number": pr.number,
            "pull_request": pr.raw,
            "repository": payload.get("repository"),
            "sender": payload.get("sender"),
            "installation": payload.get("installation"),
        },
        token,
        branch,
        pr.number,
        event.sender.login,
        log=log,
    )
    return WebhookResponse(status="processed", message="PR created and workflow triggered")


def _handle_issue_comment(
    config: AppConfig,
    event: IssueCommentEvent,
    connect: AdapterFactory,
    log: logging.Logger,
) -> WebhookResponse:
    """On a new human comment on a managed PR: react and dispatch on the PR
    head branch."""
    wf = config.workflow
    if event.action != "created" or not event.issue.is_pull_request:
        log.info("Comment ignored: not a new comment on PR")
        return _ignored("Ignored: not a new comment on a PR")
    if is_bot(event.sender):
        log.info("Comment ignored: from bot %s", event.sender.login)
        return _ignored("Ignored bot comment")

    repo = event.repo
    pr_number = event.issue.number
    adapter, token = _connect(connect, event)
    if not has_trigger_label(adapter, repo, pr_number, wf.target_label, log=log):
        log.info("Comment ignored: PR #%s missing trigger label", pr_number)
        return _ignored("Not a managed PR")

    log.info("Processing comment: PR #%s in %s", pr_number, repo)
    pr = adapter.get_pr(repo, pr_number)
    if event.comment_id is not None:
        _react(
            lambda: adapter.create_issue_comment_reaction(repo, int(event.comment_id), wf.reaction),
            f"comment {event.comment_id}",
            log,
        )

    dispatch_workflow(
        adapter,
        repo,
        wf.dispatch_event,
        "issue_comment",
        event.payload,
        token,
        pr.head_branch,
        pr_number,
        event.sender.login,
        log=log,
    )
    return WebhookResponse(status="processed", message="Comment processing triggered")


def _handle_pull_request_review(
    config: AppConfig,
    event: PullRequestReviewEvent,
    connect: AdapterFactory,
    log: logging.Logger,
) -> WebhookResponse:
    """On a submitted human review of a managed PR: classify and dispatch."""
    wf = config.workflow
    if event.action != "submitted":
        log.info("Review ignored: action %s", event.action)
        return _ignored("Ignored action")
    if is_bot(event.sender):
        log.info("Review ignored: from bot %s", event.sender.login)
        return _ignored("Ignored bot")

    repo = event.repo
    pr_number = event.pr_number
    adapter, token = _connect(connect, event)
    if not has_trigger_label(adapter, repo, pr_number, wf.target_label, log=log):
        log.info("Review ignored: PR #%s missing trigger label", pr_number)
        return _ignored("Ignored: no trigger label")

    comments = adapter.list_review_comments(repo, pr_number, event.review.id)
    bundle = ReviewBundle(review=event.review, comments=comments)
    kind, event_name, event_payload = build_review_dispatch(bundle, event.payload)
    log.info(
        "Review analyzed: %s comments, state=%s, type=%s",
        len(comments),
        event.review.state,
        kind.value,
    )

    acknowledge_review_comments(adapter, repo, comments, wf.reaction, log=log)

    dispatch_workflow(
        adapter,
        repo,
        wf.dispatch_event,
        event_name,
        event_payload,
        token,
        event.head_branch,
        pr_number,
        event.sender.login,
        log=log,
    )
    return WebhookResponse(
        status="processed",
        type=kind.value,
        message=f"Review processing triggered with {len(comments)} comments",
    )


def _handle_workflow_run(
    config: AppConfig,
    event: WorkflowRunEvent,
    connect: AdapterFactory,
    log: logging.Logger,
) -> WebhookResponse:
    """On a successful workflow run: reconcile the PR named in its title."""
    run = event.run
    log.info("Workflow %s: %s (%s)", event.action, event.workflow_name, run.conclusion or run.status)
    if event.action != "completed" or run.conclusion != "success":
        return _ignored(f"Workflow run event logged: {run.name} ({event.action})")

    adapter, _ = _connect(connect, event)
    result = reconcile_workflow_run(
        adapter,
        event.repo,
        run,
        config.workflow.target_label,
        config.workflow.pr_title_prefix,
        log=log,
    )
    if result.skipped_reason:
        return _ignored(f"Workflow run not reconciled: {result.skipped_reason}")
    return WebhookResponse(status="processed", message=f"Workflow run reconciled: {run.name}")


_HANDLERS: Dict[type, Callable[..., WebhookResponse]] = {
    IssuesEvent: _handle_issues,
    IssueCommentEvent: _handle_issue_comment,
    PullRequestReviewEvent: _handle_pull_request_review,
    WorkflowRunEvent: _handle_workflow_run,
}


def default_adapter_factory(config: AppConfig) -> AdapterFactory:
    """Authenticate as the GitHub App installation named in each event."""
    auth = GitHubAppAuth(
        app_id=config.github.app_id,
        private_key=config.private_key_resolved or "",
        api_url=config.github.api_url,
    )
    return auth.adapter_for


def handle_github_event(
    config: AppConfig,
    event: str,
    payload: Dict[str, Any],
    adapter_factory: AdapterFactory | None = None,
    log: logging.Logger | None = None,
) -> WebhookResponse:
    """Handle a GitHub webhook event.

    Supported events:
    - issues (action=labeled with the trigger label): create branch and draft PR, dispatch.
    - issue_comment (action=created on a managed PR): dispatch the comment.
    - pull_request_review (action=submitted on a managed PR): classify review, dispatch.
    - workflow_run (action=completed, conclusion=success): reconcile the PR.

    Unsupported or non-admitted events return an "ignored" response. API
    failures raise GitPlatformError.
    """
    logger = log or logging.getLogger("ghrelay.webhook.handlers")
    parsed = parse_event(event, payload)
    if parsed is None:
        logger.info("Event ignored: unsupported type %s", event)
        return _ignored("Ignored event type")
    connect = adapter_factory or default_adapter_factory(config)
    return _HANDLERS[type(parsed)](config, parsed, connect, logger)
