"""Completed downstream workflow run."""

from pydantic import BaseModel


class WorkflowRunRef(BaseModel):
    """Workflow run fields used to reconcile the PR it worked on."""

    id: int | None = None
    name: str = ""
    display_title: str = ""
    status: str = ""
    conclusion: str | None = None


class RunTarget(BaseModel):
    """PR and user recovered from a run's display title."""

    pr_number: int
    assignee_user: str
