"""Envelope sent to the downstream executor and webhook responses."""

from typing import Any, Dict, Literal

from pydantic import BaseModel


class DispatchPayload(BaseModel):
    """``client_payload`` of the repository_dispatch call.

    Field names are part of the executor's interface.
    """

    original_event_name: str
    original_event_payload: Dict[str, Any]
    github_app_token: str
    branch: str
    pr_number: int
    assignee_user: str


class WebhookResponse(BaseModel):
    """Acknowledgment returned to the webhook caller."""

    status: Literal["ignored", "processed"]
    message: str
    type: str | None = None
