"""Pull request model."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class PullRequest(BaseModel):
    """Pull request, with the raw API object kept for forwarding."""

    number: int
    title: str
    body: str = ""
    head_branch: str
    base_branch: str = ""
    state: str = "open"
    draft: bool = False
    node_id: str = ""
    assignees: List[str] = Field(default_factory=list)
    html_url: str | None = None
    raw: Dict[str, Any] = Field(default_factory=dict, repr=False)
