"""Issue (or pull request seen through the issues API)."""

from pydantic import BaseModel


class IssueContext(BaseModel):
    """Issue fields the relay reads from webhook payloads."""

    number: int
    title: str = ""
    body: str = ""
    is_pull_request: bool = False
