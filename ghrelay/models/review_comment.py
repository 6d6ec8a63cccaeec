"""Inline comments attached to a pull request review."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class ReviewComment(BaseModel):
    """Line-level (or file-level) comment belonging to a review."""

    id: int
    path: str = ""
    line: int | None = None
    body: str = ""
    raw: Dict[str, Any] = Field(default_factory=dict, repr=False)


class Review(BaseModel):
    """Submitted review: verdict state and optional summary body."""

    id: int
    body: str = ""
    state: str = "commented"


class ReviewBundle(BaseModel):
    """A review together with its inline comments, in API order."""

    review: Review
    comments: List[ReviewComment] = Field(default_factory=list)
