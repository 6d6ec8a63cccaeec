"""Webhook sender (user or bot account)."""

from typing import Any, Dict, Literal

from pydantic import BaseModel

BOT_LOGIN_SUFFIX = "[bot]"


class Actor(BaseModel):
    """Account that caused a webhook event."""

    login: str
    kind: Literal["User", "Bot"] = "User"

    @classmethod
    def from_sender(cls, sender: Dict[str, Any]) -> "Actor":
        """Build from a raw ``sender`` record; infer kind from the login when
        ``type`` is absent."""
        login = sender.get("login") or ""
        kind = sender.get("type")
        if kind not in ("User", "Bot"):
            kind = "Bot" if login.endswith(BOT_LOGIN_SUFFIX) else "User"
        return cls(login=login, kind=kind)
