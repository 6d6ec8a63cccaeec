"""Bot sender filter."""

from typing import Any, Dict

from ghrelay.models import Actor
from ghrelay.models.actor import BOT_LOGIN_SUFFIX


def is_bot(actor: Actor | Dict[str, Any]) -> bool:
    """True for bot accounts (type Bot or login ending with ``[bot]``).

    Accepts an Actor or a raw webhook ``sender`` record.
    """
    if not isinstance(actor, Actor):
        actor = Actor.from_sender(actor)
    return actor.kind == "Bot" or actor.login.endswith(BOT_LOGIN_SUFFIX)
