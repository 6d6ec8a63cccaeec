"""Webhook server, signature check, event parsing and handlers."""

from ghrelay.webhook.handlers import handle_github_event
from ghrelay.webhook.server import run_webhook_server

__all__ = ["handle_github_event", "run_webhook_server"]
