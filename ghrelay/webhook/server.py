"""Webhook HTTP server for GitHub events.

Serves a health check and the webhook path. Bodies are verified against
X-Hub-Signature-256 before any handler runs.
"""

import json
import logging
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Dict
from urllib.parse import parse_qs

from ghrelay.adapters.base import GitPlatformError
from ghrelay.config import AppConfig
from ghrelay.webhook.handlers import AdapterFactory, handle_github_event
from ghrelay.webhook.signature import verify_signature

LOG = logging.getLogger("ghrelay.webhook")


class WebhookHandler(BaseHTTPRequestHandler):
    """Handle GET /health and POST to the configured webhook path.

    Bound to a config by make_handler_class.
    """

    config: AppConfig
    adapter_factory: AdapterFactory | None = None

    def do_GET(self) -> None:
        if self.path == "/health":
            self._send_json(200, {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()})
            return
        self._send_json(404, {"error": "not found"})

    def do_POST(self) -> None:
        if self.path.split("?", 1)[0] == self.config.webhook.path:
            self._handle_github_webhook()
            return
        self._send_json(404, {"error": "not found"})

    def _send_json(self, status: int, data: Dict[str, Any]) -> None:
        body = json.dumps(data).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _parse_webhook_body(self, body: bytes) -> dict:
        """Parse webhook body as JSON.

        Supports raw JSON and application/x-www-form-urlencoded (payload=...).
        """
        if not body:
            return {}
        content_type = self.headers.get("Content-Type", "")
        if "application/x-www-form-urlencoded" in content_type:
            parsed = parse_qs(body.decode("utf-8", errors="replace"), keep_blank_values=True)
            raw = (parsed.get("payload") or [None])[0]
            if raw is None:
                return {}
            return json.loads(raw)
        return json.loads(body)

    def _handle_github_webhook(self) -> None:
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length) if length else b""
        LOG.info("Webhook received")
        signature = self.headers.get("X-Hub-Signature-256")
        if not verify_signature(self.config.webhook_secret_resolved, body, signature):
            LOG.error("Signature verification failed")
            self._send_json(401, {"error": "Invalid signature"})
            return
        try:
            payload = self._parse_webhook_body(body)
        except ValueError:
            LOG.warning("Invalid webhook JSON (%s bytes)", len(body))
            self._send_json(400, {"error": "Invalid JSON"})
            return
        event = self.headers.get("X-GitHub-Event", "")
        delivery = self.headers.get("X-GitHub-Delivery", "")
        LOG.info("Event received: %s (delivery %s)", event, delivery or "-")
        try:
            response = handle_github_event(self.config, event, payload, adapter_factory=self.adapter_factory)
        except GitPlatformError as e:
            LOG.error("Event %s failed: %s", event, e)
            self._send_json(500, {"error": str(e)})
            return
        except Exception as e:
            LOG.exception("Event %s crashed: %s", event, e)
            self._send_json(500, {"error": "internal error"})
            return
        self._send_json(200, response.model_dump(exclude_none=True))

    def log_message(self, format: str, *args: Any) -> None:
        LOG.debug(format, *args)


def make_handler_class(config: AppConfig, adapter_factory: AdapterFactory | None = None) -> type:
    """Request handler class bound to config (one per server)."""
    return type(
        "BoundWebhookHandler",
        (WebhookHandler,),
        {"config": config, "adapter_factory": staticmethod(adapter_factory) if adapter_factory else None},
    )


def run_webhook_server(config: AppConfig) -> None:
    """Run HTTP server for webhooks and health check."""
    host = config.webhook.host
    port = config.webhook.port
    server = HTTPServer((host, port), make_handler_class(config))
    LOG.info("Webhook server listening on %s:%s%s", host, port, config.webhook.path)
    server.serve_forever()
