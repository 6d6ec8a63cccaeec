"""Webhook signature verification (X-Hub-Signature-256)."""

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


def compute_signature(secret: str, body: bytes) -> str:
    digest = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(secret: str, body: bytes, signature: str | None) -> bool:
    """True if signature is the HMAC-SHA256 of body under secret.

    An empty secret never verifies.
    """
    if not secret or not signature:
        return False
    return hmac.compare_digest(compute_signature(secret, body), signature)
