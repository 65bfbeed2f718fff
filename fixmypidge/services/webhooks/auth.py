"""Shared-secret authentication for automation webhooks."""

from __future__ import annotations

import logging

from fixmypidge.core.config import settings
from fixmypidge.core.exceptions import AuthorizationError
from fixmypidge.core.security import verify_secret

logger = logging.getLogger(__name__)

WEBHOOK_SECRET_HEADER = "x-webhook-secret"


def verify_webhook_secret(provided: str | None) -> None:
    """
    Raise AuthorizationError unless the header matches WEBHOOK_SECRET.

    An unconfigured secret rejects every call. The error never says which
    of the two cases applied.
    """
    if not settings.WEBHOOK_SECRET:
        logger.error("Webhook rejected: WEBHOOK_SECRET is not configured")
        raise AuthorizationError()
    if not verify_secret(provided, settings.WEBHOOK_SECRET):
        logger.warning("Webhook rejected: %s secret", "invalid" if provided else "missing")
        raise AuthorizationError()


def outbound_headers() -> dict[str, str]:
    """Headers that let the automation side authenticate us back."""
    headers = {"X-Source": settings.APP_SOURCE_ID}
    if settings.WEBHOOK_SECRET:
        headers["X-Webhook-Secret"] = settings.WEBHOOK_SECRET
    return headers
