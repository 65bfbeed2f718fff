"""Webhook handler registry."""

from __future__ import annotations

from fixmypidge.services.webhooks.automation import AutomationWebhookHandler
from fixmypidge.services.webhooks.base import WebhookHandler

_HANDLERS: dict[str, WebhookHandler] = {
    "automation": AutomationWebhookHandler(),
}


def get_handler(name: str):
    handler = _HANDLERS.get(name)
    if not handler:
        raise KeyError(f"Unknown webhook handler: {name}")
    return handler
