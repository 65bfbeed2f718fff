"""Outbound events to the automation pipeline (case created, message sent)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import urlsplit

import httpx

from fixmypidge.core.config import settings
from fixmypidge.db.enums import OutboundEventType
from fixmypidge.db.models import Case, Message
from fixmypidge.schemas.case import CaseRead, MessageRead
from fixmypidge.services.webhooks.auth import outbound_headers

logger = logging.getLogger(__name__)

# Strong references to in-flight deliveries until they finish
_pending: set[asyncio.Task] = set()


def safe_url(url: str | None) -> str:
    if not url:
        return ""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}{parts.path}"


def build_case_created_payload(case: Case) -> dict[str, Any]:
    snapshot = CaseRead.from_case(case).model_dump(mode="json", exclude={"photos", "messages"})
    return {
        "event": OutboundEventType.CASE_CREATED.value,
        "case_id": str(case.id),
        "case": snapshot,
    }


def build_message_sent_payload(message: Message) -> dict[str, Any]:
    snapshot = MessageRead.model_validate(message).model_dump(mode="json", exclude={"photos"})
    return {
        "event": OutboundEventType.MESSAGE_SENT.value,
        "case_id": str(message.case_id),
        "message_id": str(message.id),
        "message": snapshot,
    }


async def deliver_event(
    payload: dict[str, Any],
    *,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """
    POST one event to the automation pipeline. Single attempt, never raises.

    Returns True when the pipeline acknowledged with a 2xx.
    """
    webhook_url = settings.AUTOMATION_WEBHOOK_URL
    event_name = payload.get("event")
    if not webhook_url:
        logger.info("Automation webhook URL not configured; skipping %s", event_name)
        return False

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=settings.AUTOMATION_TIMEOUT_SECONDS)
    try:
        response = await http.post(webhook_url, json=payload, headers=outbound_headers())
    except httpx.HTTPError as exc:
        logger.warning(
            "Automation event %s failed: %s (%s)",
            event_name,
            safe_url(webhook_url),
            type(exc).__name__,
        )
        return False
    finally:
        if owns_client:
            await http.aclose()

    if not response.is_success:
        logger.warning(
            "Automation event %s rejected: %s returned %s",
            event_name,
            safe_url(webhook_url),
            response.status_code,
        )
        return False

    logger.info("Automation event %s delivered: %s", event_name, safe_url(webhook_url))
    return True


def _on_delivery_done(task: asyncio.Task) -> None:
    _pending.discard(task)
    if task.cancelled():
        logger.warning("Automation delivery cancelled: %s", task.get_name())
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            "Automation delivery crashed: %s",
            task.get_name(),
            exc_info=(type(exc), exc, exc.__traceback__),
        )


def dispatch_event(payload: dict[str, Any]) -> asyncio.Task | None:
    """
    Fire-and-forget delivery.

    The caller's operation has already committed; the returned task is never
    awaited on the request path and its failures only reach the log.
    """
    if not settings.AUTOMATION_WEBHOOK_URL:
        logger.info(
            "Automation webhook URL not configured; skipping %s", payload.get("event")
        )
        return None
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.warning("No running event loop; dropping %s", payload.get("event"))
        return None

    task = loop.create_task(deliver_event(payload), name=f"automation:{payload.get('event')}")
    _pending.add(task)
    task.add_done_callback(_on_delivery_done)
    return task


def pending_count() -> int:
    return len(_pending)


async def drain_pending(timeout: float = 5.0) -> None:
    """Give in-flight deliveries a bounded chance to finish (shutdown)."""
    if not _pending:
        return
    _, not_done = await asyncio.wait(set(_pending), timeout=timeout)
    for task in not_done:
        task.cancel()
    if not_done:
        logger.warning("Cancelled %d automation deliveries on shutdown", len(not_done))
