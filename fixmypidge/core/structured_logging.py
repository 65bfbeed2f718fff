"""Structured logging helpers (PII-safe)."""

import logging
from typing import Any


def build_log_context(
    *,
    case_id: str | None = None,
    actor_id: str | None = None,
    event: str | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Return a PII-safe log context dict. Message content never goes here."""
    context: dict[str, Any] = {}
    if case_id:
        context["case_id"] = case_id
    if actor_id:
        context["actor_id"] = actor_id
    if event:
        context["event"] = event
    if request_id:
        context["request_id"] = request_id
    return context


def configure_logging(env: str) -> None:
    """Root logging setup for the API process."""
    logging.basicConfig(
        level=logging.DEBUG if env == "dev" else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
