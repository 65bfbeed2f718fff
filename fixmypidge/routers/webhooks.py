"""Webhooks router - automation pipeline integration."""

import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from fixmypidge.core.config import settings
from fixmypidge.core.deps import get_db
from fixmypidge.core.exceptions import ValidationError
from fixmypidge.core.rate_limit import WEBHOOK_LIMIT, limiter
from fixmypidge.schemas.webhook import WebhookAck
from fixmypidge.services import automation_outbound_service
from fixmypidge.services.webhooks.auth import WEBHOOK_SECRET_HEADER, verify_webhook_secret
from fixmypidge.services.webhooks.registry import get_handler

router = APIRouter()


@router.post("/automation", response_model=WebhookAck)
@limiter.limit(WEBHOOK_LIMIT)
async def receive_automation_webhook(
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Receive an automation event (expert message or status update).

    Security:
    - x-webhook-secret must match WEBHOOK_SECRET (checked first)
    - Payload size capped by WEBHOOK_MAX_PAYLOAD_BYTES

    Processing:
    - One transaction per event; redeliveries are acknowledged as duplicates
    """
    handler = get_handler("automation")
    return await handler.handle(request, db)


@router.post("/notify")
async def relay_to_automation(request: Request):
    """
    Forward a body verbatim to the automation pipeline.

    Authenticated with the same shared secret as inbound calls.
    """
    verify_webhook_secret(request.headers.get(WEBHOOK_SECRET_HEADER))

    try:
        payload = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid JSON")

    if not settings.automation_enabled:
        return JSONResponse(
            status_code=503, content={"detail": "Automation webhook URL not configured"}
        )

    delivered = await automation_outbound_service.deliver_event(payload)
    if not delivered:
        return JSONResponse(status_code=502, content={"detail": "Automation webhook failed"})
    return {"success": True}
