"""Contract for inbound webhook handlers registered in services.webhooks.registry."""

from __future__ import annotations

from typing import Protocol

from fastapi import Request
from sqlalchemy.orm import Session

# {"success": bool, "duplicate": bool}
WebhookAckDict = dict[str, bool]


class WebhookHandler(Protocol):
    async def handle(self, request: Request, db: Session, **kwargs) -> WebhookAckDict:
        """
        Authenticate, parse and apply one delivery.

        The shared secret is verified before the body is read. Domain errors
        (AuthorizationError, ValidationError, NotFoundError, DependencyError)
        propagate to the app's exception handler.
        """
