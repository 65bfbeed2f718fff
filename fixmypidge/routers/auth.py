"""Session endpoints used by the client at startup."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from fixmypidge.core.deps import get_current_actor

router = APIRouter()


class SessionResponse(BaseModel):
    user_id: str


@router.get("/session", response_model=SessionResponse)
def get_session(actor_id: str = Depends(get_current_actor)):
    """Return the authenticated citizen, or 401."""
    return SessionResponse(user_id=actor_id)
