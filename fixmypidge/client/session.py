"""Session bootstrap with a bounded wait."""

import logging
from dataclasses import dataclass

import anyio

from fixmypidge.client.base import ApiClient
from fixmypidge.core.exceptions import AppError

logger = logging.getLogger(__name__)

DEFAULT_BOOTSTRAP_TIMEOUT = 5.0


@dataclass(frozen=True)
class ClientSession:
    user_id: str | None = None

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = ClientSession()


async def bootstrap_session(
    api: ApiClient,
    timeout: float = DEFAULT_BOOTSTRAP_TIMEOUT,
) -> ClientSession:
    """
    Resolve who the client is signed in as.

    Never hangs and never raises: a timeout, a rejected token or an
    unreachable API all degrade to an anonymous session.
    """
    if not api.token:
        return ANONYMOUS
    try:
        with anyio.fail_after(timeout):
            response = await api.request("GET", "/auth/session")
        user_id = response.json().get("user_id")
    except TimeoutError:
        logger.warning("Session bootstrap timed out after %.1fs", timeout)
        return ANONYMOUS
    except (AppError, ValueError) as exc:
        logger.warning("Session bootstrap failed (%s)", type(exc).__name__)
        return ANONYMOUS

    if not user_id:
        return ANONYMOUS
    return ClientSession(user_id=str(user_id))
