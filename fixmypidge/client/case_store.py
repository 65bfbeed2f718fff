"""
Client-side projection of the citizen's cases.

The store is the single source of what the UI renders. It never merges
optimistically: every mutation is followed by a re-fetch of its scope
(the whole list after create_case, the single case after send_message or
upload_photo), because the automation pipeline can change any case at any
time. A failed fetch leaves the previously held state in place.
"""

import logging
from typing import Any, BinaryIO
from uuid import UUID

from fixmypidge.client.base import ApiClient
from fixmypidge.core.exceptions import AppError, ValidationError
from fixmypidge.schemas.case import CaseCreate, CaseRead

logger = logging.getLogger(__name__)


class CaseSyncStore:
    """Reloadable in-memory view of cases, passed to the views that render it.

    Usage:
        async with ApiClient(base_url, token=token) as api:
            store = CaseSyncStore(api)
            await store.list_cases()
            case_id = await store.create_case({"title": "Pigeon", "category": "wing_injury"})
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.cases: list[CaseRead] = []
        self.current_case: CaseRead | None = None
        self.loading = False
        self.last_error: Exception | None = None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_cases(self) -> list[CaseRead]:
        """Fetch every visible case, newest first.

        Raises:
            DependencyError: API or store unavailable; `cases` is left as it was
        """
        self.loading = True
        try:
            response = await self.api.request("GET", "/cases")
            cases = [CaseRead.model_validate(item) for item in response.json()]
        except AppError as exc:
            self.last_error = exc
            raise
        finally:
            self.loading = False

        self.cases = cases
        self.last_error = None
        return cases

    async def get_case(self, case_id: UUID | str) -> CaseRead:
        """Fetch one case with photos and messages.

        Raises:
            NotFoundError: Unknown id, or a case owned by someone else
        """
        self.loading = True
        try:
            response = await self.api.request("GET", f"/cases/{case_id}")
            case = CaseRead.model_validate(response.json())
        except AppError as exc:
            self.last_error = exc
            raise
        finally:
            self.loading = False

        self.current_case = case
        self._replace_in_list(case)
        self.last_error = None
        return case

    def _replace_in_list(self, case: CaseRead) -> None:
        for index, existing in enumerate(self.cases):
            if existing.id == case.id:
                self.cases[index] = case
                return

    async def _refresh(self, refresh) -> None:
        # The mutation is already committed; a failed refresh must not look like a failed write
        try:
            await refresh()
        except AppError as exc:
            logger.warning("Refresh after mutation failed (%s)", type(exc).__name__)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_case(self, fields: CaseCreate | dict[str, Any]) -> UUID:
        """Report a bird, then reload the case list. Returns the new id."""
        data = fields if isinstance(fields, CaseCreate) else CaseCreate.model_validate(fields)
        response = await self.api.request(
            "POST",
            "/cases",
            json=data.model_dump(mode="json", exclude_none=True),
        )
        case_id = UUID(response.json()["id"])
        await self._refresh(self.list_cases)
        return case_id

    async def send_message(self, case_id: UUID | str, content: str) -> None:
        """Append a citizen message, then reload only that case."""
        if not content or not content.strip():
            raise ValidationError("Message content must not be empty")

        await self.api.request("POST", f"/cases/{case_id}/messages", json={"content": content})
        await self._refresh(lambda: self.get_case(case_id))

    async def upload_photo(
        self,
        case_id: UUID | str,
        file: bytes | BinaryIO,
        filename: str,
        content_type: str = "image/jpeg",
        message_id: UUID | str | None = None,
    ) -> str:
        """Upload an image for the case (or one of its messages). Returns its URL.

        Raises:
            ValidationError: Not an image, too large, or message of another case
        """
        form: dict[str, str] = {}
        if message_id is not None:
            form["message_id"] = str(message_id)
        response = await self.api.request(
            "POST",
            f"/cases/{case_id}/photos",
            files={"file": (filename, file, content_type)},
            data=form,
        )
        photo_url = response.json()["photo_url"]
        await self._refresh(lambda: self.get_case(case_id))
        return photo_url
