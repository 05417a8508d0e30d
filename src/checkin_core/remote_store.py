"""
Remote Record Store Clients.

The remote store is authoritative for check-ins and journal entries.
Rows travel as JSON in the backend's snake_case shape and are converted
to models at this boundary. Every call is scoped to an authenticated user.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

import httpx

from .errors import (
    AuthorizationError,
    RecordNotFoundError,
    RecordValidationError,
    RemoteUnavailableError,
)
from .models import (
    CheckInDraft,
    CheckInRecord,
    JournalEntry,
    JournalEntryDraft,
    JournalEntryUpdate,
    check_in_to_row,
    row_to_check_in,
    row_to_journal_entry,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _require_user(user_id: Optional[str]) -> str:
    if not user_id:
        raise AuthorizationError("You must be logged in to access this resource")
    return user_id


def _expect_rows(body: Any, path: str) -> list:
    """A missing body means no rows; anything else must be a JSON array."""
    if body is None:
        return []
    if not isinstance(body, list):
        logger.error(f"[REMOTE] GET {path} returned {type(body).__name__}, expected a list")
        raise RemoteUnavailableError(f"Backend returned a malformed listing for {path}")
    return body


def _convert(converter: Callable[[Any], T], row: Any, path: str) -> T:
    """Convert one backend row, reporting a malformed row as a backend failure."""
    try:
        return converter(row)
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"[REMOTE] Malformed row from {path}: {e!r}")
        raise RemoteUnavailableError(f"Backend returned a malformed row for {path}") from e


class RemoteRecordStore(ABC):
    """Contract the record store needs from the remote backend."""

    @abstractmethod
    async def fetch_check_ins(self, user_id: Optional[str]) -> List[CheckInRecord]:
        ...

    @abstractmethod
    async def create_check_in(
        self,
        user_id: Optional[str],
        slot: str,
        mood: int,
        stress: int,
        energy: int,
        note: Optional[str] = None,
    ) -> CheckInRecord:
        ...

    @abstractmethod
    async def fetch_journal_entries(self, user_id: Optional[str]) -> List[JournalEntry]:
        ...

    @abstractmethod
    async def create_journal_entry(
        self, user_id: Optional[str], draft: JournalEntryDraft
    ) -> JournalEntry:
        ...

    @abstractmethod
    async def update_journal_entry(
        self, user_id: Optional[str], entry_id: str, updates: JournalEntryUpdate
    ) -> JournalEntry:
        ...

    @abstractmethod
    async def delete_journal_entry(self, user_id: Optional[str], entry_id: str) -> None:
        ...

    async def aclose(self) -> None:
        """Release any held connections."""


class HttpRemoteRecordStore(RemoteRecordStore):
    """
    Remote store reached over HTTP with a bearer token.

    Endpoints (relative to base_url):
        GET/POST     /checkins
        GET/POST     /journal
        PATCH/DELETE /journal/{entry_id}
    """

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the HTTP remote store.

        Args:
            base_url: Root URL of the record backend
            access_token: Bearer token of the signed-in user
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to stub the backend)
        """
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

        logger.info(f"[REMOTE] HTTP record store at {self.base_url}")

    async def _request(
        self,
        method: str,
        path: str,
        user_id: Optional[str],
        payload: Optional[dict] = None,
    ) -> Any:
        _require_user(user_id)
        if not self.access_token:
            raise AuthorizationError("No access token for the signed-in user")

        try:
            response = await self._client.request(
                method,
                path,
                json=payload,
                headers={"Authorization": f"Bearer {self.access_token}"},
            )
        except httpx.HTTPError as e:
            logger.error(f"[REMOTE] {method} {path} failed: {e}")
            raise RemoteUnavailableError(f"{method} {path} failed: {e}") from e

        status = response.status_code
        if status in (401, 403):
            raise AuthorizationError(f"{method} {path} rejected with status {status}")
        if status == 404:
            raise RecordNotFoundError(f"{method} {path} not found")
        if status in (400, 422):
            raise RecordValidationError(f"{method} {path} rejected: {response.text}")
        if status >= 300:
            logger.warning(f"[REMOTE] {method} {path} returned {status}: {response.text}")
            raise RemoteUnavailableError(f"Backend returned status {status}: {response.text}")

        if status == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteUnavailableError(f"Backend returned invalid JSON for {path}") from e

    async def fetch_check_ins(self, user_id: Optional[str]) -> List[CheckInRecord]:
        rows = _expect_rows(await self._request("GET", "/checkins", user_id), "/checkins")
        return [_convert(row_to_check_in, row, "/checkins") for row in rows]

    async def create_check_in(
        self,
        user_id: Optional[str],
        slot: str,
        mood: int,
        stress: int,
        energy: int,
        note: Optional[str] = None,
    ) -> CheckInRecord:
        draft = CheckInDraft(slot=slot, mood=mood, stress=stress, energy=energy, note=note)
        row = await self._request("POST", "/checkins", user_id, draft.model_dump())
        return _convert(row_to_check_in, row, "/checkins")

    async def fetch_journal_entries(self, user_id: Optional[str]) -> List[JournalEntry]:
        rows = _expect_rows(await self._request("GET", "/journal", user_id), "/journal")
        return [_convert(row_to_journal_entry, row, "/journal") for row in rows]

    async def create_journal_entry(
        self, user_id: Optional[str], draft: JournalEntryDraft
    ) -> JournalEntry:
        row = await self._request("POST", "/journal", user_id, draft.model_dump())
        return _convert(row_to_journal_entry, row, "/journal")

    async def update_journal_entry(
        self, user_id: Optional[str], entry_id: str, updates: JournalEntryUpdate
    ) -> JournalEntry:
        row = await self._request(
            "PATCH", f"/journal/{entry_id}", user_id, updates.model_dump(exclude_unset=True)
        )
        return _convert(row_to_journal_entry, row, f"/journal/{entry_id}")

    async def delete_journal_entry(self, user_id: Optional[str], entry_id: str) -> None:
        await self._request("DELETE", f"/journal/{entry_id}", user_id)

    async def aclose(self) -> None:
        await self._client.aclose()


class InMemoryRemoteRecordStore(RemoteRecordStore):
    """
    Remote store kept in process memory, for local development and tests.

    Set `available = False` to simulate a backend outage.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._check_ins: Dict[str, List[dict]] = {}
        self._journal: Dict[str, List[dict]] = {}
        self.available = True
        self.calls: List[str] = []

    def _enter(self, operation: str, user_id: Optional[str]) -> str:
        self.calls.append(operation)
        user_id = _require_user(user_id)
        if not self.available:
            raise RemoteUnavailableError(f"{operation} failed: backend unavailable")
        return user_id

    def seed_check_ins(self, user_id: str, records: Iterable[CheckInRecord]) -> None:
        """Insert existing check-ins without going through create_check_in."""
        rows = self._check_ins.setdefault(user_id, [])
        for record in records:
            row = check_in_to_row(record)
            row["user_id"] = user_id
            rows.append(row)

    async def fetch_check_ins(self, user_id: Optional[str]) -> List[CheckInRecord]:
        user_id = self._enter("fetch_check_ins", user_id)
        rows = sorted(self._check_ins.get(user_id, []), key=lambda r: r["created_at"], reverse=True)
        return [row_to_check_in(row) for row in rows]

    async def create_check_in(
        self,
        user_id: Optional[str],
        slot: str,
        mood: int,
        stress: int,
        energy: int,
        note: Optional[str] = None,
    ) -> CheckInRecord:
        user_id = self._enter("create_check_in", user_id)
        draft = CheckInDraft(slot=slot, mood=mood, stress=stress, energy=energy, note=note)
        row = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            **draft.model_dump(),
            "created_at": self._clock().isoformat(),
        }
        self._check_ins.setdefault(user_id, []).append(row)
        return row_to_check_in(row)

    async def fetch_journal_entries(self, user_id: Optional[str]) -> List[JournalEntry]:
        user_id = self._enter("fetch_journal_entries", user_id)
        rows = sorted(self._journal.get(user_id, []), key=lambda r: r["created_at"], reverse=True)
        return [row_to_journal_entry(row) for row in rows]

    async def create_journal_entry(
        self, user_id: Optional[str], draft: JournalEntryDraft
    ) -> JournalEntry:
        user_id = self._enter("create_journal_entry", user_id)
        row = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            **draft.model_dump(),
            "created_at": self._clock().isoformat(),
        }
        self._journal.setdefault(user_id, []).append(row)
        return row_to_journal_entry(row)

    def _find_entry(self, user_id: str, entry_id: str) -> dict:
        for row in self._journal.get(user_id, []):
            if row["id"] == entry_id:
                return row
        raise RecordNotFoundError(f"Journal entry {entry_id} not found")

    async def update_journal_entry(
        self, user_id: Optional[str], entry_id: str, updates: JournalEntryUpdate
    ) -> JournalEntry:
        user_id = self._enter("update_journal_entry", user_id)
        row = self._find_entry(user_id, entry_id)
        row.update(updates.model_dump(exclude_unset=True))
        return row_to_journal_entry(row)

    async def delete_journal_entry(self, user_id: Optional[str], entry_id: str) -> None:
        user_id = self._enter("delete_journal_entry", user_id)
        row = self._find_entry(user_id, entry_id)
        self._journal[user_id].remove(row)
