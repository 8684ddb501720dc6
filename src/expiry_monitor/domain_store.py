"""
Authoritative in-memory collection of domain records.

Every change to the collection goes through one of four entry points
(load_all, add, remove, refresh). Each performs the matching SyncClient
round trip, then applies the result in a single step, so a failed call
leaves the collection exactly as it was. Observers are notified with an
immutable snapshot after every change.

The store runs on one asyncio loop and suspends only while a request is in
flight. Operations on different ids may overlap freely; for the same id the
store refuses a second delete and refuses refreshes while a delete is
pending.
"""

from dataclasses import replace
from typing import Callable, Optional, Protocol

from .audit_logger import AuditLogger
from .enums import LogLevel, SyncErrorCode, TransientOp
from .exceptions import (
    DeleteError,
    MonitorError,
    NetworkError,
    RefreshError,
    ValidationError,
)
from .models import DomainRecord, StoreSnapshot

Listener = Callable[[StoreSnapshot], None]


class RecordSource(Protocol):
    """The subset of SyncClient the store depends on."""

    async def fetch_all(self) -> list[DomainRecord]: ...

    async def create(self, domain_name: str) -> DomainRecord: ...

    async def delete_one(self, record_id: str) -> None: ...

    async def refresh_one(self, record_id: str) -> DomainRecord: ...


def _unique_by_id(records: list[DomainRecord]) -> list[DomainRecord]:
    """Drop later duplicates of an id, keeping the first occurrence."""
    seen: set[str] = set()
    unique = []
    for record in records:
        if record.id in seen:
            continue
        seen.add(record.id)
        unique.append(record)
    return unique


class DomainStore:
    """
    Ordered collection of DomainRecords with per-record transient state.

    Busy flags (``loading``, ``creating``) and each record's ``transient_op``
    let callers disable controls that would issue a duplicate request.
    """

    COMPONENT = "DomainStore"

    def __init__(
        self,
        client: RecordSource,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize an empty store.

        Args:
            client: Remote record source (normally a SyncClient)
            logger: Optional logger for applied and failed mutations
        """
        self._client = client
        self._logger = logger
        self._records: list[DomainRecord] = []
        self._pending_loads = 0
        self._pending_creates = 0
        self._listeners: list[Listener] = []
        self._last_load_error: Optional[NetworkError] = None

    # ------------------------------------------------------------------
    # Read side

    @property
    def records(self) -> tuple[DomainRecord, ...]:
        return tuple(self._records)

    @property
    def loading(self) -> bool:
        """True while at least one bulk fetch is in flight."""
        return self._pending_loads > 0

    @property
    def creating(self) -> bool:
        """True while at least one create request is in flight."""
        return self._pending_creates > 0

    @property
    def last_load_error(self) -> Optional[NetworkError]:
        """The error from the most recent failed bulk fetch, cleared on success."""
        return self._last_load_error

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            records=tuple(self._records),
            loading=self.loading,
            creating=self.creating,
        )

    def get(self, record_id: str) -> Optional[DomainRecord]:
        index = self._index_of(record_id)
        return None if index is None else self._records[index]

    def is_deleting(self, record_id: str) -> bool:
        record = self.get(record_id)
        return record is not None and record.is_deleting

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callable that receives a snapshot after every change.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Mutations

    async def load_all(self) -> list[DomainRecord]:
        """
        Replace the whole collection with the service's current listing.

        On failure the collection is emptied rather than left stale and the
        error is kept in ``last_load_error``. Overlapping calls each issue a
        request; whichever completes last wins.

        Returns:
            The records now held by the store
        """
        self._pending_loads += 1
        try:
            self._emit()
            fetched = await self._client.fetch_all()
        except NetworkError as e:
            self._last_load_error = e
            self._records = []
            self._log_error("Bulk fetch failed, collection emptied", e)
        else:
            self._last_load_error = None
            self._records = _unique_by_id(list(fetched))
            self._log(
                LogLevel.INFO,
                f"Loaded {len(self._records)} domain(s)",
                {"count": len(self._records)},
            )
        finally:
            self._pending_loads -= 1
            self._emit()
        return list(self._records)

    async def add(self, domain_name: str) -> DomainRecord:
        """
        Create a record on the service and prepend it to the collection.

        Args:
            domain_name: Hostname to track; surrounding whitespace is removed

        Returns:
            The created record, now at index 0

        Raises:
            ValidationError: If the trimmed name is empty (no request is made)
            CreateError: If the service rejects the request
        """
        name = (domain_name or "").strip()
        if not name:
            raise ValidationError(
                code=SyncErrorCode.EMPTY_INPUT.value,
                message="Domain input is empty",
                details={"raw_input": domain_name},
            )

        self._pending_creates += 1
        try:
            self._emit()
            created = await self._client.create(name)
        except MonitorError as e:
            self._log_error(f"Failed to add domain {name}", e, {"domain": name})
            raise
        else:
            # A create that echoes an id we already hold replaces that entry.
            self._records = [created] + [r for r in self._records if r.id != created.id]
            self._log(
                LogLevel.INFO,
                f"Added domain {created.domain_name}",
                {"id": created.id, "domain": created.domain_name},
            )
            return created
        finally:
            self._pending_creates -= 1
            self._emit()

    async def remove(self, record_id: str) -> None:
        """
        Delete a record on the service, then drop it from the collection.

        The record is marked DELETING for the duration of the request and
        returns to NONE if the request fails or is cancelled.

        Raises:
            DeleteError: If the record is unknown, already being deleted,
                or the service rejects the request
        """
        record = self.get(record_id)
        if record is None:
            raise DeleteError(
                code=SyncErrorCode.UNKNOWN_RECORD.value,
                message=f"No domain with id {record_id}",
                details={"id": record_id},
            )
        if record.is_deleting:
            raise DeleteError(
                code=SyncErrorCode.DELETE_IN_PROGRESS.value,
                message=f"Domain {record.domain_name} is already being deleted",
                details={"id": record_id},
            )

        try:
            self._set_transient_op(record_id, TransientOp.DELETING)
            await self._client.delete_one(record_id)
        except MonitorError as e:
            self._set_transient_op(record_id, TransientOp.NONE)
            self._log_error(
                f"Failed to delete domain {record.domain_name}",
                e,
                {"id": record_id},
            )
            raise
        except BaseException:
            # Cancellation and unexpected client errors must not strand the flag.
            self._set_transient_op(record_id, TransientOp.NONE)
            raise

        self._records = [r for r in self._records if r.id != record_id]
        self._log(
            LogLevel.INFO,
            f"Removed domain {record.domain_name}",
            {"id": record_id, "domain": record.domain_name},
        )
        self._emit()

    async def refresh(self, record_id: str) -> DomainRecord:
        """
        Re-resolve one record and replace it wholesale with the result.

        Fields the service no longer reports are cleared, not kept. If the
        record was removed or put under deletion while the request was in
        flight, the response is discarded.

        Returns:
            The record as returned by the service

        Raises:
            RefreshError: If the record is unknown, being deleted, the
                service fails, or the response belongs to a different id
        """
        record = self.get(record_id)
        if record is None:
            raise RefreshError(
                code=SyncErrorCode.UNKNOWN_RECORD.value,
                message=f"No domain with id {record_id}",
                details={"id": record_id},
            )
        if record.is_deleting:
            raise RefreshError(
                code=SyncErrorCode.DELETE_IN_PROGRESS.value,
                message=f"Domain {record.domain_name} is being deleted",
                details={"id": record_id},
            )

        try:
            updated = await self._client.refresh_one(record_id)
        except MonitorError as e:
            self._log_error(
                f"Failed to refresh domain {record.domain_name}",
                e,
                {"id": record_id},
            )
            raise

        if updated.id != record_id:
            error = RefreshError(
                code=SyncErrorCode.ID_MISMATCH.value,
                message=f"Refresh of {record_id} returned record {updated.id}",
                details={"id": record_id, "returned_id": updated.id},
            )
            self._log_error("Discarded refresh response", error)
            raise error

        index = self._index_of(record_id)
        if index is None or self._records[index].is_deleting:
            self._log(
                LogLevel.WARN,
                f"Discarded refresh of {record.domain_name}: record changed while in flight",
                {"id": record_id},
            )
            return updated

        self._records[index] = replace(updated, transient_op=TransientOp.NONE)
        self._log(
            LogLevel.INFO,
            f"Refreshed domain {updated.domain_name}",
            {"id": record_id, "sync_status": updated.sync_status.value},
        )
        self._emit()
        return updated

    # ------------------------------------------------------------------
    # Internals

    def _index_of(self, record_id: str) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        return None

    def _set_transient_op(self, record_id: str, op: TransientOp) -> None:
        index = self._index_of(record_id)
        if index is None:
            return
        self._records[index] = replace(self._records[index], transient_op=op)
        self._emit()

    def _emit(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    def _log(self, level: LogLevel, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(level, self.COMPONENT, message, data)

    def _log_error(
        self,
        message: str,
        error: Exception,
        data: Optional[dict] = None,
    ) -> None:
        if self._logger:
            self._logger.log_error(self.COMPONENT, message, error=error, additional_data=data)
