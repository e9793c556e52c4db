"""Durable, strictly increasing reservation id allocation."""

from __future__ import annotations

from threading import Lock
from typing import Optional, Protocol

from travel_reservations.utils.logger import get_logger


logger = get_logger(__name__)

DEFAULT_ID_FLOOR = 1000


class LastIssuedIdStore(Protocol):
    def load_last_issued_id(self) -> Optional[int]: ...

    def store_last_issued_id(self, value: int) -> None: ...


class ReservationIdAllocator:
    """Issues ids that are never reused, including across restarts.

    The floor is treated as the last value issued on an empty store, so
    the first id handed out is ``floor + 1``. Each new value is written
    to the store before it is returned.
    """

    def __init__(
        self,
        store: LastIssuedIdStore,
        floor: int = DEFAULT_ID_FLOOR,
    ) -> None:
        self._store = store
        self._floor = floor
        self._lock = Lock()
        self._last_issued: Optional[int] = None

    @property
    def initialized(self) -> bool:
        return self._last_issued is not None

    def initialize(self, ledger_max_id: Optional[int] = None) -> int:
        """Load the persisted counter once; later calls return the cached value."""
        with self._lock:
            return self._initialize_locked(ledger_max_id)

    def _initialize_locked(self, ledger_max_id: Optional[int] = None) -> int:
        if self._last_issued is not None:
            return self._last_issued
        persisted = self._store.load_last_issued_id()
        base = self._floor if persisted is None else max(self._floor, persisted)
        self._last_issued = base
        if ledger_max_id is not None and ledger_max_id > base:
            self._last_issued = ledger_max_id
            logger.warning(
                "Persisted last issued id %s is behind ledger max id %s; resuming after %s",
                persisted,
                ledger_max_id,
                self._last_issued,
            )
        return self._last_issued

    def next(self) -> int:
        with self._lock:
            last = self._initialize_locked()
            candidate = last + 1
            self._store.store_last_issued_id(candidate)
            self._last_issued = candidate
            return candidate

    def peek_last_issued(self) -> int:
        with self._lock:
            return self._initialize_locked()
