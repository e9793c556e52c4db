"""In-process persistence collaborator for tests and ephemeral runs."""

from __future__ import annotations

from threading import Lock
from typing import Optional, Sequence

from travel_reservations.domain.models import Reservation, Resource, ResourceKind, UserAccount


class MemoryRepository:
    """Keeps snapshots in dictionaries; survives engine restarts, not process exit."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._resources: dict[ResourceKind, tuple[Resource, ...]] = {
            ResourceKind.FLIGHT: (),
            ResourceKind.HOTEL: (),
        }
        self._ledger: tuple[Reservation, ...] = ()
        self._last_issued_id: Optional[int] = None
        self._users: dict[str, UserAccount] = {}
        self.store_calls = 0

    def load_resources(self, kind: ResourceKind) -> Sequence[Resource]:
        with self._lock:
            return list(self._resources[kind])

    def store_resources(self, kind: ResourceKind, resources: Sequence[Resource]) -> None:
        with self._lock:
            self._resources[kind] = tuple(resources)
            self.store_calls += 1

    def load_ledger(self) -> Sequence[Reservation]:
        with self._lock:
            return list(self._ledger)

    def store_ledger(self, reservations: Sequence[Reservation]) -> None:
        with self._lock:
            self._ledger = tuple(reservations)
            self.store_calls += 1

    def load_last_issued_id(self) -> Optional[int]:
        with self._lock:
            return self._last_issued_id

    def store_last_issued_id(self, value: int) -> None:
        with self._lock:
            self._last_issued_id = value
            self.store_calls += 1

    def load_users(self) -> Sequence[UserAccount]:
        with self._lock:
            return list(self._users.values())

    def store_user(self, account: UserAccount) -> None:
        with self._lock:
            self._users[account.username] = account

    def delete_user(self, username: str) -> None:
        with self._lock:
            self._users.pop(username, None)
