"""Reservation lifecycle: admission control and status transitions."""

from __future__ import annotations

from threading import RLock
from typing import Callable, Iterator, Optional, Protocol, Sequence

from travel_reservations.domain.constraints import assert_transition
from travel_reservations.domain.errors import (
    InsufficientCapacityError,
    NotAuthorizedError,
    PersistenceFailure,
    ResourceNotFoundError,
)
from travel_reservations.domain.models import (
    FlightResource,
    HotelResource,
    Reservation,
    ReservationStatus,
    ResourceKind,
)
from travel_reservations.services.capacity_service import CapacityOracle
from travel_reservations.services.catalog_service import ResourceCatalog
from travel_reservations.services.id_allocator import ReservationIdAllocator
from travel_reservations.services.ledger_service import ReservationLedger
from travel_reservations.utils.logger import get_logger


logger = get_logger(__name__)


class LedgerStore(Protocol):
    def store_ledger(self, reservations: Sequence[Reservation]) -> None: ...


class ReservationLifecycleController:
    """Creates reservations and moves them through the approval workflow.

    Every operation runs under the shared engine lock, so the capacity
    check in ``request_reservation`` and the append that follows are one
    unit with respect to other callers. Each state change is flushed to
    the store before returning; a failed flush undoes the in-memory change
    and re-raises ``PersistenceFailure``. ``ensure_loaded`` runs first in
    every operation and raises ``EngineNotLoadedError`` outside the
    engine's load/shutdown window.
    """

    def __init__(
        self,
        flights: ResourceCatalog[FlightResource],
        hotels: ResourceCatalog[HotelResource],
        ledger: ReservationLedger,
        oracle: CapacityOracle,
        allocator: ReservationIdAllocator,
        store: LedgerStore,
        lock: Optional[RLock] = None,
        ensure_loaded: Optional[Callable[[], None]] = None,
    ) -> None:
        self._catalogs = {
            ResourceKind.FLIGHT: flights,
            ResourceKind.HOTEL: hotels,
        }
        self._ledger = ledger
        self._oracle = oracle
        self._allocator = allocator
        self._store = store
        self._lock = lock or RLock()
        self._ensure_loaded = ensure_loaded or (lambda: None)

    def _flush(self) -> None:
        self._store.store_ledger(self._ledger.snapshot())

    def request_reservation(
        self,
        username: str,
        resource_kind: ResourceKind,
        resource_id: int,
    ) -> int:
        """Admit a new Pending reservation if the resource has a free slot."""
        kind = ResourceKind(resource_kind)
        with self._lock:
            self._ensure_loaded()
            if resource_id not in self._catalogs[kind]:
                raise ResourceNotFoundError(f"{kind.value} {resource_id} was not found")

            available = self._oracle.raw_available(kind, resource_id)
            if available <= 0:
                logger.info(
                    "Refused reservation for %s on %s %s: no capacity left",
                    username,
                    kind.value.lower(),
                    resource_id,
                )
                raise InsufficientCapacityError(
                    f"{kind.value} {resource_id} has no remaining capacity"
                )

            reservation_id = self._allocator.next()
            self._ledger.append(
                Reservation(
                    id=reservation_id,
                    owner_username=username,
                    resource_kind=kind,
                    resource_id=resource_id,
                    status=ReservationStatus.PENDING,
                )
            )
            try:
                self._flush()
            except PersistenceFailure:
                self._ledger.discard_uncommitted(reservation_id)
                logger.error("Reservation %s was not committed; ledger flush failed", reservation_id)
                raise

        logger.info(
            "Reservation %s created for %s on %s %s",
            reservation_id,
            username,
            kind.value.lower(),
            resource_id,
        )
        return reservation_id

    def _transition(
        self,
        reservation_id: int,
        target: ReservationStatus,
        guard: Optional[Callable[[Reservation], None]] = None,
    ) -> Reservation:
        with self._lock:
            self._ensure_loaded()
            current = self._ledger.find_by_id(reservation_id)
            if guard is not None:
                guard(current)
            assert_transition(reservation_id, current.status, target)
            previous = self._ledger.set_status(reservation_id, target)
            try:
                self._flush()
            except PersistenceFailure:
                self._ledger.set_status(reservation_id, previous.status)
                logger.error(
                    "Reservation %s stays %s; ledger flush failed",
                    reservation_id,
                    previous.status.value,
                )
                raise
            updated = self._ledger.find_by_id(reservation_id)

        logger.info(
            "Reservation %s moved %s -> %s",
            reservation_id,
            previous.status.value,
            target.value,
        )
        return updated

    def _warn_if_over_capacity(self, record: Reservation, action: str) -> None:
        if self._oracle.is_over_capacity(record.resource_kind, record.resource_id):
            logger.warning(
                "%s reservation %s while %s %s is over capacity",
                action,
                record.id,
                record.resource_kind.value.lower(),
                record.resource_id,
            )

    def approve(self, reservation_id: int) -> Reservation:
        # No capacity re-check: admission at request time is authoritative.
        with self._lock:
            updated = self._transition(reservation_id, ReservationStatus.APPROVED)
            self._warn_if_over_capacity(updated, "Approved")
        return updated

    def reject(self, reservation_id: int) -> Reservation:
        return self._transition(reservation_id, ReservationStatus.REJECTED)

    def request_cancellation(self, reservation_id: int, username: str) -> Reservation:
        def require_owner(record: Reservation) -> None:
            if record.owner_username != username:
                raise NotAuthorizedError(
                    f"Reservation {reservation_id} does not belong to {username}"
                )

        return self._transition(
            reservation_id,
            ReservationStatus.CANCEL_REQUESTED,
            guard=require_owner,
        )

    def confirm_cancellation(self, reservation_id: int) -> Reservation:
        return self._transition(reservation_id, ReservationStatus.CANCELLED)

    def deny_cancellation(self, reservation_id: int) -> Reservation:
        # The slot was released on request; taking it back may overbook.
        with self._lock:
            restored = self._transition(reservation_id, ReservationStatus.APPROVED)
            self._warn_if_over_capacity(restored, "Restored")
        return restored

    def get_reservation(self, reservation_id: int) -> Reservation:
        with self._lock:
            self._ensure_loaded()
            return self._ledger.find_by_id(reservation_id)

    def reservations_for(self, username: str) -> Iterator[Reservation]:
        self._ensure_loaded()
        return self._ledger.filter_by_owner(username)

    def reservations_by_status(self, status: ReservationStatus) -> Iterator[Reservation]:
        self._ensure_loaded()
        return self._ledger.filter_by_status(ReservationStatus(status))

    def all_reservations(self) -> Iterator[Reservation]:
        self._ensure_loaded()
        return self._ledger.list_all()
