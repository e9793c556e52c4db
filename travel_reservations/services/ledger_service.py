"""Append-mostly ledger of reservation records."""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import Iterable, Iterator, Optional

from travel_reservations.domain.constraints import CAPACITY_HOLDING_STATUSES
from travel_reservations.domain.errors import DuplicateIDError, ReservationNotFoundError
from travel_reservations.domain.models import Reservation, ReservationStatus, ResourceKind


class ReservationLedger:
    """All reservation records keyed by id, enumerated in insertion order.

    Records are never deleted; status is the only field that changes.
    Readers iterate a copy, so they may run outside the engine lock.
    """

    def __init__(self) -> None:
        self._records: dict[int, Reservation] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, reservation_id: object) -> bool:
        return reservation_id in self._records

    def load(self, reservations: Iterable[Reservation]) -> None:
        loaded: dict[int, Reservation] = {}
        for reservation in reservations:
            if reservation.id in loaded:
                raise DuplicateIDError(
                    f"Reservation {reservation.id} appears twice in persisted state"
                )
            loaded[reservation.id] = reservation
        self._records = loaded

    def append(self, record: Reservation) -> Reservation:
        if record.id in self._records:
            raise DuplicateIDError(f"Reservation {record.id} already exists")
        self._records[record.id] = record
        return record

    def discard_uncommitted(self, reservation_id: int) -> None:
        """Drop a just-appended record whose flush failed in the same call."""
        self._records.pop(reservation_id, None)

    def find_by_id(self, reservation_id: int) -> Reservation:
        try:
            return self._records[reservation_id]
        except KeyError:
            raise ReservationNotFoundError(
                f"Reservation {reservation_id} was not found"
            ) from None

    def set_status(self, reservation_id: int, new_status: ReservationStatus) -> Reservation:
        """Overwrite the status field and return the previous record."""
        previous = self.find_by_id(reservation_id)
        self._records[reservation_id] = replace(previous, status=new_status)
        return previous

    def list_all(self) -> Iterator[Reservation]:
        for record in list(self._records.values()):
            yield record

    def filter_by_status(self, status: ReservationStatus) -> Iterator[Reservation]:
        for record in self.list_all():
            if record.status is status:
                yield record

    def filter_by_owner(self, username: str) -> Iterator[Reservation]:
        for record in self.list_all():
            if record.owner_username == username:
                yield record

    def count_holding(self, kind: ResourceKind, resource_id: int) -> int:
        return sum(
            1
            for record in list(self._records.values())
            if record.resource_kind is kind
            and record.resource_id == resource_id
            and record.status in CAPACITY_HOLDING_STATUSES
        )

    def status_counts(self) -> Counter[ReservationStatus]:
        return Counter(record.status for record in list(self._records.values()))

    def max_id(self) -> Optional[int]:
        if not self._records:
            return None
        return max(list(self._records))

    def snapshot(self) -> list[Reservation]:
        return list(self._records.values())
