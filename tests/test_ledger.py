from __future__ import annotations

import pytest

from travel_reservations.domain.errors import DuplicateIDError, ReservationNotFoundError
from travel_reservations.domain.models import Reservation, ReservationStatus, ResourceKind
from travel_reservations.services.ledger_service import ReservationLedger


def _record(reservation_id: int, owner: str = "alice",
            status: ReservationStatus = ReservationStatus.PENDING) -> Reservation:
    return Reservation(reservation_id, owner, ResourceKind.FLIGHT, 100, status)


def test_append_rejects_duplicate_id():
    ledger = ReservationLedger()
    ledger.append(_record(1001))

    with pytest.raises(DuplicateIDError):
        ledger.append(_record(1001, owner="bob"))
    assert ledger.find_by_id(1001).owner_username == "alice"


def test_find_unknown_raises():
    with pytest.raises(ReservationNotFoundError):
        ReservationLedger().find_by_id(1234)


def test_set_status_only_changes_status():
    ledger = ReservationLedger()
    ledger.append(_record(1001))

    previous = ledger.set_status(1001, ReservationStatus.APPROVED)

    assert previous.status is ReservationStatus.PENDING
    current = ledger.find_by_id(1001)
    assert current.status is ReservationStatus.APPROVED
    assert (current.owner_username, current.resource_kind, current.resource_id) == (
        "alice",
        ResourceKind.FLIGHT,
        100,
    )


def test_listing_keeps_insertion_order_and_filters():
    ledger = ReservationLedger()
    ledger.append(_record(1003, owner="bob"))
    ledger.append(_record(1001))
    ledger.append(_record(1002, status=ReservationStatus.APPROVED))

    assert [record.id for record in ledger.list_all()] == [1003, 1001, 1002]
    assert [record.id for record in ledger.filter_by_owner("alice")] == [1001, 1002]
    assert [record.id for record in ledger.filter_by_status(ReservationStatus.PENDING)] == [
        1003,
        1001,
    ]
    assert ledger.max_id() == 1003
    assert ledger.status_counts()[ReservationStatus.PENDING] == 2


def test_empty_ledger_has_no_max_id():
    assert ReservationLedger().max_id() is None
