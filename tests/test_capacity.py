from __future__ import annotations

from travel_reservations.domain.models import (
    FlightResource,
    HotelResource,
    Reservation,
    ReservationStatus,
    ResourceKind,
)
from travel_reservations.services.capacity_service import CapacityOracle
from travel_reservations.services.catalog_service import ResourceCatalog
from travel_reservations.services.ledger_service import ReservationLedger


def _build_oracle(seats: int = 3, rooms: int = 2):
    flights: ResourceCatalog[FlightResource] = ResourceCatalog(ResourceKind.FLIGHT)
    hotels: ResourceCatalog[HotelResource] = ResourceCatalog(ResourceKind.HOTEL)
    flights.create(FlightResource(100, "Lisbon", "Paris", "08:15", "11:40", seats))
    hotels.create(HotelResource(200, "Hotel Avenida", "Paris", rooms))
    ledger = ReservationLedger()
    return CapacityOracle(flights, hotels, ledger), flights, ledger


def _add(ledger: ReservationLedger, reservation_id: int, status: ReservationStatus,
         kind: ResourceKind = ResourceKind.FLIGHT, resource_id: int = 100) -> None:
    ledger.append(Reservation(reservation_id, "alice", kind, resource_id, status))


def test_unknown_resource_has_zero_availability():
    oracle, _, _ = _build_oracle()

    assert oracle.available_seats(999) == 0
    assert oracle.available_rooms(999) == 0
    assert oracle.is_over_capacity(ResourceKind.FLIGHT, 999) is False


def test_holding_statuses_reduce_availability():
    oracle, _, ledger = _build_oracle(seats=5)
    _add(ledger, 1001, ReservationStatus.PENDING)
    _add(ledger, 1002, ReservationStatus.APPROVED)
    _add(ledger, 1003, ReservationStatus.CANCEL_REQUESTED)
    _add(ledger, 1004, ReservationStatus.REJECTED)
    _add(ledger, 1005, ReservationStatus.CANCELLED)

    assert oracle.available_seats(100) == 3


def test_kinds_are_counted_separately():
    oracle, _, ledger = _build_oracle(seats=3, rooms=2)
    # Same numeric id on the other kind must not consume flight seats.
    _add(ledger, 1001, ReservationStatus.APPROVED, kind=ResourceKind.HOTEL, resource_id=100)
    _add(ledger, 1002, ReservationStatus.APPROVED, kind=ResourceKind.HOTEL, resource_id=200)

    assert oracle.available_seats(100) == 3
    assert oracle.available_rooms(200) == 1


def test_queries_are_idempotent():
    oracle, _, ledger = _build_oracle(seats=4)
    _add(ledger, 1001, ReservationStatus.PENDING)

    first = oracle.available_seats(100)
    second = oracle.available_seats(100)

    assert first == second == 3


def test_status_change_is_visible_on_next_query():
    oracle, _, ledger = _build_oracle(seats=1)
    _add(ledger, 1001, ReservationStatus.APPROVED)
    assert oracle.available_seats(100) == 0

    ledger.set_status(1001, ReservationStatus.CANCELLED)

    assert oracle.available_seats(100) == 1


def test_over_capacity_is_clamped_and_flagged():
    oracle, flights, ledger = _build_oracle(seats=3)
    for reservation_id in (1001, 1002, 1003):
        _add(ledger, reservation_id, ReservationStatus.APPROVED)

    flights.update(100, total_seats=1)

    assert oracle.available_seats(100) == 0
    assert oracle.raw_available(ResourceKind.FLIGHT, 100) == -2
    assert oracle.is_over_capacity(ResourceKind.FLIGHT, 100) is True
    row = oracle.snapshot(ResourceKind.FLIGHT)[0]
    assert (row.held, row.available, row.over_capacity) == (3, 0, True)


def test_reservations_for_deleted_resource_remain_in_ledger():
    oracle, flights, ledger = _build_oracle(seats=2)
    _add(ledger, 1001, ReservationStatus.APPROVED)

    flights.delete(100)

    assert oracle.available_seats(100) == 0
    assert ledger.find_by_id(1001).resource_id == 100
