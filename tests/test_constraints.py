"""Tests for domain validation rules.

Covers the status transition table, resource validation and engine config.
"""

from __future__ import annotations

import pytest

from travel_reservations.domain.constraints import (
    CAPACITY_HOLDING_STATUSES,
    STATUS_TRANSITIONS,
    TERMINAL_STATUSES,
    EngineConfig,
    assert_transition,
    validate_engine_config,
    validate_resource,
    validate_resource_update,
)
from travel_reservations.domain.errors import InvalidTransitionError, ResourceValidationError
from travel_reservations.domain.models import FlightResource, HotelResource, ReservationStatus


def flight(**overrides) -> FlightResource:
    defaults = {
        "id": 100,
        "origin": "Lisbon",
        "destination": "Paris",
        "departure_time": "2026-11-02 08:15",
        "arrival_time": "2026-11-02 11:40",
        "total_seats": 2,
    }
    defaults.update(overrides)
    return FlightResource(**defaults)


# --- Transition table ---

@pytest.mark.parametrize(
    ("current", "target"),
    [
        (ReservationStatus.PENDING, ReservationStatus.APPROVED),
        (ReservationStatus.PENDING, ReservationStatus.REJECTED),
        (ReservationStatus.APPROVED, ReservationStatus.CANCEL_REQUESTED),
        (ReservationStatus.CANCEL_REQUESTED, ReservationStatus.CANCELLED),
        (ReservationStatus.CANCEL_REQUESTED, ReservationStatus.APPROVED),
    ],
)
def test_allowed_transitions_pass(current, target) -> None:
    assert_transition(1001, current, target)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (ReservationStatus.PENDING, ReservationStatus.CANCEL_REQUESTED),
        (ReservationStatus.PENDING, ReservationStatus.CANCELLED),
        (ReservationStatus.APPROVED, ReservationStatus.APPROVED),
        (ReservationStatus.APPROVED, ReservationStatus.CANCELLED),
        (ReservationStatus.CANCEL_REQUESTED, ReservationStatus.REJECTED),
    ],
)
def test_disallowed_transitions_raise(current, target) -> None:
    with pytest.raises(InvalidTransitionError):
        assert_transition(1001, current, target)


def test_rejected_and_cancelled_are_terminal() -> None:
    assert TERMINAL_STATUSES == {ReservationStatus.REJECTED, ReservationStatus.CANCELLED}
    for terminal in TERMINAL_STATUSES:
        for target in ReservationStatus:
            with pytest.raises(InvalidTransitionError):
                assert_transition(1001, terminal, target)


def test_every_status_has_a_transition_entry() -> None:
    assert set(STATUS_TRANSITIONS) == set(ReservationStatus)


def test_only_pending_and_approved_hold_capacity() -> None:
    assert CAPACITY_HOLDING_STATUSES == {ReservationStatus.PENDING, ReservationStatus.APPROVED}
    assert ReservationStatus.CANCEL_REQUESTED not in CAPACITY_HOLDING_STATUSES
    assert ReservationStatus.REJECTED not in CAPACITY_HOLDING_STATUSES
    assert ReservationStatus.CANCELLED not in CAPACITY_HOLDING_STATUSES


# --- Resource validation ---

def test_valid_resources_pass() -> None:
    validate_resource(flight())
    validate_resource(HotelResource(200, "Hotel Avenida", "Paris", 0))


def test_negative_capacity_raises() -> None:
    with pytest.raises(ResourceValidationError):
        validate_resource(flight(total_seats=-1))


@pytest.mark.parametrize("bad_id", [0, -5, True])
def test_non_positive_or_bool_id_raises(bad_id) -> None:
    with pytest.raises(ResourceValidationError):
        validate_resource(flight(id=bad_id))


def test_update_cannot_change_id() -> None:
    with pytest.raises(ResourceValidationError):
        validate_resource_update(flight(), {"id": 101})


def test_update_rejects_fields_of_other_kind() -> None:
    with pytest.raises(ResourceValidationError):
        validate_resource_update(flight(), {"total_rooms": 4})


# --- Engine config ---

def test_valid_engine_config_passes() -> None:
    validate_engine_config(EngineConfig(reservation_id_floor=1000, storage_backend="sqlite"))
    validate_engine_config(EngineConfig(reservation_id_floor=0, storage_backend="memory"))


def test_negative_floor_raises() -> None:
    with pytest.raises(ValueError):
        validate_engine_config(EngineConfig(reservation_id_floor=-1, storage_backend="sqlite"))


def test_unknown_backend_raises() -> None:
    with pytest.raises(ValueError):
        validate_engine_config(EngineConfig(reservation_id_floor=1000, storage_backend="csv"))
