"""Domain-level validation rules for resources and reservation status changes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from travel_reservations.domain.errors import InvalidTransitionError, ResourceValidationError
from travel_reservations.domain.models import FlightResource, HotelResource, ReservationStatus, Resource


SUPPORTED_STORAGE_BACKENDS = ("sqlite", "memory")

# Statuses whose reservations occupy a seat or room.
CAPACITY_HOLDING_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.APPROVED})

STATUS_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset(
        {ReservationStatus.APPROVED, ReservationStatus.REJECTED}
    ),
    ReservationStatus.APPROVED: frozenset({ReservationStatus.CANCEL_REQUESTED}),
    ReservationStatus.CANCEL_REQUESTED: frozenset(
        {ReservationStatus.CANCELLED, ReservationStatus.APPROVED}
    ),
    ReservationStatus.REJECTED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in STATUS_TRANSITIONS.items() if not targets
)

_MUTABLE_FIELDS: dict[type, frozenset[str]] = {
    FlightResource: frozenset(
        {"origin", "destination", "departure_time", "arrival_time", "total_seats"}
    ),
    HotelResource: frozenset({"name", "location", "total_rooms"}),
}


@dataclass(frozen=True)
class EngineConfig:
    reservation_id_floor: int
    storage_backend: str


def validate_engine_config(config: EngineConfig) -> None:
    if config.reservation_id_floor < 0:
        raise ValueError("reservation_id_floor must be >= 0")
    if config.storage_backend not in SUPPORTED_STORAGE_BACKENDS:
        raise ValueError(
            f"storage_backend must be one of {', '.join(SUPPORTED_STORAGE_BACKENDS)}"
        )


def validate_resource(resource: Resource) -> None:
    if isinstance(resource.id, bool) or not isinstance(resource.id, int) or resource.id <= 0:
        raise ResourceValidationError("resource id must be a positive integer")
    if resource.capacity < 0:
        raise ResourceValidationError("resource capacity must be >= 0")


def validate_resource_update(resource: Resource, fields: Mapping[str, Any]) -> None:
    """Reject updates that touch immutable or unknown fields."""
    if "id" in fields:
        raise ResourceValidationError("resource id is immutable")
    allowed = _MUTABLE_FIELDS[type(resource)]
    unknown = sorted(set(fields) - allowed)
    if unknown:
        raise ResourceValidationError(
            f"unknown {resource.kind.value.lower()} fields: {', '.join(unknown)}"
        )


def assert_transition(
    reservation_id: int,
    current: ReservationStatus,
    target: ReservationStatus,
) -> None:
    if target not in STATUS_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Reservation {reservation_id} cannot move from {current.value} to {target.value}"
        )
