"""Domain models for travel inventory and reservations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class ResourceKind(str, Enum):
    FLIGHT = "Flight"
    HOTEL = "Hotel"


class ReservationStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCEL_REQUESTED = "CancelRequested"
    CANCELLED = "Cancelled"


@dataclass(frozen=True)
class FlightResource:
    id: int
    origin: str
    destination: str
    departure_time: str
    arrival_time: str
    total_seats: int

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.FLIGHT

    @property
    def capacity(self) -> int:
        return self.total_seats


@dataclass(frozen=True)
class HotelResource:
    id: int
    name: str
    location: str
    total_rooms: int

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.HOTEL

    @property
    def capacity(self) -> int:
        return self.total_rooms


Resource = Union[FlightResource, HotelResource]


@dataclass(frozen=True)
class Reservation:
    id: int
    owner_username: str
    resource_kind: ResourceKind
    resource_id: int
    status: ReservationStatus

    def to_dict(self) -> dict[str, str | int]:
        return {
            "id": self.id,
            "owner_username": self.owner_username,
            "resource_kind": self.resource_kind.value,
            "resource_id": self.resource_id,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class UserAccount:
    username: str
    password_hash: str
    is_admin: bool
