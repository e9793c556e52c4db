"""Remaining-capacity queries derived from catalogs and the ledger."""

from __future__ import annotations

from dataclasses import dataclass

from travel_reservations.domain.models import (
    FlightResource,
    HotelResource,
    Resource,
    ResourceKind,
)
from travel_reservations.services.catalog_service import ResourceCatalog
from travel_reservations.services.ledger_service import ReservationLedger


@dataclass(frozen=True)
class AvailabilityRow:
    resource: Resource
    held: int
    available: int
    over_capacity: bool


class CapacityOracle:
    """Recomputes availability from the ledger on every call.

    There is no stored seat counter: a status change is visible to the
    next query and nothing else needs updating.
    """

    def __init__(
        self,
        flights: ResourceCatalog[FlightResource],
        hotels: ResourceCatalog[HotelResource],
        ledger: ReservationLedger,
    ) -> None:
        self._catalogs = {
            ResourceKind.FLIGHT: flights,
            ResourceKind.HOTEL: hotels,
        }
        self._ledger = ledger

    def raw_available(self, kind: ResourceKind, resource_id: int) -> int:
        """Unclamped remaining capacity; 0 for an unknown resource."""
        resource = self._catalogs[kind].get(resource_id)
        if resource is None:
            return 0
        return resource.capacity - self._ledger.count_holding(kind, resource_id)

    def available(self, kind: ResourceKind, resource_id: int) -> int:
        return max(0, self.raw_available(kind, resource_id))

    def available_seats(self, flight_id: int) -> int:
        return self.available(ResourceKind.FLIGHT, flight_id)

    def available_rooms(self, hotel_id: int) -> int:
        return self.available(ResourceKind.HOTEL, hotel_id)

    def is_over_capacity(self, kind: ResourceKind, resource_id: int) -> bool:
        if resource_id not in self._catalogs[kind]:
            return False
        return self.raw_available(kind, resource_id) < 0

    def snapshot(self, kind: ResourceKind) -> list[AvailabilityRow]:
        rows: list[AvailabilityRow] = []
        for resource in self._catalogs[kind].list_all():
            held = self._ledger.count_holding(kind, resource.id)
            raw = resource.capacity - held
            rows.append(
                AvailabilityRow(
                    resource=resource,
                    held=held,
                    available=max(0, raw),
                    over_capacity=raw < 0,
                )
            )
        return rows
