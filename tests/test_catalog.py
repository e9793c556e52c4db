from __future__ import annotations

import pytest

from travel_reservations.domain.errors import (
    DuplicateIDError,
    ResourceNotFoundError,
    ResourceValidationError,
)
from travel_reservations.domain.models import FlightResource, HotelResource, ResourceKind
from travel_reservations.services.catalog_service import ResourceCatalog


def _flight(flight_id: int, seats: int = 2) -> FlightResource:
    return FlightResource(flight_id, "Lisbon", "Paris", "08:15", "11:40", seats)


def _flight_catalog(*ids: int) -> ResourceCatalog[FlightResource]:
    catalog: ResourceCatalog[FlightResource] = ResourceCatalog(ResourceKind.FLIGHT)
    for flight_id in ids:
        catalog.create(_flight(flight_id))
    return catalog


def test_create_and_find():
    catalog = _flight_catalog(100)

    assert catalog.find(100).total_seats == 2
    assert 100 in catalog
    assert len(catalog) == 1


def test_duplicate_id_is_rejected():
    catalog = _flight_catalog(100)

    with pytest.raises(DuplicateIDError):
        catalog.create(_flight(100, seats=9))
    assert catalog.find(100).total_seats == 2


def test_find_unknown_raises_not_found():
    catalog = _flight_catalog()

    with pytest.raises(ResourceNotFoundError):
        catalog.find(404)
    assert catalog.get(404) is None


def test_create_rejects_other_kind():
    catalog = _flight_catalog()

    with pytest.raises(TypeError):
        catalog.create(HotelResource(200, "Hotel Avenida", "Paris", 2))


def test_update_keeps_listing_position():
    catalog = _flight_catalog(300, 100, 200)

    updated = catalog.update(100, total_seats=7, destination="Rome")

    assert updated.total_seats == 7
    assert updated.destination == "Rome"
    assert [flight.id for flight in catalog.list_all()] == [300, 100, 200]


def test_update_rejects_negative_capacity_and_keeps_old_value():
    catalog = _flight_catalog(100)

    with pytest.raises(ResourceValidationError):
        catalog.update(100, total_seats=-3)
    assert catalog.find(100).total_seats == 2


def test_delete_then_find_raises():
    catalog = _flight_catalog(100, 101)

    removed = catalog.delete(100)

    assert removed.id == 100
    with pytest.raises(ResourceNotFoundError):
        catalog.find(100)
    with pytest.raises(ResourceNotFoundError):
        catalog.delete(100)


def test_list_all_tolerates_mutation_during_iteration():
    catalog = _flight_catalog(100, 101, 102)

    seen = []
    for flight in catalog.list_all():
        seen.append(flight.id)
        if flight.id == 100:
            catalog.delete(102)

    assert seen == [100, 101, 102]
    assert [flight.id for flight in catalog.list_all()] == [100, 101]


def test_load_rejects_duplicate_persisted_ids():
    catalog = _flight_catalog()

    with pytest.raises(DuplicateIDError):
        catalog.load([_flight(100), _flight(100)])
