"""Inventory catalogs for capacity-bearing resources."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Generic, Iterable, Iterator, TypeVar

from travel_reservations.domain.constraints import validate_resource, validate_resource_update
from travel_reservations.domain.errors import DuplicateIDError, ResourceNotFoundError
from travel_reservations.domain.models import FlightResource, HotelResource, ResourceKind


ResourceT = TypeVar("ResourceT", FlightResource, HotelResource)


class ResourceCatalog(Generic[ResourceT]):
    """Id-keyed collection of one resource kind, iterated in insertion order.

    Holds no knowledge of reservations. Callers serialize mutations
    through the engine lock.
    """

    def __init__(self, kind: ResourceKind) -> None:
        self._kind = kind
        self._items: dict[int, ResourceT] = {}

    @property
    def kind(self) -> ResourceKind:
        return self._kind

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._items

    def load(self, resources: Iterable[ResourceT]) -> None:
        """Replace the catalog contents with persisted resources."""
        loaded: dict[int, ResourceT] = {}
        for resource in resources:
            validate_resource(resource)
            if resource.id in loaded:
                raise DuplicateIDError(
                    f"{self._kind.value} {resource.id} appears twice in persisted state"
                )
            loaded[resource.id] = resource
        self._items = loaded

    def create(self, resource: ResourceT) -> ResourceT:
        validate_resource(resource)
        if resource.kind is not self._kind:
            raise TypeError(f"expected a {self._kind.value} resource")
        if resource.id in self._items:
            raise DuplicateIDError(f"{self._kind.value} {resource.id} already exists")
        self._items[resource.id] = resource
        return resource

    def find(self, resource_id: int) -> ResourceT:
        try:
            return self._items[resource_id]
        except KeyError:
            raise ResourceNotFoundError(
                f"{self._kind.value} {resource_id} was not found"
            ) from None

    def get(self, resource_id: int) -> ResourceT | None:
        return self._items.get(resource_id)

    def update(self, resource_id: int, **fields: Any) -> ResourceT:
        """Overwrite mutable fields; the id keeps its slot in listing order."""
        current = self.find(resource_id)
        validate_resource_update(current, fields)
        updated = replace(current, **fields)
        validate_resource(updated)
        self._items[resource_id] = updated
        return updated

    def delete(self, resource_id: int) -> ResourceT:
        removed = self.find(resource_id)
        del self._items[resource_id]
        return removed

    def list_all(self) -> Iterator[ResourceT]:
        """Lazily enumerate a snapshot of the current resources."""
        for resource in list(self._items.values()):
            yield resource

    def snapshot(self) -> list[ResourceT]:
        return list(self._items.values())
