"""Reservation engine: owns catalogs, ledger and id allocator for one process."""

from __future__ import annotations

from threading import RLock
from typing import Any, Callable, Optional, TypeVar

from travel_reservations.domain.constraints import EngineConfig, validate_engine_config
from travel_reservations.domain.errors import EngineNotLoadedError, PersistenceFailure
from travel_reservations.domain.models import FlightResource, HotelResource, ResourceKind
from travel_reservations.repository.data_repository import DataRepository
from travel_reservations.repository.gateway import PersistenceGateway
from travel_reservations.repository.memory_repository import MemoryRepository
from travel_reservations.services.capacity_service import CapacityOracle
from travel_reservations.services.catalog_service import ResourceCatalog
from travel_reservations.services.id_allocator import ReservationIdAllocator
from travel_reservations.services.ledger_service import ReservationLedger
from travel_reservations.services.reservation_service import ReservationLifecycleController
from travel_reservations.utils.config import Settings, get_settings
from travel_reservations.utils.logger import get_logger


logger = get_logger(__name__)

T = TypeVar("T")


def create_repository(settings: Optional[Settings] = None) -> PersistenceGateway:
    """Build the persistence collaborator selected by ``storage_backend``."""
    resolved = settings or get_settings()
    validate_engine_config(
        EngineConfig(
            reservation_id_floor=resolved.reservation_id_floor,
            storage_backend=resolved.storage_backend,
        )
    )
    if resolved.storage_backend == "memory":
        return MemoryRepository()
    repository = DataRepository(resolved)
    repository.initialize_database()
    return repository


class ReservationEngine:
    """Explicit owner of all shared mutable reservation state.

    ``load()`` pulls catalogs and the ledger from the persistence
    collaborator once; ``shutdown()`` flushes them back. A single
    re-entrant lock serializes catalog edits, admissions and status
    transitions.
    """

    def __init__(
        self,
        repository: PersistenceGateway,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        validate_engine_config(
            EngineConfig(
                reservation_id_floor=self._settings.reservation_id_floor,
                storage_backend=self._settings.storage_backend,
            )
        )
        self._repository = repository
        self._lock = RLock()
        self.flights: ResourceCatalog[FlightResource] = ResourceCatalog(ResourceKind.FLIGHT)
        self.hotels: ResourceCatalog[HotelResource] = ResourceCatalog(ResourceKind.HOTEL)
        self.ledger = ReservationLedger()
        self.oracle = CapacityOracle(self.flights, self.hotels, self.ledger)
        self.allocator = ReservationIdAllocator(
            repository,
            floor=self._settings.reservation_id_floor,
        )
        self.controller = ReservationLifecycleController(
            flights=self.flights,
            hotels=self.hotels,
            ledger=self.ledger,
            oracle=self.oracle,
            allocator=self.allocator,
            store=repository,
            lock=self._lock,
            ensure_loaded=self._require_loaded,
        )
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def lock(self) -> RLock:
        return self._lock

    def load(self) -> "ReservationEngine":
        with self._lock:
            if self._loaded:
                return self
            self.flights.load(self._repository.load_resources(ResourceKind.FLIGHT))
            self.hotels.load(self._repository.load_resources(ResourceKind.HOTEL))
            self.ledger.load(self._repository.load_ledger())
            last_issued = self.allocator.initialize(self.ledger.max_id())
            self._loaded = True
        logger.info(
            "Engine loaded: %s flights, %s hotels, %s reservations, last issued id %s",
            len(self.flights),
            len(self.hotels),
            len(self.ledger),
            last_issued,
        )
        return self

    def shutdown(self) -> None:
        """Flush catalogs and ledger; safe to call more than once."""
        with self._lock:
            if not self._loaded:
                return
            self._repository.store_resources(ResourceKind.FLIGHT, self.flights.snapshot())
            self._repository.store_resources(ResourceKind.HOTEL, self.hotels.snapshot())
            self._repository.store_ledger(self.ledger.snapshot())
            self._loaded = False
        logger.info("Engine state flushed on shutdown")

    def __enter__(self) -> "ReservationEngine":
        return self.load()

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()

    def _require_loaded(self) -> None:
        if not self._loaded:
            raise EngineNotLoadedError("Reservation engine is not loaded")

    def _mutate_catalog(
        self,
        catalog: ResourceCatalog[Any],
        mutation: Callable[[], T],
    ) -> T:
        with self._lock:
            self._require_loaded()
            before = catalog.snapshot()
            result = mutation()
            try:
                self._repository.store_resources(catalog.kind, catalog.snapshot())
            except PersistenceFailure:
                catalog.load(before)
                logger.error("%s catalog change rolled back; flush failed", catalog.kind.value)
                raise
            return result

    def add_flight(self, flight: FlightResource) -> FlightResource:
        created = self._mutate_catalog(self.flights, lambda: self.flights.create(flight))
        logger.info("Flight %s added (%s seats)", created.id, created.total_seats)
        return created

    def update_flight(self, flight_id: int, **fields: Any) -> FlightResource:
        updated = self._mutate_catalog(
            self.flights, lambda: self.flights.update(flight_id, **fields)
        )
        if self.oracle.is_over_capacity(ResourceKind.FLIGHT, flight_id):
            logger.warning("Flight %s is now over capacity after edit", flight_id)
        return updated

    def delete_flight(self, flight_id: int) -> FlightResource:
        removed = self._mutate_catalog(self.flights, lambda: self.flights.delete(flight_id))
        logger.info("Flight %s deleted; existing reservations are kept", flight_id)
        return removed

    def add_hotel(self, hotel: HotelResource) -> HotelResource:
        created = self._mutate_catalog(self.hotels, lambda: self.hotels.create(hotel))
        logger.info("Hotel %s added (%s rooms)", created.id, created.total_rooms)
        return created

    def update_hotel(self, hotel_id: int, **fields: Any) -> HotelResource:
        updated = self._mutate_catalog(
            self.hotels, lambda: self.hotels.update(hotel_id, **fields)
        )
        if self.oracle.is_over_capacity(ResourceKind.HOTEL, hotel_id):
            logger.warning("Hotel %s is now over capacity after edit", hotel_id)
        return updated

    def delete_hotel(self, hotel_id: int) -> HotelResource:
        removed = self._mutate_catalog(self.hotels, lambda: self.hotels.delete(hotel_id))
        logger.info("Hotel %s deleted; existing reservations are kept", hotel_id)
        return removed
