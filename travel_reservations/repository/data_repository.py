"""SQLite persistence collaborator for catalogs, the ledger and engine state."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

from travel_reservations.domain.errors import PersistenceFailure
from travel_reservations.domain.models import (
    FlightResource,
    HotelResource,
    Reservation,
    ReservationStatus,
    Resource,
    ResourceKind,
    UserAccount,
)
from travel_reservations.utils.config import Settings, get_settings
from travel_reservations.utils.logger import get_logger


logger = get_logger(__name__)

SCHEMA_VERSION = 1
LAST_ISSUED_ID_KEY = "last_issued_reservation_id"

DEMO_FLIGHTS: tuple[FlightResource, ...] = (
    FlightResource(101, "Lisbon", "Paris", "2026-11-02 08:15", "2026-11-02 11:40", 3),
    FlightResource(102, "Porto", "London", "2026-11-03 06:50", "2026-11-03 09:55", 2),
    FlightResource(103, "Lisbon", "Madrid", "2026-11-05 17:30", "2026-11-05 19:45", 4),
    FlightResource(104, "Faro", "Amsterdam", "2026-11-07 12:10", "2026-11-07 15:55", 1),
)

DEMO_HOTELS: tuple[HotelResource, ...] = (
    HotelResource(201, "Hotel Avenida", "Paris", 2),
    HotelResource(202, "Riverside Inn", "London", 3),
    HotelResource(203, "Casa del Sol", "Madrid", 1),
)


class DataRepository:
    """Encapsulates SQLite access so the engine stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA synchronous = FULL;")
        return connection

    @contextmanager
    def _transaction(self, action: str) -> Iterator[sqlite3.Cursor]:
        """Run one atomic unit of work; sqlite errors become ``PersistenceFailure``."""
        try:
            connection = self._connect()
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"{action} failed: {exc}") from exc
        try:
            with connection:
                yield connection.cursor()
        except sqlite3.Error as exc:
            logger.error("Persistence failure during %s: %s", action, exc)
            raise PersistenceFailure(f"{action} failed: {exc}") from exc
        finally:
            connection.close()

    def initialize_database(self) -> None:
        """Create or verify the versioned schema before the engine loads state."""
        with self._transaction("schema initialization") as cursor:
            cursor.execute("PRAGMA user_version;")
            version = int(cursor.fetchone()[0])
            if version > SCHEMA_VERSION:
                raise PersistenceFailure(
                    f"Database schema version {version} is newer than supported "
                    f"version {SCHEMA_VERSION}"
                )

            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS Flights (
                    id INTEGER PRIMARY KEY,
                    position INTEGER NOT NULL,
                    origin TEXT NOT NULL,
                    destination TEXT NOT NULL,
                    departure_time TEXT NOT NULL,
                    arrival_time TEXT NOT NULL,
                    total_seats INTEGER NOT NULL CHECK (total_seats >= 0)
                );
                """
            )
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS Hotels (
                    id INTEGER PRIMARY KEY,
                    position INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    location TEXT NOT NULL,
                    total_rooms INTEGER NOT NULL CHECK (total_rooms >= 0)
                );
                """
            )
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS Reservations (
                    id INTEGER PRIMARY KEY,
                    position INTEGER NOT NULL,
                    owner_username TEXT NOT NULL,
                    resource_kind TEXT NOT NULL CHECK (resource_kind IN ('Flight', 'Hotel')),
                    resource_id INTEGER NOT NULL,
                    status TEXT NOT NULL CHECK (
                        status IN ('Pending', 'Approved', 'Rejected', 'CancelRequested', 'Cancelled')
                    )
                );
                """
            )
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS EngineState (
                    key TEXT PRIMARY KEY,
                    value INTEGER NOT NULL
                );
                """
            )
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS Users (
                    username TEXT PRIMARY KEY,
                    password_hash TEXT NOT NULL,
                    is_admin INTEGER NOT NULL CHECK (is_admin IN (0, 1)),
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                );
                """
            )
            cursor.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_reservations_resource_status
                ON Reservations(resource_kind, resource_id, status);
                """
            )
            cursor.execute(f"PRAGMA user_version = {SCHEMA_VERSION};")
        logger.info("Database initialized at %s (schema v%s)", self._db_path, SCHEMA_VERSION)

    def seed_demo_inventory_if_empty(self) -> int:
        """Insert demo flights and hotels only when both catalogs are empty."""
        with self._transaction("demo inventory seeding") as cursor:
            cursor.execute(
                "SELECT (SELECT COUNT(*) FROM Flights) + (SELECT COUNT(*) FROM Hotels) AS count;"
            )
            if int(cursor.fetchone()["count"]) > 0:
                logger.info("Inventory already present; skipping demo seed")
                return 0
        self.store_resources(ResourceKind.FLIGHT, DEMO_FLIGHTS)
        self.store_resources(ResourceKind.HOTEL, DEMO_HOTELS)
        seeded = len(DEMO_FLIGHTS) + len(DEMO_HOTELS)
        logger.info("Demo inventory seeded with %s resources", seeded)
        return seeded

    def load_resources(self, kind: ResourceKind) -> list[Resource]:
        with self._transaction(f"{kind.value.lower()} load") as cursor:
            if kind is ResourceKind.FLIGHT:
                cursor.execute(
                    """
                    SELECT id, origin, destination, departure_time, arrival_time, total_seats
                    FROM Flights
                    ORDER BY position ASC;
                    """
                )
                return [
                    FlightResource(
                        id=int(row["id"]),
                        origin=str(row["origin"]),
                        destination=str(row["destination"]),
                        departure_time=str(row["departure_time"]),
                        arrival_time=str(row["arrival_time"]),
                        total_seats=int(row["total_seats"]),
                    )
                    for row in cursor.fetchall()
                ]
            cursor.execute(
                """
                SELECT id, name, location, total_rooms
                FROM Hotels
                ORDER BY position ASC;
                """
            )
            return [
                HotelResource(
                    id=int(row["id"]),
                    name=str(row["name"]),
                    location=str(row["location"]),
                    total_rooms=int(row["total_rooms"]),
                )
                for row in cursor.fetchall()
            ]

    def store_resources(self, kind: ResourceKind, resources: Sequence[Resource]) -> None:
        with self._transaction(f"{kind.value.lower()} store") as cursor:
            if kind is ResourceKind.FLIGHT:
                cursor.execute("DELETE FROM Flights;")
                cursor.executemany(
                    """
                    INSERT INTO Flights (
                        id, position, origin, destination, departure_time, arrival_time, total_seats
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?);
                    """,
                    [
                        (
                            flight.id,
                            position,
                            flight.origin,
                            flight.destination,
                            flight.departure_time,
                            flight.arrival_time,
                            flight.total_seats,
                        )
                        for position, flight in enumerate(resources)
                    ],
                )
                return
            cursor.execute("DELETE FROM Hotels;")
            cursor.executemany(
                """
                INSERT INTO Hotels (id, position, name, location, total_rooms)
                VALUES (?, ?, ?, ?, ?);
                """,
                [
                    (hotel.id, position, hotel.name, hotel.location, hotel.total_rooms)
                    for position, hotel in enumerate(resources)
                ],
            )

    def load_ledger(self) -> list[Reservation]:
        with self._transaction("ledger load") as cursor:
            cursor.execute(
                """
                SELECT id, owner_username, resource_kind, resource_id, status
                FROM Reservations
                ORDER BY position ASC;
                """
            )
            return [
                Reservation(
                    id=int(row["id"]),
                    owner_username=str(row["owner_username"]),
                    resource_kind=ResourceKind(str(row["resource_kind"])),
                    resource_id=int(row["resource_id"]),
                    status=ReservationStatus(str(row["status"])),
                )
                for row in cursor.fetchall()
            ]

    def store_ledger(self, reservations: Sequence[Reservation]) -> None:
        with self._transaction("ledger store") as cursor:
            cursor.execute("DELETE FROM Reservations;")
            cursor.executemany(
                """
                INSERT INTO Reservations (
                    id, position, owner_username, resource_kind, resource_id, status
                )
                VALUES (?, ?, ?, ?, ?, ?);
                """,
                [
                    (
                        reservation.id,
                        position,
                        reservation.owner_username,
                        reservation.resource_kind.value,
                        reservation.resource_id,
                        reservation.status.value,
                    )
                    for position, reservation in enumerate(reservations)
                ],
            )

    def load_last_issued_id(self) -> Optional[int]:
        with self._transaction("last issued id load") as cursor:
            cursor.execute(
                "SELECT value FROM EngineState WHERE key = ?;",
                (LAST_ISSUED_ID_KEY,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return int(row["value"])

    def store_last_issued_id(self, value: int) -> None:
        with self._transaction("last issued id store") as cursor:
            cursor.execute(
                """
                INSERT INTO EngineState (key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value;
                """,
                (LAST_ISSUED_ID_KEY, value),
            )

    def load_users(self) -> list[UserAccount]:
        with self._transaction("user load") as cursor:
            cursor.execute(
                "SELECT username, password_hash, is_admin FROM Users ORDER BY created_at, username;"
            )
            return [
                UserAccount(
                    username=str(row["username"]),
                    password_hash=str(row["password_hash"]),
                    is_admin=bool(row["is_admin"]),
                )
                for row in cursor.fetchall()
            ]

    def store_user(self, account: UserAccount) -> None:
        with self._transaction("user store") as cursor:
            cursor.execute(
                """
                INSERT INTO Users (username, password_hash, is_admin)
                VALUES (?, ?, ?)
                ON CONFLICT(username) DO UPDATE SET
                    password_hash = excluded.password_hash,
                    is_admin = excluded.is_admin;
                """,
                (account.username, account.password_hash, int(account.is_admin)),
            )

    def delete_user(self, username: str) -> None:
        with self._transaction("user delete") as cursor:
            cursor.execute("DELETE FROM Users WHERE username = ?;", (username,))

    def count_reservations(self) -> int:
        """Return persisted ledger size for diagnostics and tests."""
        with self._transaction("reservation count") as cursor:
            cursor.execute("SELECT COUNT(*) AS count FROM Reservations;")
            return int(cursor.fetchone()["count"])

    def schema_version(self) -> int:
        with self._transaction("schema version read") as cursor:
            cursor.execute("PRAGMA user_version;")
            return int(cursor.fetchone()[0])
