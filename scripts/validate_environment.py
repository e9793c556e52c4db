#!/usr/bin/env python3
"""Validate local Travel Reservation System environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sys
import tempfile
from dataclasses import replace
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from travel_reservations.domain.errors import InsufficientCapacityError
from travel_reservations.domain.models import ResourceKind
from travel_reservations.repository.data_repository import (
    DEMO_FLIGHTS,
    DEMO_HOTELS,
    SCHEMA_VERSION,
    DataRepository,
)
from travel_reservations.services.engine import ReservationEngine
from travel_reservations.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="travel-env-")

    # CHECK 1: Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable with versions
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("pandas", "pandas"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
        ("streamlit", "streamlit"),
        ("requests", "requests"),
    ]
    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except (ImportError, PackageNotFoundError) as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        validation_settings = replace(
            get_settings(),
            storage_backend="sqlite",
            database_path=Path(temp_dir) / "travel_validation.db",
            report_path=Path(temp_dir) / "reservations_report.txt",
        )
        repository = DataRepository(validation_settings)

        # CHECK 3: Database initialization
        try:
            repository.initialize_database()
            found = repository.schema_version()
            if found != SCHEMA_VERSION:
                raise RuntimeError(f"expected schema v{SCHEMA_VERSION}, got v{found}")
            ok, line = _print_result("Database initialization", True, f": schema v{found}")
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: Demo inventory seeding
        expected = len(DEMO_FLIGHTS) + len(DEMO_HOTELS)
        try:
            seeded = repository.seed_demo_inventory_if_empty()
            if seeded != expected:
                raise RuntimeError(f"expected {expected} resources, got {seeded}")
            ok, line = _print_result("Demo inventory", True, f": {seeded} resources")
        except Exception as exc:
            ok, line = _print_result("Demo inventory", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Admission control on a single-seat flight
        engine = ReservationEngine(repository=repository, settings=validation_settings)
        try:
            engine.load()
            flight = min(DEMO_FLIGHTS, key=lambda item: item.total_seats)
            for _ in range(flight.total_seats):
                engine.controller.request_reservation("validator", ResourceKind.FLIGHT, flight.id)
            try:
                engine.controller.request_reservation("validator", ResourceKind.FLIGHT, flight.id)
            except InsufficientCapacityError:
                pass
            else:
                raise RuntimeError(f"flight {flight.id} admitted more than {flight.total_seats}")
            ok, line = _print_result(
                "Admission control",
                True,
                f": flight {flight.id} full after {flight.total_seats} requests",
            )
        except Exception as exc:
            ok, line = _print_result("Admission control", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 6: Id continuity across an engine restart
        try:
            last_issued = engine.allocator.peek_last_issued()
            engine.shutdown()
            restarted = ReservationEngine(repository=repository, settings=validation_settings)
            restarted.load()
            hotel = DEMO_HOTELS[0]
            new_id = restarted.controller.request_reservation(
                "validator", ResourceKind.HOTEL, hotel.id
            )
            restarted.shutdown()
            if new_id <= last_issued:
                raise RuntimeError(f"id {new_id} reused after restart (last issued {last_issued})")
            ok, line = _print_result("Id continuity", True, f": next id {new_id}")
        except Exception as exc:
            ok, line = _print_result("Id continuity", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Travel Reservations Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
