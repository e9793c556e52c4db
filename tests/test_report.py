from __future__ import annotations

from dataclasses import replace

from travel_reservations.domain.models import FlightResource, HotelResource, ResourceKind
from travel_reservations.repository.memory_repository import MemoryRepository
from travel_reservations.services.engine import ReservationEngine
from travel_reservations.services.report_service import REPORT_COLUMNS, ReportService
from travel_reservations.utils.config import get_settings


def _build_test_settings(tmp_path, seed=7):
    return replace(
        get_settings(),
        storage_backend="memory",
        report_path=tmp_path / "reports" / "reservations_report.txt",
        recommendation_random_seed=seed,
    )


def _build_services(tmp_path, with_flights: bool = True, seed=7):
    repository = MemoryRepository()
    if with_flights:
        repository.store_resources(
            ResourceKind.FLIGHT,
            [
                FlightResource(100, "Lisbon", "Paris", "08:15", "11:40", 2),
                FlightResource(101, "Porto", "London", "06:50", "09:55", 2),
            ],
        )
    repository.store_resources(ResourceKind.HOTEL, [HotelResource(200, "Hotel Avenida", "Paris", 1)])
    settings = _build_test_settings(tmp_path, seed=seed)
    engine = ReservationEngine(repository=repository, settings=settings).load()
    return engine, ReportService(engine=engine, settings=settings)


def test_empty_report_text(tmp_path):
    _, report_service = _build_services(tmp_path)

    assert report_service.render_report() == "No reservations available.\n"
    assert list(report_service.build_report().columns) == REPORT_COLUMNS


def test_report_lists_reservations_in_ledger_order(tmp_path):
    engine, report_service = _build_services(tmp_path)
    first = engine.controller.request_reservation("alice", ResourceKind.FLIGHT, 100)
    second = engine.controller.request_reservation("bob", ResourceKind.HOTEL, 200)
    engine.controller.approve(second)

    lines = report_service.render_report().splitlines()

    assert lines[0] == "Reservations Report:"
    assert lines[1] == "id | user | kind | resource_id | status"
    assert lines[2] == f"{first} | alice | Flight | 100 | Pending"
    assert lines[3] == f"{second} | bob | Hotel | 200 | Approved"


def test_write_report_creates_file(tmp_path):
    engine, report_service = _build_services(tmp_path)
    engine.controller.request_reservation("alice", ResourceKind.FLIGHT, 100)

    path = report_service.write_report()

    assert path == tmp_path / "reports" / "reservations_report.txt"
    assert path.read_text(encoding="utf-8").startswith("Reservations Report:\n")


def test_status_summary_covers_every_status(tmp_path):
    engine, report_service = _build_services(tmp_path)
    reservation_id = engine.controller.request_reservation("alice", ResourceKind.FLIGHT, 100)
    engine.controller.reject(reservation_id)
    engine.controller.request_reservation("bob", ResourceKind.FLIGHT, 100)

    summary = report_service.status_summary()

    assert summary == {
        "Pending": 1,
        "Approved": 0,
        "Rejected": 1,
        "CancelRequested": 0,
        "Cancelled": 0,
    }


def test_admin_notifications_split_pending_and_cancel_requests(tmp_path):
    engine, report_service = _build_services(tmp_path)
    pending = engine.controller.request_reservation("alice", ResourceKind.FLIGHT, 100)
    approved = engine.controller.request_reservation("bob", ResourceKind.FLIGHT, 101)
    engine.controller.approve(approved)
    engine.controller.request_cancellation(approved, "bob")

    notifications = report_service.admin_notifications()

    assert [row["id"] for row in notifications["pending"]] == [pending]
    assert [row["id"] for row in notifications["cancel_requested"]] == [approved]
    assert notifications["cancel_requested"][0]["status"] == "CancelRequested"


def test_recommendation_is_reproducible_with_a_seed(tmp_path):
    _, first_service = _build_services(tmp_path, seed=11)
    _, second_service = _build_services(tmp_path, seed=11)

    first = [first_service.recommend_flight().message for _ in range(4)]
    second = [second_service.recommend_flight().message for _ in range(4)]

    assert first == second
    recommendation = first_service.recommend_flight()
    assert f"Flight {recommendation.flight.id}" in recommendation.message


def test_no_recommendation_without_flights(tmp_path):
    _, report_service = _build_services(tmp_path, with_flights=False)

    assert report_service.recommend_flight() is None
