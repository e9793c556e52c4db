from __future__ import annotations

from dataclasses import replace

from fastapi import FastAPI
from fastapi.testclient import TestClient

from travel_reservations.controllers.auth_controller import router as auth_router
from travel_reservations.controllers.inventory_controller import router as inventory_router
from travel_reservations.controllers.reservation_controller import router as reservation_router
from travel_reservations.repository.data_repository import DataRepository
from travel_reservations.services.auth_service import AuthService
from travel_reservations.services.engine import ReservationEngine
from travel_reservations.services.report_service import ReportService
from travel_reservations.utils.config import get_settings


def _build_test_settings(tmp_path, filename: str):
    get_settings.cache_clear()
    base = get_settings()
    return replace(
        base,
        storage_backend="sqlite",
        database_path=tmp_path / filename,
        report_path=tmp_path / "reservations_report.txt",
        recommendation_random_seed=3,
        bootstrap_admin_username="admin",
        bootstrap_admin_password="admin-pass",
        password_hash_iterations=1_000,
    )


def _build_test_app(tmp_path) -> tuple[FastAPI, DataRepository]:
    settings = _build_test_settings(tmp_path, "api_flow.db")
    repository = DataRepository(settings)
    repository.initialize_database()

    engine = ReservationEngine(repository=repository, settings=settings).load()
    auth_service = AuthService(repository=repository, settings=settings)
    auth_service.ensure_bootstrap_admin()
    report_service = ReportService(engine=engine, settings=settings)

    app = FastAPI()
    app.include_router(auth_router)
    app.include_router(inventory_router)
    app.include_router(reservation_router)
    app.state.repository = repository
    app.state.engine = engine
    app.state.auth_service = auth_service
    app.state.report_service = report_service
    return app, repository


def _login(client: TestClient, username: str, password: str) -> dict[str, str]:
    response = client.post("/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def test_reservation_end_to_end_flow(tmp_path):
    app, repository = _build_test_app(tmp_path)
    client = TestClient(app)
    admin = _login(client, "admin", "admin-pass")

    created = client.post(
        "/flights",
        headers=admin,
        json={
            "id": 100,
            "origin": "Lisbon",
            "destination": "Paris",
            "departure_time": "2026-11-02 08:15",
            "arrival_time": "2026-11-02 11:40",
            "total_seats": 1,
        },
    )
    assert created.status_code == 201, created.text
    assert created.json()["seats_available"] == 1

    for username in ("alice", "bob"):
        registered = client.post("/register", json={"username": username, "password": "pw"})
        assert registered.status_code == 201, registered.text
    alice = _login(client, "alice", "pw")
    bob = _login(client, "bob", "pw")

    reserved = client.post(
        "/reservations",
        headers=alice,
        json={"resource_kind": "Flight", "resource_id": 100},
    )
    assert reserved.status_code == 201, reserved.text
    reservation_id = reserved.json()["id"]
    assert reservation_id > 1000
    assert reserved.json()["status"] == "Pending"

    refused = client.post(
        "/reservations",
        headers=bob,
        json={"resource_kind": "Flight", "resource_id": 100},
    )
    assert refused.status_code == 409
    assert refused.json()["detail"]["error"] == "InsufficientCapacityError"

    notifications = client.get("/notifications", headers=admin)
    assert notifications.status_code == 200
    assert [row["id"] for row in notifications.json()["pending"]] == [reservation_id]

    approved = client.post(f"/reservations/{reservation_id}/approve", headers=admin)
    assert approved.status_code == 200
    assert approved.json()["status"] == "Approved"
    again = client.post(f"/reservations/{reservation_id}/approve", headers=admin)
    assert again.status_code == 409

    stolen = client.post(f"/reservations/{reservation_id}/cancel", headers=bob)
    assert stolen.status_code == 403

    cancel = client.post(f"/reservations/{reservation_id}/cancel", headers=alice)
    assert cancel.status_code == 200
    assert cancel.json()["status"] == "CancelRequested"

    confirmed = client.post(
        f"/reservations/{reservation_id}/cancellation/confirm",
        headers=admin,
    )
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "Cancelled"

    flights = client.get("/flights").json()
    assert flights[0]["seats_available"] == 1
    availability = client.get("/flights/100/availability").json()
    assert availability["available"] == 1

    mine = client.get("/reservations/mine", headers=alice).json()
    assert [(row["id"], row["status"]) for row in mine] == [(reservation_id, "Cancelled")]

    report = client.post("/report", headers=admin)
    assert report.status_code == 200
    assert report.json()["status_counts"]["Cancelled"] == 1
    assert (tmp_path / "reservations_report.txt").exists()

    assert repository.count_reservations() == 1


def test_authorization_is_enforced(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    client.post("/register", json={"username": "alice", "password": "pw"})
    alice = _login(client, "alice", "pw")

    anonymous = client.post("/reservations", json={"resource_kind": "Hotel", "resource_id": 1})
    assert anonymous.status_code == 401

    forbidden = client.get("/reservations", headers=alice)
    assert forbidden.status_code == 403

    bogus = client.get("/me", headers={"Authorization": "Bearer not-a-token"})
    assert bogus.status_code == 401

    unknown = client.post(
        "/reservations",
        headers=alice,
        json={"resource_kind": "Hotel", "resource_id": 999},
    )
    assert unknown.status_code == 404


def test_catalog_management_and_user_admin(tmp_path):
    app, _ = _build_test_app(tmp_path)
    client = TestClient(app)
    admin = _login(client, "admin", "admin-pass")

    created = client.post(
        "/hotels",
        headers=admin,
        json={"id": 200, "name": "Hotel Avenida", "location": "Paris", "total_rooms": 2},
    )
    assert created.status_code == 201
    duplicate = client.post(
        "/hotels",
        headers=admin,
        json={"id": 200, "name": "Other", "location": "Rome", "total_rooms": 1},
    )
    assert duplicate.status_code == 409

    updated = client.put("/hotels/200", headers=admin, json={"total_rooms": 5})
    assert updated.status_code == 200
    assert updated.json()["rooms_available"] == 5

    deleted = client.delete("/hotels/200", headers=admin)
    assert deleted.status_code == 204
    assert client.get("/hotels").json() == []
    assert client.delete("/hotels/200", headers=admin).status_code == 404

    made = client.post(
        "/users",
        headers=admin,
        json={"username": "ops", "password": "pw", "is_admin": True},
    )
    assert made.status_code == 201
    assert {row["username"] for row in client.get("/users", headers=admin).json()} == {
        "admin",
        "ops",
    }
    assert client.delete("/users/admin", headers=admin).status_code == 400
    assert client.delete("/users/ops", headers=admin).status_code == 204
    assert client.delete("/users/ops", headers=admin).status_code == 404
