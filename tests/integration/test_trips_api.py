"""Tests for the marketplace HTTP API."""

from collections.abc import Iterator
from datetime import date

import pytest
from fastapi.testclient import TestClient

from bondicar.api.deps import get_trip_service
from bondicar.main import app
from bondicar.services.trips import TripService

DRIVER = {"Authorization": "Bearer driver-1"}
PASSENGER = {"Authorization": "Bearer passenger-1"}
SCHEDULER = {"Authorization": "Bearer scheduler"}

DRIVER_CONTACT = {"name": "Ana", "phone": "5491122334455"}
PASSENGER_CONTACT = {"name": "Bruno", "phone": "5491155667788"}


@pytest.fixture
def client(service: TripService) -> Iterator[TestClient]:
    """Test client wired to the fixture service."""
    app.dependency_overrides[get_trip_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def series_payload(**overrides) -> dict:
    payload = {
        "contact": DRIVER_CONTACT,
        "origin": "Quilmes",
        "destination": "CABA",
        "departure_time": "08:00",
        "seats_offered": 3,
        "price": 1800,
        "recurrence": {
            "weekdays": ["martes", "viernes"],
            "start_date": "2024-01-01",
            "end_date": "2024-01-31",
            "publish_days_before": 4,
        },
    }
    payload.update(overrides)
    return payload


def one_off_payload(**overrides) -> dict:
    payload = {
        "contact": DRIVER_CONTACT,
        "origin": "La Plata",
        "destination": "CABA",
        "departure_date": "2024-01-04",
        "departure_time": "07:30",
        "seats_offered": 3,
        "price": 2500,
    }
    payload.update(overrides)
    return payload


def test_root(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["message"] == "BondiCar API"


def test_create_series_returns_published_instances(client: TestClient) -> None:
    response = client.post("/trips", json=series_payload(), headers=DRIVER)

    assert response.status_code == 201
    data = response.json()
    assert data["recurrence_id"].startswith("REC-")
    assert data["published"] == 2
    assert [trip["departure_date"] for trip in data["trips"]] == ["2024-01-02", "2024-01-05"]
    assert data["trips"][0]["recurrence"]["weekdays"] == ["tuesday", "friday"]


def test_create_validation_errors(client: TestClient) -> None:
    """Test schema errors and marketplace rule errors both answer 422."""
    bad_weekday = series_payload()
    bad_weekday["recurrence"]["weekdays"] = ["funday"]
    assert client.post("/trips", json=bad_weekday, headers=DRIVER).status_code == 422

    past = one_off_payload(departure_date="2023-12-31")
    response = client.post("/trips", json=past, headers=DRIVER)
    assert response.status_code == 422
    assert "before today" in response.json()["detail"]

    far_lead = series_payload()
    far_lead["recurrence"]["publish_days_before"] = 800_000
    assert client.post("/trips", json=far_lead, headers=DRIVER).status_code == 422


def test_search_collapses_series(client: TestClient) -> None:
    client.post("/trips", json=series_payload(), headers=DRIVER)
    client.post("/trips", json=one_off_payload(), headers=DRIVER)

    response = client.get("/trips/search")

    assert response.status_code == 200
    data = response.json()
    assert len(data["trips"]) == 1
    assert len(data["series"]) == 1
    assert data["series"][0]["next_trip_date"] == "2024-01-02"
    assert data["series"][0]["instance_count"] == 2
    assert data["series"][0]["contact_url"].startswith("https://wa.me/5491122334455")

    filtered = client.get("/trips/search", params={"origin": "plata"}).json()
    assert len(filtered["trips"]) == 1
    assert filtered["series"] == []

    assert client.get("/trips/search", params={"min_seats": 0}).status_code == 422


def test_featured(client: TestClient) -> None:
    client.post("/trips", json=one_off_payload(), headers=DRIVER)

    data = client.get("/trips/featured").json()

    assert len(data["trips"]) == 1


def test_get_and_delete_trip(client: TestClient) -> None:
    trip_id = client.post("/trips", json=one_off_payload(), headers=DRIVER).json()["trips"][0]["id"]

    assert client.get(f"/trips/{trip_id}").json()["id"] == trip_id
    assert client.delete(f"/trips/{trip_id}", headers=PASSENGER).status_code == 403
    assert client.delete(f"/trips/{trip_id}", headers=DRIVER).status_code == 204
    assert client.get(f"/trips/{trip_id}").status_code == 404


def test_delete_series(client: TestClient) -> None:
    rid = client.post("/trips", json=series_payload(), headers=DRIVER).json()["recurrence_id"]

    assert client.delete(f"/series/{rid}", headers=PASSENGER).status_code == 403

    response = client.delete(f"/series/{rid}", headers=DRIVER)
    assert response.status_code == 200
    assert response.json() == {"recurrence_id": rid, "deleted": 2}
    assert client.delete(f"/series/{rid}", headers=DRIVER).status_code == 404


def test_publish_due_endpoint(client: TestClient, clock: dict[str, date]) -> None:
    client.post("/trips", json=series_payload(), headers=DRIVER)
    clock["today"] = date(2024, 1, 8)

    response = client.post("/series/publish", headers=SCHEDULER)

    assert response.status_code == 200
    assert response.json() == {"published": 2}


def test_publish_due_requires_scheduler(client: TestClient, clock: dict[str, date]) -> None:
    client.post("/trips", json=series_payload(), headers=DRIVER)
    clock["today"] = date(2024, 1, 8)

    assert client.post("/series/publish", headers=DRIVER).status_code == 403
    assert client.post("/series/publish").status_code == 403
    assert client.post("/series/publish", headers=SCHEDULER).json() == {"published": 2}


def test_booking_flow(client: TestClient) -> None:
    rid = client.post("/trips", json=series_payload(), headers=DRIVER).json()["recurrence_id"]

    response = client.post(
        f"/series/{rid}/bookings",
        json={"seats": 2, "passenger": PASSENGER_CONTACT},
        headers=PASSENGER,
    )
    assert response.status_code == 201
    booking = response.json()
    assert booking["status"] == "pending"

    assert [b["id"] for b in client.get("/bookings/incoming", headers=DRIVER).json()] == [
        booking["id"]
    ]
    assert [b["id"] for b in client.get("/bookings/mine", headers=PASSENGER).json()] == [
        booking["id"]
    ]

    response = client.patch(
        f"/bookings/{booking['id']}", json={"status": "accepted"}, headers=PASSENGER
    )
    assert response.status_code == 403

    response = client.patch(f"/bookings/{booking['id']}", json={"status": "accepted"}, headers=DRIVER)
    assert response.status_code == 200
    assert client.get(f"/trips/{booking['trip_id']}").json()["available_seats"] == 1

    response = client.patch(f"/bookings/{booking['id']}", json={"status": "rejected"}, headers=DRIVER)
    assert response.status_code == 409


def test_booking_too_many_seats_conflicts(client: TestClient) -> None:
    trip_id = client.post("/trips", json=one_off_payload(), headers=DRIVER).json()["trips"][0]["id"]

    response = client.post(
        f"/trips/{trip_id}/bookings",
        json={"seats": 4, "passenger": PASSENGER_CONTACT},
        headers=PASSENGER,
    )

    assert response.status_code == 409


def test_offer_flow(client: TestClient) -> None:
    request = {
        "kind": "passenger_request",
        "contact": PASSENGER_CONTACT,
        "origin": "Tigre",
        "destination": "CABA",
        "departure_date": "2024-01-04",
        "departure_time": "09:00",
        "max_price": 2000,
    }
    request_id = client.post("/trips", json=request, headers=PASSENGER).json()["trips"][0]["id"]

    response = client.post(
        f"/requests/{request_id}/offers",
        json={"driver": DRIVER_CONTACT, "price": 1900, "available_seats": 1},
        headers=DRIVER,
    )
    assert response.status_code == 201
    offer = response.json()
    assert offer["contact_url"] is None

    assert len(client.get(f"/requests/{request_id}/offers", headers=PASSENGER).json()) == 1

    response = client.patch(f"/offers/{offer['id']}", json={"status": "accepted"}, headers=PASSENGER)
    assert response.status_code == 200
    assert response.json()["contact_url"].startswith("https://wa.me/5491122334455")


def test_dashboard(client: TestClient) -> None:
    client.post("/trips", json=series_payload(), headers=DRIVER)
    client.post("/trips", json=one_off_payload(), headers=DRIVER)

    data = client.get("/dashboard", headers=DRIVER).json()

    assert len(data["upcoming_trips"]) == 1
    assert len(data["active_series"]) == 1
    assert client.get("/dashboard", headers=PASSENGER).json()["active_series"] == []


def test_invalid_token_is_rejected(client: TestClient) -> None:
    response = client.get("/dashboard", headers={"Authorization": "Token abc"})
    assert response.status_code == 401


def test_profile_endpoints(client: TestClient) -> None:
    assert client.get("/profile", headers=DRIVER).status_code == 404

    response = client.put(
        "/profile", json={"name": "Ana", "phone": "+54 9 11 2233-4455"}, headers=DRIVER
    )
    assert response.status_code == 200
    assert response.json()["phone"] == "5491122334455"
    assert client.get("/profile", headers=DRIVER).json()["name"] == "Ana"

    assert client.put("/profile", json={"name": ""}, headers=DRIVER).status_code == 422
    assert client.put("/profile", json={"name": "  "}, headers=DRIVER).status_code == 422


def test_trip_without_contact_uses_profile(client: TestClient) -> None:
    payload = one_off_payload()
    del payload["contact"]
    assert client.post("/trips", json=payload, headers=DRIVER).status_code == 422

    client.put("/profile", json=DRIVER_CONTACT, headers=DRIVER)
    response = client.post("/trips", json=payload, headers=DRIVER)

    assert response.status_code == 201
    assert response.json()["trips"][0]["owner"] == DRIVER_CONTACT
