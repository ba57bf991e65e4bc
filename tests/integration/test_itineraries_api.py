"""Integration tests for itinerary and section routes."""

from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from voyage.main import create_app
from voyage.services import build_in_memory_services

TRIP = {
    "title": "Tokyo Spring",
    "city": "Tokyo",
    "startDate": "2026-03-01",
    "endDate": "2026-03-03",
}


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(create_app(build_in_memory_services(save_delay=0.01))) as client:
        yield client


def _sign_up(client: TestClient, username: str = "amy") -> dict[str, str]:
    response = client.post(
        "/auth/register",
        json={
            "username": username,
            "password": "pw-123",
            "security_question": "您最喜歡的食物是？",
            "security_answer": "ramen",
        },
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth(client: TestClient) -> dict[str, str]:
    return _sign_up(client)


@pytest.fixture
def trip(client: TestClient, auth: dict[str, str]) -> dict[str, Any]:
    response = client.post("/itineraries", json=TRIP, headers=auth)
    assert response.status_code == 201
    return response.json()


def test_requires_session(client: TestClient) -> None:
    assert client.get("/itineraries").status_code == 401
    assert client.get("/itineraries", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_create_and_list(client: TestClient, auth: dict[str, str], trip: dict[str, Any]) -> None:
    assert trip["trip_summary"]["total_days"] == 3
    assert [d["theme"] for d in trip["daily_itinerary"]] == ["Arrival", "Exploration", "Departure"]

    client.post(
        "/itineraries",
        json={
            "title": "Osaka",
            "city": "Osaka",
            "startDate": "2026-01-10",
            "endDate": "2026-01-11",
        },
        headers=auth,
    )

    by_date = client.get("/itineraries", params={"sort": "date"}, headers=auth).json()
    assert [t["title"] for t in by_date["itineraries"]] == ["Osaka", "Tokyo Spring"]

    by_city = client.get("/itineraries", params={"sort": "destination"}, headers=auth).json()
    assert [t["trip_summary"]["city"] for t in by_city["itineraries"]] == ["Osaka", "Tokyo"]


def test_invalid_date_range_is_400(client: TestClient, auth: dict[str, str]) -> None:
    response = client.post(
        "/itineraries", json={**TRIP, "startDate": "2026-03-05"}, headers=auth
    )

    assert response.status_code == 400


def test_extend_trip_appends_free_days(
    client: TestClient, auth: dict[str, str], trip: dict[str, Any]
) -> None:
    day_one = trip["daily_itinerary"][0]["id"]
    client.post(
        f"/itineraries/{trip['id']}/days/{day_one}/activities",
        json={"location": "Senso-ji", "time_slot": "09:00"},
        headers=auth,
    )

    response = client.put(
        f"/itineraries/{trip['id']}", json={**TRIP, "endDate": "2026-03-05"}, headers=auth
    )

    assert response.status_code == 200
    days = response.json()["daily_itinerary"]
    assert len(days) == 5
    assert days[0]["activities"][0]["location"] == "Senso-ji"
    assert [d["theme"] for d in days[3:]] == ["Free Day", "Free Day"]


def test_expenses_follow_shopping_checkbox(
    client: TestClient, auth: dict[str, str], trip: dict[str, Any]
) -> None:
    base = f"/itineraries/{trip['id']}"
    client.post(
        f"{base}/transports",
        json={"type": "飛機", "detail": "TPE-HND", "cost": 500, "currency": "TWD"},
        headers=auth,
    )
    client.post(
        f"{base}/concerts",
        json={"artist": "Band", "date": "2026-03-02", "ticketCost": 2000, "merchCost": 300},
        headers=auth,
    )
    updated = client.post(
        f"{base}/shopping", json={"name": "Towel", "price": 100, "quantity": 2}, headers=auth
    ).json()

    assert client.get(f"{base}/expenses", headers=auth).json()["totals"]["TWD"] == 2800

    item_id = updated["shopping_list"][0]["id"]
    client.post(f"{base}/shopping/{item_id}/toggle", headers=auth)

    assert client.get(f"{base}/expenses", headers=auth).json()["totals"]["TWD"] == 3000


def test_transport_variants_and_images(
    client: TestClient, auth: dict[str, str], trip: dict[str, Any]
) -> None:
    base = f"/itineraries/{trip['id']}"
    rental = client.post(
        f"{base}/transports",
        json={"type": "租車", "pickupLocation": "Naha", "isSameLocation": True, "cost": 3000},
        headers=auth,
    ).json()["transports"][0]
    assert rental["returnLocation"] == "Naha"

    with_image = client.post(
        f"{base}/transports/{rental['id']}/images",
        json={"image": "data:image/png;base64,AAA"},
        headers=auth,
    ).json()
    assert with_image["transports"][0]["images"] == ["data:image/png;base64,AAA"]

    cleared = client.delete(f"{base}/transports/{rental['id']}/images/0", headers=auth).json()
    assert cleared["transports"][0]["images"] == []

    bad = client.post(f"{base}/transports", json={"type": "船"}, headers=auth)
    assert bad.status_code == 422


def test_section_routes_round_trip(
    client: TestClient, auth: dict[str, str], trip: dict[str, Any]
) -> None:
    base = f"/itineraries/{trip['id']}"
    day_one, day_two = trip["daily_itinerary"][0]["id"], trip["daily_itinerary"][1]["id"]

    doc = client.post(
        f"{base}/days/{day_one}/activities", json={"location": "Shibuya"}, headers=auth
    ).json()
    activity_id = doc["daily_itinerary"][0]["activities"][0]["id"]

    doc = client.post(
        f"{base}/days/{day_one}/activities/{activity_id}/move",
        json={"target_day": 2},
        headers=auth,
    ).json()
    assert doc["daily_itinerary"][1]["activities"][0]["id"] == activity_id

    doc = client.put(
        f"{base}/days/{day_two}/theme", json={"theme": "Shopping"}, headers=auth
    ).json()
    assert doc["daily_itinerary"][1]["theme"] == "Shopping"

    doc = client.post(
        f"{base}/packing",
        json={"name": "Charger", "category": "自定義名稱", "custom_category": "Tech"},
        headers=auth,
    ).json()
    packing_id = doc["packing_list"][0]["id"]
    assert doc["packing_list"][0]["category"] == "Tech"
    doc = client.post(f"{base}/packing/{packing_id}/toggle", headers=auth).json()
    assert doc["packing_list"][0]["checked"] is True

    doc = client.post(
        f"{base}/concerts", json={"artist": "Band", "date": "2026-03-02"}, headers=auth
    ).json()
    concert = doc["concerts"][0]
    doc = client.post(
        f"{base}/concerts/{concert['id']}/checklist/{concert['checklist'][0]['id']}/toggle",
        headers=auth,
    ).json()
    assert doc["concerts"][0]["checklist"][0]["checked"] is True

    missing = client.delete(f"{base}/packing/does-not-exist", headers=auth)
    assert missing.status_code == 404


def test_document_replace_requires_matching_id(
    client: TestClient, auth: dict[str, str], trip: dict[str, Any]
) -> None:
    response = client.put("/itineraries/other-id/document", json=trip, headers=auth)
    assert response.status_code == 400

    renamed = {**trip, "title": "Renamed"}
    response = client.put(f"/itineraries/{trip['id']}/document", json=renamed, headers=auth)
    assert response.status_code == 200
    assert client.get(f"/itineraries/{trip['id']}", headers=auth).json()["title"] == "Renamed"


def test_delete(client: TestClient, auth: dict[str, str], trip: dict[str, Any]) -> None:
    assert client.delete(f"/itineraries/{trip['id']}", headers=auth).status_code == 204
    assert client.get(f"/itineraries/{trip['id']}", headers=auth).status_code == 404
    assert client.get("/itineraries", headers=auth).json()["itineraries"] == []


def test_users_only_see_their_own_trips(client: TestClient, trip: dict[str, Any]) -> None:
    other = _sign_up(client, "ben")

    assert client.get("/itineraries", headers=other).json()["itineraries"] == []
    assert client.get(f"/itineraries/{trip['id']}", headers=other).status_code == 404
