"""
Tests for the HTTP API: wire format, error envelope and auth
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.core.db import Base, get_db
from app.utils.security import rate_limiter
from main import app

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_api.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

AUTH = {"Authorization": f"Bearer {settings.ADMIN_TOKEN}"}

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def client():
    Base.metadata.create_all(bind=engine)
    app.dependency_overrides[get_db] = override_get_db
    rate_limiter.reset()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def event(client):
    """An event with two confirmed guests and no tables"""
    response = client.post("/admin/events", headers=AUTH, json={
        "name": "Garden Wedding",
        "date": "2024-08-20T17:00:00",
        "organizer_email": "planner@example.com"
    })
    assert response.status_code == 201
    data = response.json()["data"]

    data["guests"] = {}
    for name in ["Alice", "Bob"]:
        guest = client.post(
            f"/admin/events/{data['id']}/guests",
            headers=AUTH,
            json={"name": name, "rsvp_status": "confirmed"}
        )
        assert guest.status_code == 201
        data["guests"][name] = guest.json()["data"]["id"]
    return data

def seating_url(event, path=""):
    return f"/admin/events/{event['id']}/seating{path}"

def add_table(client, event, table_id="t1", capacity=1):
    return client.post(seating_url(event, "/tables"), headers=AUTH, json={
        "id": table_id, "number": 1, "name": "Head Table", "capacity": capacity
    })

def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}

def test_admin_routes_require_token(client, event):
    assert client.get(seating_url(event)).status_code in (401, 403)
    response = client.get(seating_url(event), headers={"Authorization": "Bearer wrong"})
    assert response.status_code == 401

def test_arrangement_uses_camel_case(client, event):
    response = client.get(seating_url(event), headers=AUTH)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["tables"] == []
    assert [g["name"] for g in data["unassignedGuests"]] == ["Alice", "Bob"]

def test_create_table(client, event):
    response = add_table(client, event, capacity=6)

    assert response.status_code == 201
    table = response.json()["data"]
    assert table == {
        "id": "t1", "number": 1, "name": "Head Table", "capacity": 6,
        "shape": "round", "x": None, "y": None, "guests": []
    }

def test_create_table_invalid_capacity(client, event):
    response = add_table(client, event, capacity=0)

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error_code"] == "INVALID_CAPACITY"

def test_assign_guest_and_table_full(client, event):
    add_table(client, event)
    alice, bob = event["guests"]["Alice"], event["guests"]["Bob"]

    response = client.post(seating_url(event, "/tables/t1/guests"), headers=AUTH, json={"guestId": alice})
    assert response.status_code == 200
    seated = response.json()["data"]["tables"][0]["guests"]
    assert seated == [{"id": alice, "name": "Alice", "seatNumber": 1}]

    response = client.post(seating_url(event, "/tables/t1/guests"), headers=AUTH, json={"guestId": bob})
    assert response.status_code == 409
    assert response.json()["error_code"] == "TABLE_FULL"

    guests = client.get(f"/admin/events/{event['id']}/guests", headers=AUTH).json()["data"]["guests"]
    assert {g["name"]: g["table_name"] for g in guests} == {"Alice": "Head Table", "Bob": None}

def test_assign_to_unknown_table(client, event):
    response = client.post(
        seating_url(event, "/tables/missing/guests"), headers=AUTH, json={"guestId": event["guests"]["Bob"]}
    )

    assert response.status_code == 404
    assert response.json()["error_code"] == "TABLE_NOT_FOUND"

def test_unassign_and_delete_table(client, event):
    add_table(client, event, capacity=2)
    alice = event["guests"]["Alice"]
    client.post(seating_url(event, "/tables/t1/guests"), headers=AUTH, json={"guestId": alice})

    response = client.delete(seating_url(event, f"/tables/t1/guests/{alice}"), headers=AUTH)
    assert response.json()["data"]["tables"][0]["guests"] == []

    response = client.delete(seating_url(event, "/tables/t1"), headers=AUTH)
    assert response.status_code == 200
    assert response.json()["data"]["arrangement"]["tables"] == []

def test_optimize_reports_stats(client, event):
    add_table(client, event)

    response = client.post(seating_url(event, "/optimize"), headers=AUTH, json={})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["optimized"] is True
    assert data["stats"] == {"totalGuests": 2, "seatedGuests": 1, "unassignedGuests": 1}
    assert len(data["arrangement"]["unassignedGuests"]) == 1

def test_save_arrangement_rejects_duplicates(client, event):
    alice = event["guests"]["Alice"]
    response = client.put(seating_url(event), headers=AUTH, json={
        "tables": [{
            "id": "t1", "number": 1, "name": "Head Table", "capacity": 2,
            "guests": [{"id": alice, "name": "Alice", "seatNumber": 1}]
        }],
        "unassignedGuests": [{"id": alice, "name": "Alice"}]
    })

    assert response.status_code == 422
    body = response.json()
    assert body["error_code"] == "DUPLICATE_ASSIGNMENT"
    assert body["details"] == [alice]

def test_deleted_guest_leaves_arrangement(client, event):
    add_table(client, event, capacity=2)
    alice = event["guests"]["Alice"]
    client.post(seating_url(event, "/tables/t1/guests"), headers=AUTH, json={"guestId": alice})

    response = client.delete(f"/admin/events/{event['id']}/guests/{alice}", headers=AUTH)
    assert response.status_code == 200

    data = client.get(seating_url(event), headers=AUTH).json()["data"]
    assert data["tables"][0]["guests"] == []
    assert [g["name"] for g in data["unassignedGuests"]] == ["Bob"]

def test_preferences_round_trip(client, event):
    alice, bob = event["guests"]["Alice"], event["guests"]["Bob"]
    payload = {"preferences": [{"guestId": alice, "preferWith": [bob], "avoidWith": []}]}

    response = client.put(seating_url(event, "/preferences"), headers=AUTH, json=payload)
    assert response.status_code == 200

    preferences = client.get(seating_url(event, "/preferences"), headers=AUTH).json()["data"]["preferences"]
    assert preferences == [{"guestId": alice, "preferWith": [bob], "avoidWith": [], "specialNeeds": None}]

def test_layout_generates_tables(client, event):
    response = client.post(f"/admin/events/{event['id']}/layouts", headers=AUTH, json={
        "name": "Ballroom",
        "venueLayout": {"width": 1200, "height": 900, "tables": [{"id": "east", "x": 900, "y": 450}]},
        "isDefault": True
    })
    assert response.status_code == 201
    layout = response.json()["data"]
    assert layout["isDefault"] is True

    response = client.post(
        f"/admin/events/{event['id']}/layouts/{layout['id']}/generate-tables",
        headers=AUTH,
        json={"capacity": 10}
    )
    tables = response.json()["data"]["tables"]
    assert [(t["id"], t["capacity"], t["x"]) for t in tables] == [("east", 10, 900)]

def test_export_seating_chart(client, event):
    response = client.get(seating_url(event, "/export.xlsx"), headers=AUTH)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )

def test_public_seating_summary(client, event):
    add_table(client, event, capacity=4)
    client.post(seating_url(event, "/tables/t1/guests"), headers=AUTH, json={"guestId": event["guests"]["Bob"]})

    response = client.get(f"/events/{event['public_code']}/seating")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["event_name"] == "Garden Wedding"
    assert data["tables"] == [{
        "table_number": 1, "table_name": "Head Table", "total_guests": 1, "capacity": 4, "available_seats": 3
    }]

def test_public_summary_unknown_event(client):
    response = client.get("/events/NOPE/seating")

    assert response.status_code == 404
    assert response.json()["error_code"] == "EVENT_NOT_FOUND"

def test_public_summary_rate_limited(client, event):
    url = f"/events/{event['public_code']}/seating"
    for _ in range(settings.RATE_LIMIT_PER_MINUTE):
        assert client.get(url).status_code == 200

    assert client.get(url).status_code == 429

def test_create_guest_rejects_unknown_rsvp(client, event):
    response = client.post(
        f"/admin/events/{event['id']}/guests",
        headers=AUTH,
        json={"name": "Carol", "rsvp_status": "declnied"}
    )

    assert response.status_code == 422
    guests = client.get(f"/admin/events/{event['id']}/guests", headers=AUTH).json()["data"]["guests"]
    assert [g["name"] for g in guests] == ["Alice", "Bob"]

def test_save_arrangement_rejects_guest_off_the_roster(client, event):
    alice = event["guests"]["Alice"]
    response = client.post(seating_url(event), headers=AUTH, json={
        "tables": [],
        "unassignedGuests": [{"id": alice, "name": "Alice"}, {"id": "ghost", "name": "Ghost"}]
    })

    assert response.status_code == 404
    assert response.json()["error_code"] == "GUEST_NOT_FOUND"

def test_save_partial_arrangement_pools_missing_guests(client, event):
    alice = event["guests"]["Alice"]
    response = client.post(seating_url(event), headers=AUTH, json={
        "tables": [],
        "unassignedGuests": [{"id": alice, "name": "Alice"}]
    })

    assert response.status_code == 200
    data = client.get(seating_url(event), headers=AUTH).json()["data"]
    assert [g["name"] for g in data["unassignedGuests"]] == ["Alice", "Bob"]

def test_save_arrangement_rejects_shared_seat(client, event):
    alice, bob = event["guests"]["Alice"], event["guests"]["Bob"]
    response = client.put(seating_url(event), headers=AUTH, json={
        "tables": [{
            "id": "t1", "number": 1, "name": "Head Table", "capacity": 2,
            "guests": [
                {"id": alice, "name": "Alice", "seatNumber": 1},
                {"id": bob, "name": "Bob", "seatNumber": 1}
            ]
        }]
    })

    assert response.status_code == 409
    assert response.json()["error_code"] == "SEAT_TAKEN"

def test_optimize_rejects_repeated_guest(client, event):
    alice = event["guests"]["Alice"]
    response = client.post(seating_url(event, "/optimize"), headers=AUTH, json={
        "tables": [{"id": "t1", "capacity": 4}],
        "guests": [{"id": alice, "name": "Alice"}, {"id": alice, "name": "Alice"}]
    })

    assert response.status_code == 422
    assert response.json()["error_code"] == "DUPLICATE_ASSIGNMENT"

def test_save_preferences_rejects_repeated_guest(client, event):
    alice, bob = event["guests"]["Alice"], event["guests"]["Bob"]
    response = client.put(seating_url(event, "/preferences"), headers=AUTH, json={"preferences": [
        {"guestId": alice, "preferWith": [bob]},
        {"guestId": alice, "avoidWith": [bob]}
    ]})

    assert response.status_code == 422
    body = response.json()
    assert body["error_code"] == "DUPLICATE_PREFERENCE"
    assert body["details"] == [alice]

def test_duplicate_layout(client, event):
    layouts_url = f"/admin/events/{event['id']}/layouts"
    venue = {"width": 1200, "height": 900, "tables": [{"id": "east", "x": 900, "y": 450}]}
    original = client.post(layouts_url, headers=AUTH, json={
        "name": "Ballroom", "venueLayout": venue, "isDefault": True
    }).json()["data"]

    response = client.post(f"{layouts_url}/{original['id']}/duplicate", headers=AUTH, json={"name": "Terrace"})

    assert response.status_code == 201
    copy = response.json()["data"]
    assert (copy["name"], copy["isDefault"]) == ("Terrace", False)
    assert copy["venueLayout"] == original["venueLayout"]
