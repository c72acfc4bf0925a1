"""
Integration tests for the seating API
"""

import pytest
import threading
from fastapi import status
from fastapi.testclient import TestClient
from sqlmodel import Session

from seating.core.database import get_session
from seating.core.events import event_bus
from seating.main import app
from seating.services.allocation import AllocationCoordinator

API = "/api/v1/tables"


@pytest.fixture
def client(db: Session):
    """Test client bound to the per-test database session"""
    app.dependency_overrides[get_session] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


def create_table(client: TestClient, number: int, capacity: int = 4, **extra) -> dict:
    response = client.post(f"{API}/", json={"table_number": number, "capacity": capacity, **extra})
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


def create_booking(client: TestClient, **overrides) -> dict:
    payload = {
        "customer_name": "Ada Lovelace",
        "customer_phone": "555-0100",
        "party_size": 2,
        "booking_time": "2026-10-19T18:00:00",
    }
    payload.update(overrides)
    response = client.post(f"{API}/book", json=payload)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


class TestTableEndpoints:

    def test_create_and_get_table(self, client):
        table = create_table(client, 1, capacity=6, location_description="Patio")

        response = client.get(f"{API}/{table['id']}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["capacity"] == 6
        assert response.json()["status"] == "AVAILABLE"

    def test_duplicate_table_number(self, client):
        create_table(client, 1)

        response = client.post(f"{API}/", json={"table_number": 1, "capacity": 2})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert len(client.get(f"{API}/").json()) == 1

    def test_zero_capacity(self, client):
        response = client.post(f"{API}/", json={"table_number": 1, "capacity": 0})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_table(self, client):
        assert client.get(f"{API}/999").status_code == status.HTTP_404_NOT_FOUND

    def test_available_by_capacity(self, client):
        create_table(client, 1, capacity=8)
        create_table(client, 2, capacity=4)
        create_table(client, 3, capacity=2)
        create_table(client, 4, capacity=6, status="OCCUPIED")

        by_path = client.get(f"{API}/available/3").json()
        by_query = client.get(f"{API}/available", params={"min_capacity": 3}).json()

        assert [t["table_number"] for t in by_path] == [2, 1]
        assert by_query == by_path
        assert len(client.get(f"{API}/available").json()) == 3

    def test_update_status(self, client):
        table = create_table(client, 1)

        response = client.put(f"{API}/{table['id']}/status", params={"status": "RESERVED"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "RESERVED"

    def test_update_status_unknown_table(self, client):
        response = client.put(f"{API}/77/status", params={"status": "RESERVED"})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_status_stale_version(self, client):
        table = create_table(client, 1)
        client.put(f"{API}/{table['id']}/status", params={"status": "RESERVED"})

        response = client.put(
            f"{API}/{table['id']}/status",
            params={"status": "AVAILABLE", "version": 1},
        )

        assert response.status_code == status.HTTP_409_CONFLICT


class TestBookingEndpoints:

    def test_create_booking_with_estimate(self, client):
        create_table(client, 1)

        booking = create_booking(client)

        assert booking["status"] == "WAITING"
        assert booking["estimated_wait_time"] == 5
        assert booking["table_id"] is None

    def test_invalid_party_size(self, client):
        response = client.post(f"{API}/book", json={
            "customer_name": "Ada",
            "customer_phone": "555-0100",
            "party_size": 0,
            "booking_time": "2026-10-19T18:00:00",
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert client.get(f"{API}/bookings").json() == []

    def test_missing_booking_time(self, client):
        response = client.post(f"{API}/book", json={
            "customer_name": "Ada",
            "customer_phone": "555-0100",
            "party_size": 2,
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_waiting_list_order(self, client):
        late = create_booking(client, booking_time="2026-10-19T18:30:00")
        early = create_booking(client, booking_time="2026-10-19T18:00:00")

        waiting = client.get(f"{API}/bookings/waiting").json()

        assert [b["id"] for b in waiting] == [early["id"], late["id"]]

    def test_filters(self, client):
        mine = create_booking(client, customer_phone="555-0001", booking_time="2026-10-19T18:00:00")
        create_booking(client, customer_phone="555-0002", booking_time="2026-10-19T21:00:00")

        by_phone = client.get(f"{API}/bookings", params={"phone": "555-0001"}).json()
        by_range = client.get(f"{API}/bookings", params={
            "start": "2026-10-19T17:00:00",
            "end": "2026-10-19T19:00:00",
        }).json()
        half_range = client.get(f"{API}/bookings", params={"start": "2026-10-19T17:00:00"})

        assert [b["id"] for b in by_phone] == [mine["id"]]
        assert [b["id"] for b in by_range] == [mine["id"]]
        assert half_range.status_code == status.HTTP_400_BAD_REQUEST

    def test_get_unknown_booking(self, client):
        assert client.get(f"{API}/bookings/5").status_code == status.HTTP_404_NOT_FOUND


class TestSeatingFlow:

    def test_seat_complete_flow(self, client):
        table = create_table(client, 1)
        booking = create_booking(client)

        seated = client.put(f"{API}/bookings/{booking['id']}/seat/{table['id']}")
        assert seated.status_code == status.HTTP_200_OK
        assert seated.json()["status"] == "SEATED"
        assert seated.json()["table_id"] == table["id"]
        assert client.get(f"{API}/{table['id']}").json()["status"] == "OCCUPIED"

        completed = client.put(f"{API}/bookings/{booking['id']}/complete")
        assert completed.status_code == status.HTTP_200_OK
        assert completed.json()["status"] == "COMPLETED"
        assert completed.json()["checkout_time"] is not None
        assert client.get(f"{API}/{table['id']}").json()["status"] == "AVAILABLE"

    def test_seat_unknown_booking(self, client):
        table = create_table(client, 1)

        response = client.put(f"{API}/bookings/999/seat/{table['id']}")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert client.get(f"{API}/{table['id']}").json()["status"] == "AVAILABLE"

    def test_double_seat_conflict(self, client):
        table = create_table(client, 1)
        booking = create_booking(client)
        client.put(f"{API}/bookings/{booking['id']}/seat/{table['id']}")

        again = client.put(f"{API}/bookings/{booking['id']}/seat/{table['id']}")
        other = create_booking(client)
        taken = client.put(f"{API}/bookings/{other['id']}/seat/{table['id']}")

        assert again.status_code == status.HTTP_409_CONFLICT
        assert taken.status_code == status.HTTP_409_CONFLICT

    def test_seat_stale_version(self, client):
        table = create_table(client, 1)
        booking = create_booking(client)

        response = client.put(
            f"{API}/bookings/{booking['id']}/seat/{table['id']}",
            params={"version": booking["version"] + 1},
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_cancel_keeps_table_occupied(self, client):
        table = create_table(client, 1)
        booking = create_booking(client)
        client.put(f"{API}/bookings/{booking['id']}/seat/{table['id']}")

        cancelled = client.delete(f"{API}/bookings/{booking['id']}")
        again = client.delete(f"{API}/bookings/{booking['id']}")

        assert cancelled.status_code == status.HTTP_200_OK
        assert cancelled.json()["status"] == "CANCELLED"
        assert again.status_code == status.HTTP_200_OK
        assert client.get(f"{API}/{table['id']}").json()["status"] == "OCCUPIED"

    def test_cancel_unknown(self, client):
        assert client.delete(f"{API}/bookings/31").status_code == status.HTTP_404_NOT_FOUND

    def test_complete_cancelled_conflict(self, client):
        booking = create_booking(client)
        client.delete(f"{API}/bookings/{booking['id']}")

        response = client.put(f"{API}/bookings/{booking['id']}/complete")

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_seat_publishes_event(self, client):
        received = []

        async def handler(event):
            received.append(event.to_dict())

        event_bus.subscribe("BookingSeated", handler)
        table = create_table(client, 1)
        booking = create_booking(client)

        client.put(f"{API}/bookings/{booking['id']}/seat/{table['id']}")

        assert len(received) == 1
        assert received[0]["booking_id"] == booking["id"]
        assert received[0]["table_id"] == table["id"]


class TestWaitingTimeEndpoints:

    def test_estimate(self, client):
        create_table(client, 1)
        for _ in range(3):
            create_booking(client)

        response = client.get(f"{API}/waiting-time/2")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"party_size": 2, "estimated_wait_time": 45}

    def test_estimate_no_tables(self, client):
        for _ in range(3):
            create_booking(client)

        assert client.get(f"{API}/waiting-time/5").json()["estimated_wait_time"] == 75

    def test_estimate_invalid_party(self, client):
        assert client.get(f"{API}/waiting-time/0").status_code == status.HTTP_400_BAD_REQUEST

    def test_stats(self, client):
        first = create_table(client, 1)
        create_table(client, 2)
        booking = create_booking(client)
        create_booking(client)
        client.put(f"{API}/bookings/{booking['id']}/seat/{first['id']}")

        stats = client.get(f"{API}/waiting-time").json()

        assert stats["waiting_count"] == 1
        assert stats["available_table_count"] == 1
        assert stats["occupied_table_count"] == 1
        assert isinstance(stats["average_wait"], float)


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_service_calls_run_off_the_event_loop(client, monkeypatch):
    """Test blocking database work is handed to the threadpool"""
    threads = {}
    original_seat = AllocationCoordinator.seat

    def recording_seat(self, *args, **kwargs):
        threads["service"] = threading.get_ident()
        return original_seat(self, *args, **kwargs)

    async def on_seated(event):
        threads["loop"] = threading.get_ident()

    monkeypatch.setattr(AllocationCoordinator, "seat", recording_seat)
    event_bus.subscribe("BookingSeated", on_seated)
    table = create_table(client, 1)
    booking = create_booking(client)

    response = client.put(f"{API}/bookings/{booking['id']}/seat/{table['id']}")

    assert response.status_code == status.HTTP_200_OK
    assert threads["service"] != threads["loop"]
