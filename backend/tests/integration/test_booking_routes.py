"""
Integration tests for booking endpoints.
"""
from unittest.mock import MagicMock

import pytest

from tradesmen.api.app import app
from tradesmen.api.dependencies import get_notification_channel
from tradesmen.services.email_service import EmailService
from tradesmen.services.notification_service import NotificationChannel


@pytest.fixture
def email_service():
    service = MagicMock(spec=EmailService)
    channel = NotificationChannel(service)
    app.dependency_overrides[get_notification_channel] = lambda: channel
    yield service
    app.dependency_overrides.pop(get_notification_channel, None)


def _booking_request(**overrides):
    payload = {
        "name": "Jane Smith",
        "email": "jane@example.com",
        "phone": "07700 900123",
        "service_type": "plumbing",
        "scheduled_date": "2025-01-15",
        "scheduled_time": "10:00",
    }
    payload.update(overrides)
    return payload


@pytest.mark.integration
def test_public_booking_request(client, email_service):
    response = client.post("/api/booking", json=_booking_request())

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    booking_id = body["data"]["booking_id"]
    customer_id = body["data"]["customer_id"]

    booking = client.get(f"/api/bookings/{booking_id}").json()
    assert booking["status"] == "pending"
    assert booking["customer_id"] == customer_id
    assert booking["scheduled_time"] == "10:00:00"

    email_service.send_booking_notification.assert_called_once()
    args = email_service.send_booking_notification.call_args[0]
    assert args[0] == booking_id
    assert args[3] == "plumbing"


@pytest.mark.integration
def test_public_booking_reuses_customer(client):
    first = client.post("/api/booking", json=_booking_request()).json()["data"]
    second = client.post(
        "/api/booking", json=_booking_request(email="JANE@example.com", service_type="electrical")
    ).json()["data"]

    assert second["customer_id"] == first["customer_id"]
    assert second["booking_id"] != first["booking_id"]
    assert len(client.get("/api/customers").json()) == 1


@pytest.mark.integration
def test_public_booking_rejects_bad_email(client, email_service):
    response = client.post("/api/booking", json=_booking_request(email="jane.example.com"))

    assert response.status_code == 400
    assert response.json()["detail"] == "Email must contain '@'"
    email_service.send_booking_notification.assert_not_called()


@pytest.mark.integration
def test_admin_create_and_list(client):
    first = client.post("/api/bookings", json={"service_type": "plumbing"})
    second = client.post("/api/bookings", json={"service_type": "carpentry"})

    assert first.status_code == 201
    ids = [b["id"] for b in client.get("/api/bookings").json()]
    assert ids == [second.json()["id"], first.json()["id"]]


@pytest.mark.integration
def test_list_filtered_by_status(client):
    pending = client.post("/api/bookings", json={"service_type": "plumbing"}).json()["id"]
    confirmed = client.post("/api/bookings", json={"service_type": "plumbing"}).json()["id"]
    client.put(f"/api/bookings/{confirmed}/status", json={"status": "confirmed"})

    listed = client.get("/api/bookings", params={"status": "confirmed"}).json()
    assert [b["id"] for b in listed] == [confirmed]
    assert [b["id"] for b in client.get("/api/bookings?status=pending").json()] == [pending]


@pytest.mark.integration
def test_unknown_status_is_400(client):
    booking_id = client.post("/api/bookings", json={"service_type": "plumbing"}).json()["id"]

    assert client.get("/api/bookings", params={"status": "archived"}).status_code == 400
    response = client.put(f"/api/bookings/{booking_id}/status", json={"status": "archived"})
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


@pytest.mark.integration
def test_patch_booking(client):
    booking_id = client.post(
        "/api/bookings", json={"service_type": "plumbing", "notes": "Gate code 1234"}
    ).json()["id"]

    response = client.patch(
        f"/api/bookings/{booking_id}",
        json={"customer_rating": 5, "customer_review": "Spotless work"},
    )

    assert response.status_code == 200
    booking = response.json()
    assert booking["customer_rating"] == 5
    assert booking["customer_review"] == "Spotless work"
    assert booking["notes"] == "Gate code 1234"
    assert booking["status"] == "pending"


@pytest.mark.integration
def test_patch_rating_out_of_range(client):
    booking_id = client.post("/api/bookings", json={"service_type": "plumbing"}).json()["id"]

    response = client.patch(f"/api/bookings/{booking_id}", json={"customer_rating": 6})

    assert response.status_code == 400


@pytest.mark.integration
def test_complete_booking(client):
    booking_id = client.post("/api/bookings", json={"service_type": "plumbing"}).json()["id"]

    response = client.post(f"/api/bookings/{booking_id}/complete", json={"actual_duration": 45})

    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert response.json()["actual_duration"] == 45
    assert response.json()["completed_at"] is not None


@pytest.mark.integration
def test_complete_rejects_zero_duration(client):
    booking_id = client.post("/api/bookings", json={"service_type": "plumbing"}).json()["id"]

    response = client.post(f"/api/bookings/{booking_id}/complete", json={"actual_duration": 0})

    assert response.status_code == 400
    assert response.json()["detail"] == "Actual duration must be between 1 and 1440"


@pytest.mark.integration
def test_missing_booking_is_404(client):
    assert client.get("/api/bookings/9999").status_code == 404
    assert client.patch("/api/bookings/9999", json={"estimated_duration": 30}).status_code == 404
    assert client.put("/api/bookings/9999/status", json={"status": "cancelled"}).status_code == 404
    assert client.post("/api/bookings/9999/complete", json={"actual_duration": 30}).status_code == 404

    response = client.delete("/api/bookings/9999")
    assert response.status_code == 404
    assert response.json() == {
        "error": "Resource not found",
        "detail": "Booking with id 9999 not found",
        "correlation_id": response.headers["X-Correlation-ID"],
    }


@pytest.mark.integration
def test_delete_booking(client):
    booking_id = client.post("/api/bookings", json={"service_type": "plumbing"}).json()["id"]

    assert client.delete(f"/api/bookings/{booking_id}").status_code == 204
    assert client.get(f"/api/bookings/{booking_id}").status_code == 404


@pytest.mark.integration
def test_list_filtered_by_status_and_customer(client):
    jane = client.post("/api/customers", json={"name": "Jane"}).json()["id"]
    bob = client.post("/api/customers", json={"name": "Bob"}).json()["id"]
    janes = client.post("/api/bookings", json={"service_type": "plumbing", "customer_id": jane}).json()["id"]
    client.post("/api/bookings", json={"service_type": "plumbing", "customer_id": bob})
    janes_done = client.post("/api/bookings", json={"service_type": "painting", "customer_id": jane}).json()["id"]
    client.put(f"/api/bookings/{janes_done}/status", json={"status": "completed"})

    listed = client.get("/api/bookings", params={"status": "pending", "customer_id": jane}).json()

    assert [b["id"] for b in listed] == [janes]
