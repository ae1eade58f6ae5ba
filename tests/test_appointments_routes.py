"""Tests for the appointment HTTP routes."""
from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from barberworld.repository import AppointmentRepository

DAY = "2025-06-01"


def book(client, headers, shop_id, client_id, time_slot="10:00 AM", service="Fade", on_date=DAY):
    return client.post(
        "/api/appointments",
        json={
            "clientId": client_id,
            "shopId": shop_id,
            "date": on_date,
            "timeSlot": time_slot,
            "service": service,
            "status": "pending",
        },
        headers=headers,
    )


def booked_map(client, shop_id, on_date=DAY):
    response = client.get(f"/api/appointments/available-slots/{shop_id}/{on_date}")
    assert response.status_code == 200
    return {slot["timeSlot"]: slot["isBooked"] for slot in response.json()["slots"]}


def test_available_slots_for_an_empty_day(client, shop) -> None:
    response = client.get(f"/api/appointments/available-slots/{shop.id}/{DAY}")
    data = response.json()

    assert response.status_code == 200
    assert data["shopId"] == shop.id
    assert data["date"] == DAY
    assert data["availableSlots"] == ["9:00 AM", "10:00 AM", "11:00 AM", "1:00 PM", "2:00 PM", "3:00 PM", "4:00 PM"]


def test_booking_returns_confirmed_appointment(client, shop, carla, auth_headers) -> None:
    response = book(client, auth_headers(carla), shop.id, carla.id)
    data = response.json()

    assert response.status_code == 201
    assert data["status"] == "confirmed"
    assert data["clientId"] == carla.id
    assert data["shopId"] == shop.id
    assert data["timeSlot"] == "10:00 AM"
    assert "createdAt" in data


def test_booking_scenario(client, shop, carla, dan, auth_headers) -> None:
    first = book(client, auth_headers(carla), shop.id, carla.id)
    assert first.status_code == 201
    assert booked_map(client, shop.id)["10:00 AM"] is True
    assert booked_map(client, shop.id)["9:00 AM"] is False

    clash = book(client, auth_headers(dan), shop.id, dan.id)
    assert clash.status_code == 409
    assert clash.json()["error"] == "slot_already_booked"

    cancel = client.delete(f"/api/appointments/{first.json()['id']}", headers=auth_headers(carla))
    assert cancel.status_code == 200
    assert cancel.json()["appointment"]["status"] == "cancelled"
    assert booked_map(client, shop.id)["10:00 AM"] is False

    retry = book(client, auth_headers(dan), shop.id, dan.id)
    assert retry.status_code == 201


@pytest.mark.parametrize("variant", ["10:00 am", "10:00  AM", "10:00AM"])
def test_booking_label_variant_conflicts(client, shop, carla, dan, auth_headers, variant) -> None:
    assert book(client, auth_headers(carla), shop.id, carla.id, time_slot="10:00 AM").status_code == 201

    clash = book(client, auth_headers(dan), shop.id, dan.id, time_slot=variant)

    assert clash.status_code == 409
    assert clash.json()["error"] == "slot_already_booked"


def test_booking_requires_client_id(client, shop, carla, auth_headers) -> None:
    response = client.post(
        "/api/appointments",
        json={"shopId": shop.id, "date": DAY, "timeSlot": "9:00 AM", "service": "Fade"},
        headers=auth_headers(carla),
    )

    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"
    assert "clientId" in response.json()["message"]


def test_booking_requires_login(client, shop, carla) -> None:
    assert book(client, {}, shop.id, carla.id).status_code == 401


def test_clients_cannot_book_for_someone_else(client, shop, carla, dan, auth_headers) -> None:
    assert book(client, auth_headers(carla), shop.id, dan.id).status_code == 403


def test_owner_can_book_for_a_client(client, shop, barber, carla, auth_headers) -> None:
    assert book(client, auth_headers(barber), shop.id, carla.id).status_code == 201


def test_booking_unknown_shop(client, carla, auth_headers) -> None:
    response = book(client, auth_headers(carla), 999, carla.id)

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_listing_routes(client, shop, barber, carla, dan, auth_headers) -> None:
    book(client, auth_headers(carla), shop.id, carla.id, time_slot="1:00 PM")
    book(client, auth_headers(dan), shop.id, dan.id, time_slot="9:00 AM")

    everything = client.get("/api/appointments", headers=auth_headers(barber))
    assert len(everything.json()) == 2

    for_shop = client.get(f"/api/appointments/shop/{shop.id}", headers=auth_headers(barber))
    assert [a["timeSlot"] for a in for_shop.json()] == ["9:00 AM", "1:00 PM"]

    on_day = client.get(f"/api/appointments/shop/{shop.id}/date/{DAY}", headers=auth_headers(barber))
    assert len(on_day.json()) == 2

    mine = client.get(f"/api/appointments/client/{carla.id}", headers=auth_headers(carla))
    assert [a["clientId"] for a in mine.json()] == [carla.id]


def test_full_listing_is_scoped_to_the_caller(client, shop, barber, carla, dan, auth_headers) -> None:
    book(client, auth_headers(carla), shop.id, carla.id, time_slot="1:00 PM")
    book(client, auth_headers(dan), shop.id, dan.id, time_slot="9:00 AM")

    mine = client.get("/api/appointments", headers=auth_headers(carla))
    assert [a["clientId"] for a in mine.json()] == [carla.id]

    owner_view = client.get("/api/appointments", headers=auth_headers(barber))
    assert sorted(a["clientId"] for a in owner_view.json()) == sorted([carla.id, dan.id])


def test_shop_listing_is_owner_only(client, shop, carla, auth_headers) -> None:
    response = client.get(f"/api/appointments/shop/{shop.id}", headers=auth_headers(carla))

    assert response.status_code == 403


def test_clients_cannot_list_other_clients(client, carla, dan, auth_headers) -> None:
    response = client.get(f"/api/appointments/client/{dan.id}", headers=auth_headers(carla))

    assert response.status_code == 403


def test_owner_updates_status(client, shop, barber, carla, auth_headers) -> None:
    appt_id = book(client, auth_headers(carla), shop.id, carla.id).json()["id"]

    response = client.patch(
        f"/api/appointments/{appt_id}/status",
        json={"status": "completed"},
        headers=auth_headers(barber),
    )

    assert response.status_code == 200
    assert response.json()["status"] == "completed"


def test_client_can_only_cancel(client, shop, carla, auth_headers) -> None:
    appt_id = book(client, auth_headers(carla), shop.id, carla.id).json()["id"]

    denied = client.patch(f"/api/appointments/{appt_id}/status", json={"status": "completed"}, headers=auth_headers(carla))
    allowed = client.patch(f"/api/appointments/{appt_id}/status", json={"status": "cancelled"}, headers=auth_headers(carla))

    assert denied.status_code == 403
    assert allowed.status_code == 200


def test_strangers_cannot_touch_an_appointment(client, shop, carla, dan, auth_headers) -> None:
    appt_id = book(client, auth_headers(carla), shop.id, carla.id).json()["id"]

    assert client.delete(f"/api/appointments/{appt_id}", headers=auth_headers(dan)).status_code == 403


def test_status_update_unknown_appointment(client, carla, auth_headers) -> None:
    response = client.patch("/api/appointments/999/status", json={"status": "cancelled"}, headers=auth_headers(carla))

    assert response.status_code == 404


def test_cancel_keeps_the_record(client, session, shop, carla, auth_headers) -> None:
    appt_id = book(client, auth_headers(carla), shop.id, carla.id).json()["id"]

    first = client.delete(f"/api/appointments/{appt_id}", headers=auth_headers(carla))
    again = client.delete(f"/api/appointments/{appt_id}", headers=auth_headers(carla))

    assert first.json()["message"] == "Appointment cancelled successfully"
    assert again.status_code == 409
    assert AppointmentRepository(session).get(appt_id).status == "cancelled"


def test_hard_delete_is_owner_only(client, session, shop, barber, carla, auth_headers) -> None:
    appt_id = book(client, auth_headers(carla), shop.id, carla.id).json()["id"]

    denied = client.delete(f"/api/appointments/{appt_id}?hard=true", headers=auth_headers(carla))
    purged = client.delete(f"/api/appointments/{appt_id}?hard=true", headers=auth_headers(barber))

    assert denied.status_code == 403
    assert purged.status_code == 204
    assert AppointmentRepository(session).find_all() == []


def test_available_slots_fail_open(client, shop, monkeypatch) -> None:
    def broken(self, shop_id, on_date):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(AppointmentRepository, "find_by_date", broken)

    response = client.get(f"/api/appointments/available-slots/{shop.id}/{DAY}")

    assert response.status_code == 200
    assert len(response.json()["availableSlots"]) == 7
