from conftest import (
    CUSTOMER_ID,
    MONDAY_STR,
    OTHER_CUSTOMER_ID,
    OWNER_ID,
    STRANGER_ID,
    auth_header,
    seed_business,
)

URL = "/api/v1/appointments"


def book(client, seeded, user_id=CUSTOMER_ID, date=MONDAY_STR, time="09:00", service_index=0):
    return client.post(
        URL,
        json={
            "business_id": seeded["business_id"],
            "service_id": seeded["service_ids"][service_index],
            "date": date,
            "time": time,
        },
        headers=auth_header(user_id),
    )


def test_create_appointment(client, barber, dispatcher):
    response = book(client, barber)

    assert response.status_code == 201
    appointment = response.json()["appointment"]
    assert appointment["status"] == "confirmed"
    assert appointment["customer_id"] == CUSTOMER_ID
    assert appointment["resource_id"] == barber["resource_ids"][0]
    assert appointment["start_time"] == "2030-01-07T09:00:00+00:00"
    assert appointment["end_time"] == "2030-01-07T09:30:00+00:00"
    assert [user_id for user_id, _ in dispatcher.sent] == [CUSTOMER_ID, OWNER_ID]


def test_create_appointment_converts_local_time(client, database):
    seeded = seed_business(database, tz="America/New_York")

    response = book(client, seeded)

    assert response.status_code == 201
    assert response.json()["appointment"]["start_time"] == "2030-01-07T14:00:00+00:00"


def test_double_booking_returns_409(client, barber):
    assert book(client, barber).status_code == 201

    response = book(client, barber, user_id=OTHER_CUSTOMER_ID, time="09:15")

    assert response.status_code == 409
    assert response.json() == {"error": "slot unavailable"}


def test_slot_disappears_after_booking(client, barber):
    book(client, barber)

    response = client.get(
        "/api/v1/availability/slots",
        params={"businessId": barber["business_id"], "serviceId": barber["service_ids"][0], "date": MONDAY_STR},
    )

    assert response.json()["slots"] == ["09:30", "09:45", "10:00", "10:15", "10:30"]


def test_unknown_service_returns_400(client, barber):
    response = client.post(
        URL,
        json={"business_id": barber["business_id"], "service_id": 9999, "date": MONDAY_STR, "time": "09:00"},
        headers=auth_header(CUSTOMER_ID),
    )

    assert response.status_code == 400
    assert "service" in response.json()["error"]


def test_malformed_date_returns_400(client, barber):
    response = book(client, barber, date="Jan 7th")

    assert response.status_code == 400
    assert "error" in response.json()


def test_missing_field_returns_400(client, barber):
    response = client.post(
        URL,
        json={"business_id": barber["business_id"], "date": MONDAY_STR, "time": "09:00"},
        headers=auth_header(CUSTOMER_ID),
    )

    assert response.status_code == 400
    assert "service_id" in response.json()["error"]


def test_booking_requires_token(client, barber):
    response = client.post(
        URL,
        json={"business_id": barber["business_id"], "service_id": barber["service_ids"][0],
              "date": MONDAY_STR, "time": "09:00"},
    )

    assert response.status_code in (401, 403)


def test_invalid_token_is_rejected(client, barber):
    response = client.post(
        URL,
        json={"business_id": barber["business_id"], "service_id": barber["service_ids"][0],
              "date": MONDAY_STR, "time": "09:00"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert response.status_code == 401


class TestStatusUpdates:

    def patch(self, client, appointment_id, status, user_id):
        return client.patch(f"{URL}/{appointment_id}", json={"status": status}, headers=auth_header(user_id))

    def test_customer_cancels(self, client, barber):
        appointment_id = book(client, barber).json()["appointment"]["id"]

        response = self.patch(client, appointment_id, "cancelled", CUSTOMER_ID)

        assert response.status_code == 200
        body = response.json()["appointment"]
        assert body["status"] == "cancelled"
        assert body["cancelled_at"] is not None

    def test_owner_completes(self, client, barber):
        appointment_id = book(client, barber).json()["appointment"]["id"]

        response = self.patch(client, appointment_id, "completed", OWNER_ID)

        assert response.status_code == 200
        assert response.json()["appointment"]["status"] == "completed"

    def test_customer_cannot_complete(self, client, barber):
        appointment_id = book(client, barber).json()["appointment"]["id"]

        response = self.patch(client, appointment_id, "completed", CUSTOMER_ID)

        assert response.status_code == 403

    def test_stranger_gets_403(self, client, barber):
        appointment_id = book(client, barber).json()["appointment"]["id"]

        assert self.patch(client, appointment_id, "cancelled", STRANGER_ID).status_code == 403

    def test_missing_appointment_gets_404(self, client, barber):
        response = self.patch(client, 31337, "cancelled", CUSTOMER_ID)

        assert response.status_code == 404
        assert response.json() == {"error": "appointment not found"}

    def test_terminal_state_gets_409(self, client, barber):
        appointment_id = book(client, barber).json()["appointment"]["id"]
        self.patch(client, appointment_id, "cancelled", CUSTOMER_ID)

        response = self.patch(client, appointment_id, "completed", OWNER_ID)

        assert response.status_code == 409
        assert response.json()["error"].startswith("invalid transition")

    def test_unknown_status_gets_400(self, client, barber):
        appointment_id = book(client, barber).json()["appointment"]["id"]

        assert self.patch(client, appointment_id, "no-show", OWNER_ID).status_code == 400

    def test_cancelled_slot_is_offered_again(self, client, barber):
        appointment_id = book(client, barber).json()["appointment"]["id"]
        self.patch(client, appointment_id, "cancelled", CUSTOMER_ID)

        assert book(client, barber, user_id=OTHER_CUSTOMER_ID).status_code == 201


def test_list_my_appointments(client, barber):
    book(client, barber, time="09:00")
    book(client, barber, time="10:00")
    book(client, barber, user_id=OTHER_CUSTOMER_ID, time="10:30")

    response = client.get(f"{URL}/mine", headers=auth_header(CUSTOMER_ID))

    assert response.status_code == 200
    body = response.json()
    assert body["total_appointments"] == 2
    assert [a["local_time"] for a in body["appointments"]] == ["10:00", "09:00"]
    assert body["appointments"][0]["business_name"] == "Fade Street Barbers"
    assert body["appointments"][0]["service_name"] == "Haircut"


def test_list_my_appointments_paginates(client, barber):
    for time in ("09:00", "09:30", "10:00"):
        book(client, barber, time=time)

    response = client.get(f"{URL}/mine", params={"skip": 1, "limit": 1}, headers=auth_header(CUSTOMER_ID))

    body = response.json()
    assert body["total_appointments"] == 3
    assert body["page"] == {"skip": 1, "limit": 1, "total_pages": 3}
    assert [a["local_time"] for a in body["appointments"]] == ["09:30"]
