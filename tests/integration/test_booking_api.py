"""Test /api/appointments endpoints."""
from tests.conftest import FIXED_NOW


def test_book_returns_201_with_least_loaded_doctor(client, add_doctor):
    add_doctor("Dr. A", "Cardiology", 5, current=3, doctor_id="DOC-A")
    add_doctor("Dr. B", "Cardiology", 5, current=1, doctor_id="DOC-B")

    response = client.post(
        "/api/appointments/book",
        json={"patientName": "Alice", "specialization": "cardiology"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "booked"
    assert body["message"] == "Appointment booked successfully with Dr. B"
    assert body["data"]["appointment"]["doctorId"] == "DOC-B"
    assert body["data"]["appointment"]["doctorName"] == "Dr. B"
    assert body["data"]["appointment"]["status"] == "booked"
    assert body["data"]["doctor"]["currentAppointments"] == 2
    assert body["data"]["doctor"]["slotsRemaining"] == 3
    assert "X-Request-ID" in response.headers


def test_book_unknown_specialization_returns_404_with_record(client, add_doctor):
    add_doctor("Dr. A", "Cardiology", 5)

    response = client.post(
        "/api/appointments/book",
        json={"patientName": "Bob", "specialization": "Neurosurgery"},
    )

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["status"] == "rejected"
    assert "no doctors found" in body["message"].lower()
    assert body["data"]["status"] == "rejected"
    assert body["data"]["rejectionReason"] == "No doctors found with specialization: Neurosurgery"


def test_book_fully_booked_returns_409_with_record(client, add_doctor):
    add_doctor("Dr. C", "dermatology", 2, current=2)

    response = client.post(
        "/api/appointments/book",
        json={"patientName": "Carl", "specialization": "dermatology"},
    )

    assert response.status_code == 409
    body = response.json()
    assert body["status"] == "rejected"
    assert body["totalDoctors"] == 1
    assert "fully booked" in body["data"]["rejectionReason"]


def test_book_validation_error_lists_fields(client):
    response = client.post("/api/appointments/book", json={"patientName": "A"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    fields = {err["field"] for err in body["errors"]}
    assert fields == {"patientName", "specialization"}


def test_rejected_validation_does_not_record_appointment(client, store):
    client.post("/api/appointments/book", json={"patientName": "", "specialization": ""})

    assert store.count_appointments() == 0


def test_list_appointments_newest_first_and_filtered(client, add_doctor):
    add_doctor("Dr. A", "Cardiology", 1)
    client.post("/api/appointments/book", json={"patientName": "First", "specialization": "Cardiology"})
    client.post("/api/appointments/book", json={"patientName": "Second", "specialization": "Cardiology"})
    client.post("/api/appointments/book", json={"patientName": "Third", "specialization": "Oncology"})

    response = client.get("/api/appointments")
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 3
    assert [a["patientName"] for a in body["data"]] == ["Third", "Second", "First"]
    assert body["data"][2]["doctor"]["name"] == "Dr. A"

    rejected = client.get("/api/appointments", params={"status": "rejected", "specialization": "cardio"})
    assert [a["patientName"] for a in rejected.json()["data"]] == ["Second"]

    limited = client.get("/api/appointments", params={"limit": 1})
    assert limited.json()["count"] == 1


def test_list_appointments_rejects_bad_status(client):
    response = client.get("/api/appointments", params={"status": "cancelled"})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "status"


def test_stats(client, add_doctor):
    add_doctor("Dr. A", "Cardiology", 1)
    for patient in ("P1", "P2", "P3"):
        client.post("/api/appointments/book", json={"patientName": patient, "specialization": "Cardiology"})

    response = client.get("/api/appointments/stats")

    assert response.status_code == 200
    assert response.json()["data"] == {
        "total": {"booked": 1, "rejected": 2},
        "today": {"booked": 1, "rejected": 2},
    }


def test_appointment_timestamps_come_from_clock(client, add_doctor):
    add_doctor("Dr. A", "Cardiology", 1)
    response = client.post(
        "/api/appointments/book", json={"patientName": "Alice", "specialization": "Cardiology"}
    )

    created_at = response.json()["data"]["appointment"]["createdAt"]
    assert created_at.startswith(FIXED_NOW.strftime("%Y-%m-%dT%H:%M"))
