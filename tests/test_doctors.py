import pytest
from sqlalchemy.exc import OperationalError

from clinic.core.exceptions import ConflictError, InternalError, InvalidError, NotFoundError
from clinic.models import Appointment, Doctor, Prescription
from clinic.schemas.doctor import DoctorCreate, DoctorUpdate
from clinic.services.doctor_service import DoctorService

from .helpers import BOOKING_DAY, at, auth_headers

new_doctor_data = {
    "name": "Dr. Carol White",
    "specialty": "Neurology",
    "email": "carol.white@clinic.test",
    "phone": "5550003333",
    "password": "DoctorPass1",
    "available_times": ["16:00", "09:00"]
}

class TestDoctorService:

    def test_save_doctor_hashes_password_and_orders_slots(self, db_session, test_db):
        doctor = DoctorService(db_session).save_doctor(DoctorCreate(**new_doctor_data))

        assert doctor.id is not None
        assert doctor.password_hash != new_doctor_data["password"]
        assert doctor.available_times == ["09:00", "16:00"]

    def test_save_duplicate_email(self, db_session, doctor):
        data = dict(new_doctor_data, email=doctor.email)
        with pytest.raises(ConflictError):
            DoctorService(db_session).save_doctor(DoctorCreate(**data))

    def test_save_rejects_unknown_slot(self, db_session, test_db):
        data = dict(new_doctor_data, available_times=["18:00"])
        with pytest.raises(InvalidError):
            DoctorService(db_session).save_doctor(DoctorCreate(**data))

    def test_update_doctor(self, db_session, doctor):
        updated = DoctorService(db_session).update_doctor(
            doctor.id, DoctorUpdate(specialty="Pediatrics", available_times=["11:00"])
        )
        assert updated.specialty == "Pediatrics"
        assert updated.available_times == ["11:00"]
        assert updated.name == "Dr. Alice Grey"

    def test_update_missing_doctor(self, db_session, test_db):
        with pytest.raises(NotFoundError):
            DoctorService(db_session).update_doctor(404, DoctorUpdate(name="Nobody Here"))

    def test_update_to_taken_email(self, db_session, doctor, afternoon_doctor):
        with pytest.raises(ConflictError):
            DoctorService(db_session).update_doctor(
                doctor.id, DoctorUpdate(email=afternoon_doctor.email)
            )

    def test_delete_cascades_appointments(self, db_session, doctor, afternoon_doctor, patient):
        kept = Appointment(
            doctor_id=afternoon_doctor.id, patient_id=patient.id,
            appointment_time=at(BOOKING_DAY, "13:00"), status=0,
        )
        removed = Appointment(
            doctor_id=doctor.id, patient_id=patient.id,
            appointment_time=at(BOOKING_DAY, "09:00"), status=0,
        )
        db_session.add_all([kept, removed])
        db_session.commit()
        db_session.add(Prescription(
            appointment_id=removed.id, patient_name="Jane Doe",
            medication="Ibuprofen", dosage="200mg",
        ))
        db_session.commit()
        doctor_id = doctor.id

        DoctorService(db_session).delete_doctor(doctor_id)

        assert db_session.get(Doctor, doctor_id) is None
        remaining = db_session.query(Appointment).all()
        assert [a.doctor_id for a in remaining] == [afternoon_doctor.id]
        assert db_session.query(Prescription).count() == 0

    def test_failed_delete_keeps_appointments(self, db_session, doctor, patient, monkeypatch):
        appointment = Appointment(
            doctor_id=doctor.id, patient_id=patient.id,
            appointment_time=at(BOOKING_DAY, "09:00"), status=0,
        )
        db_session.add(appointment)
        db_session.commit()
        db_session.add(Prescription(
            appointment_id=appointment.id, patient_name="Jane Doe",
            medication="Ibuprofen", dosage="200mg",
        ))
        db_session.commit()
        doctor_id = doctor.id

        def failing_delete(entity):
            raise OperationalError("DELETE FROM doctors", {}, Exception("database is locked"))

        monkeypatch.setattr(db_session, "delete", failing_delete)
        with pytest.raises(InternalError):
            DoctorService(db_session).delete_doctor(doctor_id)
        monkeypatch.undo()

        assert db_session.get(Doctor, doctor_id) is not None
        assert db_session.query(Appointment).filter_by(doctor_id=doctor_id).count() == 1
        assert db_session.query(Prescription).count() == 1

    def test_delete_missing_doctor(self, db_session, test_db):
        with pytest.raises(NotFoundError):
            DoctorService(db_session).delete_doctor(1)

    def test_filter_doctors(self, db_session, doctor, afternoon_doctor):
        service = DoctorService(db_session)

        assert [d.id for d in service.filter_doctors(name="alice")] == [doctor.id]
        assert [d.id for d in service.filter_doctors(specialty="dermatology")] == [afternoon_doctor.id]
        assert [d.id for d in service.filter_doctors(time_of_day="AM")] == [doctor.id]
        assert [d.id for d in service.filter_doctors(time_of_day="PM")] == [afternoon_doctor.id]
        assert service.filter_doctors(name="alice", specialty="Dermatology") == []
        assert len(service.filter_doctors()) == 2

    def test_filter_rejects_bad_period(self, db_session, test_db):
        with pytest.raises(InvalidError):
            DoctorService(db_session).filter_doctors(time_of_day="noon")

    def test_find_doctor_by_name(self, db_session, doctor, afternoon_doctor):
        found = DoctorService(db_session).find_doctor_by_name("DR. BOB")
        assert [d.id for d in found] == [afternoon_doctor.id]

class TestDoctorEndpoints:

    def test_list_doctors_hides_password(self, client, doctor):
        response = client.get("/api/v1/doctors")
        assert response.status_code == 200

        data = response.json()
        assert len(data) == 1
        assert data[0]["available_times"] == ["09:00", "10:00"]
        assert "password" not in data[0]
        assert "password_hash" not in data[0]

    def test_search(self, client, doctor, afternoon_doctor):
        response = client.get("/api/v1/doctors/search", params={"time": "pm"})
        assert response.status_code == 200
        assert [d["id"] for d in response.json()] == [afternoon_doctor.id]

        response = client.get("/api/v1/doctors/search", params={"time": "late"})
        assert response.status_code == 400

    def test_availability_unknown_doctor(self, client, test_db):
        response = client.get(
            "/api/v1/doctors/77/availability",
            params={"date": BOOKING_DAY.isoformat()}
        )
        assert response.status_code == 404

    def test_admin_creates_doctor(self, client, admin_token):
        response = client.post(
            "/api/v1/doctors", json=new_doctor_data, headers=auth_headers(admin_token)
        )
        assert response.status_code == 201
        assert response.json()["email"] == new_doctor_data["email"]

        login = client.post(
            "/api/v1/auth/doctor/login",
            json={"identifier": new_doctor_data["email"], "password": new_doctor_data["password"]}
        )
        assert login.status_code == 200

    def test_create_doctor_requires_admin(self, client, doctor_token, patient_token):
        for token in (doctor_token, patient_token):
            response = client.post(
                "/api/v1/doctors", json=new_doctor_data, headers=auth_headers(token)
            )
            assert response.status_code == 401

    def test_create_doctor_invalid_phone(self, client, admin_token):
        data = dict(new_doctor_data, phone="12345")
        response = client.post("/api/v1/doctors", json=data, headers=auth_headers(admin_token))
        assert response.status_code == 422

    def test_admin_updates_and_deletes_doctor(self, client, doctor, admin_token):
        response = client.put(
            f"/api/v1/doctors/{doctor.id}",
            json={"phone": "5559998888"},
            headers=auth_headers(admin_token)
        )
        assert response.status_code == 200
        assert response.json()["phone"] == "5559998888"

        response = client.delete(f"/api/v1/doctors/{doctor.id}", headers=auth_headers(admin_token))
        assert response.status_code == 200

        response = client.delete(f"/api/v1/doctors/{doctor.id}", headers=auth_headers(admin_token))
        assert response.status_code == 404

    def test_doctor_updates_own_available_times(self, client, doctor, doctor_token):
        response = client.put(
            "/api/v1/doctors/me/available-times",
            json={"available_times": ["15:00", "13:00"]},
            headers=auth_headers(doctor_token)
        )
        assert response.status_code == 200
        assert response.json()["available_times"] == ["13:00", "15:00"]

        availability = client.get(
            f"/api/v1/doctors/{doctor.id}/availability",
            params={"date": BOOKING_DAY.isoformat()}
        )
        assert availability.json()["available_slots"] == ["13:00", "15:00"]

    def test_deleted_doctor_token_rejected(self, client, doctor, doctor_token, admin_token):
        client.delete(f"/api/v1/doctors/{doctor.id}", headers=auth_headers(admin_token))

        response = client.put(
            "/api/v1/doctors/me/available-times",
            json={"available_times": ["09:00"]},
            headers=auth_headers(doctor_token)
        )
        assert response.status_code == 401
