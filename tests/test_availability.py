from datetime import date, timedelta

import pytest

from clinic.core.exceptions import InvalidError, NotFoundError
from clinic.models import Appointment, AppointmentStatus, Doctor
from clinic.services.availability import (
    SLOT_CATALOG, AvailabilityEngine, BookingValidation,
    matches_time_of_day, normalize_slots, offered_slots
)

from .helpers import BOOKING_DAY, at

def _appointment(db, doctor, patient, when, status=AppointmentStatus.SCHEDULED):
    appointment = Appointment(
        doctor_id=doctor.id,
        patient_id=patient.id,
        appointment_time=when,
        status=int(status),
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return appointment

class TestSlotCatalog:

    def test_catalog_is_eight_hourly_slots(self):
        assert SLOT_CATALOG == (
            "09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00"
        )

    def test_normalize_orders_and_deduplicates(self):
        assert normalize_slots(["14:00", "09:00", "14:00"]) == ["09:00", "14:00"]

    def test_normalize_rejects_unknown_labels(self):
        with pytest.raises(InvalidError):
            normalize_slots(["09:00", "17:00"])
        with pytest.raises(InvalidError):
            normalize_slots(["9:00"])

    def test_offered_slots_ignore_labels_outside_catalog(self):
        doctor = Doctor(available_times=["16:00", "08:00", "10:00"])
        assert offered_slots(doctor) == ["10:00", "16:00"]

class TestGetAvailability:

    def test_no_appointments_returns_offered_slots(self, db_session, doctor):
        engine = AvailabilityEngine(db_session)
        assert engine.get_availability(doctor.id, date(2025, 6, 1)) == ["09:00", "10:00"]

    def test_booked_slot_is_removed(self, db_session, doctor, patient):
        _appointment(db_session, doctor, patient, at(date(2025, 6, 1), "09:00"))

        engine = AvailabilityEngine(db_session)
        assert engine.get_availability(doctor.id, date(2025, 6, 1)) == ["10:00"]

    def test_other_days_do_not_interfere(self, db_session, doctor, patient):
        _appointment(db_session, doctor, patient, at(date(2025, 6, 2), "09:00"))
        _appointment(db_session, doctor, patient, at(date(2025, 5, 31), "10:00"))

        engine = AvailabilityEngine(db_session)
        assert engine.get_availability(doctor.id, date(2025, 6, 1)) == ["09:00", "10:00"]

    def test_other_doctors_do_not_interfere(self, db_session, doctor, afternoon_doctor, patient):
        _appointment(db_session, afternoon_doctor, patient, at(date(2025, 6, 1), "13:00"))

        engine = AvailabilityEngine(db_session)
        assert engine.get_availability(doctor.id, date(2025, 6, 1)) == ["09:00", "10:00"]
        assert engine.get_availability(afternoon_doctor.id, date(2025, 6, 1)) == ["14:00", "15:00"]

    def test_cancelled_appointment_frees_slot(self, db_session, doctor, patient):
        _appointment(
            db_session, doctor, patient, at(date(2025, 6, 1), "09:00"),
            status=AppointmentStatus.CANCELLED
        )

        engine = AvailabilityEngine(db_session)
        assert engine.get_availability(doctor.id, date(2025, 6, 1)) == ["09:00", "10:00"]

    def test_completed_appointment_keeps_slot_occupied(self, db_session, doctor, patient):
        _appointment(
            db_session, doctor, patient, at(date(2025, 6, 1), "10:00"),
            status=AppointmentStatus.COMPLETED
        )

        engine = AvailabilityEngine(db_session)
        assert engine.get_availability(doctor.id, date(2025, 6, 1)) == ["09:00"]

    def test_excluded_appointment_does_not_block(self, db_session, doctor, patient):
        booked = _appointment(db_session, doctor, patient, at(date(2025, 6, 1), "09:00"))

        engine = AvailabilityEngine(db_session)
        slots = engine.get_availability(doctor.id, date(2025, 6, 1), exclude_appointment_id=booked.id)
        assert slots == ["09:00", "10:00"]

    def test_subset_of_offered_and_disjoint_from_booked(self, db_session, afternoon_doctor, patient):
        day = date(2025, 6, 1)
        for slot in ["09:00", "14:00"]:
            _appointment(db_session, afternoon_doctor, patient, at(day, slot))

        engine = AvailabilityEngine(db_session)
        slots = engine.get_availability(afternoon_doctor.id, day)

        assert set(slots) <= set(offered_slots(afternoon_doctor))
        assert set(slots).isdisjoint({"09:00", "14:00"})
        assert slots == ["13:00", "15:00"]

    def test_doctor_without_slots_has_no_availability(self, db_session, doctor):
        doctor.available_times = []
        db_session.commit()

        engine = AvailabilityEngine(db_session)
        assert engine.get_availability(doctor.id, date(2025, 6, 1)) == []

    def test_unknown_doctor(self, db_session, test_db):
        engine = AvailabilityEngine(db_session)
        with pytest.raises(NotFoundError):
            engine.get_availability(999, date(2025, 6, 1))

class TestValidateBooking:

    def test_valid_slot(self, db_session, doctor):
        engine = AvailabilityEngine(db_session)
        assert engine.validate_booking(doctor.id, at(BOOKING_DAY, "09:00")) is BookingValidation.VALID

    def test_unknown_doctor_is_invalid(self, db_session, test_db):
        engine = AvailabilityEngine(db_session)
        assert engine.validate_booking(42, at(BOOKING_DAY, "09:00")) is BookingValidation.INVALID

    def test_taken_slot_is_unavailable(self, db_session, doctor, patient):
        _appointment(db_session, doctor, patient, at(BOOKING_DAY, "09:00"))

        engine = AvailabilityEngine(db_session)
        assert engine.validate_booking(doctor.id, at(BOOKING_DAY, "09:00")) is BookingValidation.UNAVAILABLE
        assert engine.validate_booking(doctor.id, at(BOOKING_DAY, "10:00")) is BookingValidation.VALID

    def test_slot_not_offered_is_unavailable(self, db_session, doctor):
        engine = AvailabilityEngine(db_session)
        assert engine.validate_booking(doctor.id, at(BOOKING_DAY, "14:00")) is BookingValidation.UNAVAILABLE

    def test_off_grid_time_is_unavailable(self, db_session, doctor):
        engine = AvailabilityEngine(db_session)
        assert engine.validate_booking(doctor.id, at(BOOKING_DAY, "09:30")) is BookingValidation.UNAVAILABLE
        off_by_seconds = at(BOOKING_DAY, "09:00") + timedelta(seconds=15)
        assert engine.validate_booking(doctor.id, off_by_seconds) is BookingValidation.UNAVAILABLE

class TestTimeOfDay:

    def test_morning_only_doctor(self):
        doctor = Doctor(available_times=["09:00", "11:00"])
        assert matches_time_of_day(doctor, "AM")
        assert not matches_time_of_day(doctor, "PM")

    def test_afternoon_only_doctor(self):
        doctor = Doctor(available_times=["12:00", "16:00"])
        assert not matches_time_of_day(doctor, "am")
        assert matches_time_of_day(doctor, "pm")

    def test_doctor_matching_both(self):
        doctor = Doctor(available_times=["09:00", "15:00"])
        assert matches_time_of_day(doctor, "AM")
        assert matches_time_of_day(doctor, "PM")

    def test_unknown_period(self):
        with pytest.raises(InvalidError):
            matches_time_of_day(Doctor(available_times=["09:00"]), "evening")
