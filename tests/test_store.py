"""
Unit tests for the in-memory directory, slot store and appointment book.
"""

from datetime import timedelta

import pytest

from matching import InMemoryAppointmentBook, InMemoryClinicianDirectory, InMemorySlotStore
from models import AppointmentStatus, BookingRequest
from tests.conftest import NOW, make_slot


@pytest.fixture
def directory(directory_records):
    clinicians, insurances, clinician_insurances = directory_records
    return InMemoryClinicianDirectory(clinicians, insurances=insurances, clinician_insurances=clinician_insurances)


@pytest.fixture
def slot_store():
    return InMemorySlotStore([
        make_slot("a_1", "clin_a", days=1, hour=9),
        make_slot("a_2", "clin_a", days=1, hour=11),
        make_slot("a_booked", "clin_a", days=2, hour=9, booked=True),
        make_slot("c_1", "clin_c", days=3, hour=14),
    ])


def request_for(slot, patient_id="patient_1", clinician_id=None, start_time=None):
    return BookingRequest(
        clinician_id=clinician_id or slot.clinician_id,
        slot_id=slot.id,
        patient_id=patient_id,
        start_time=start_time or slot.start_time
    )


class TestClinicianDirectory:

    def test_exact_provider_name(self, directory):
        assert [c.id for c in directory.find_clinicians("Aetna")] == ["clin_a", "clin_c"]

    def test_partial_provider_name(self, directory):
        assert [c.id for c in directory.find_clinicians("Blue Cross")] == ["clin_b"]

    def test_no_provider_returns_everyone(self, directory):
        assert [c.id for c in directory.find_clinicians(None)] == ["clin_a", "clin_b", "clin_c", "clin_d"]

    def test_unknown_provider_returns_nobody(self, directory):
        assert directory.find_clinicians("Kaiser") == []

    def test_indexed_names_are_folded_into_accepted_list(self, directory):
        clinician = directory.get_clinician("clin_c")
        assert clinician.accepted_insurances == ["Aetna", "Cigna"]
        assert directory.get_clinician("clin_d").accepted_insurances == []
        assert directory.get_clinician("missing") is None

    def test_invalid_records_are_skipped(self):
        directory = InMemoryClinicianDirectory([{"id": ""}, {"name": "No id"}, {"id": "good"}])
        assert list(directory.clinicians) == ["good"]

    @pytest.mark.parametrize("rating,expected", [(5.2, 5.0), (-1, 0.0), ("4.5", 4.5), ("n/a", 0.0), (float("nan"), 0.0)])
    def test_noisy_ratings_keep_the_clinician(self, rating, expected):
        directory = InMemoryClinicianDirectory(
            [{"id": "x", "rating": rating}],
            insurances={"ins_001": "Aetna"},
            clinician_insurances={"x": ["ins_001"]}
        )
        found = directory.find_clinicians("Aetna")
        assert [c.id for c in found] == ["x"]
        assert found[0].rating == expected

    def test_partial_match_accepts_requested_name(self, directory):
        clinician = directory.find_clinicians("blue cross")[0]
        assert clinician.accepted_insurances == ["Blue Cross Blue Shield", "blue cross"]

    def test_exact_match_does_not_duplicate_name(self, directory):
        clinician = directory.find_clinicians("AETNA")[0]
        assert clinician.accepted_insurances == ["Aetna"]

    def test_null_fields_are_normalised(self, directory):
        clinician = directory.get_clinician("clin_c")
        assert clinician.rating == 0.0
        assert directory.get_clinician("clin_d").specialties == []


class TestSlotStore:

    def test_returns_all_slots_in_range_sorted(self, slot_store):
        found = slot_store.get_slots("clin_a", NOW, NOW + timedelta(days=7))
        assert [s.id for s in found] == ["a_1", "a_2", "a_booked"]

    def test_range_excludes_outside_slots(self, slot_store):
        found = slot_store.get_slots("clin_a", NOW + timedelta(days=2), NOW + timedelta(days=7))
        assert [s.id for s in found] == ["a_booked"]

    def test_unknown_clinician(self, slot_store):
        assert slot_store.get_slots("nobody", NOW, NOW + timedelta(days=7)) == []

    def test_duplicate_slot_id_rejected(self, slot_store):
        with pytest.raises(ValueError):
            slot_store.add_slot(make_slot("a_1", "clin_a", days=5))

    def test_duplicate_records_on_load_keep_the_first(self):
        first = make_slot("dup", "clin_a", days=1, hour=9)
        store = InMemorySlotStore([first, make_slot("dup", "clin_a", days=4, hour=16), make_slot("other", "clin_a")])
        assert store.get_slot("dup") == first
        assert len(store.get_slots("clin_a", NOW, NOW + timedelta(days=7))) == 2

    def test_set_booked_replaces_record(self, slot_store):
        updated = slot_store.set_booked("a_1", True)
        assert updated.is_booked
        assert slot_store.get_slot("a_1").is_booked


class TestAppointmentBook:

    def test_successful_booking_consumes_slot(self, slot_store):
        book = InMemoryAppointmentBook(slot_store)
        slot = slot_store.get_slot("a_1")

        result = book.book(request_for(slot))

        assert result.success
        appointment = book.get_appointment(result.appointment_id)
        assert appointment.status == AppointmentStatus.PENDING
        assert appointment.slot_id == "a_1"
        assert slot_store.get_slot("a_1").is_booked
        assert book.appointments_for_patient("patient_1") == [appointment]

    def test_double_booking_rejected(self, slot_store):
        book = InMemoryAppointmentBook(slot_store)
        slot = slot_store.get_slot("a_1")
        assert book.book(request_for(slot)).success

        second = book.book(request_for(slot, patient_id="patient_2"))
        assert not second.success
        assert second.error == "This time slot is already booked"

    @pytest.mark.parametrize("overrides,error", [
        ({"clinician_id": "clin_c"}, "Slot does not belong to the requested clinician"),
        ({"start_time": NOW + timedelta(days=9)}, "Slot start time does not match the request"),
    ])
    def test_mismatched_request_rejected(self, slot_store, overrides, error):
        book = InMemoryAppointmentBook(slot_store)
        result = book.book(request_for(slot_store.get_slot("a_2"), **overrides))
        assert not result.success
        assert result.error == error
        assert not slot_store.get_slot("a_2").is_booked

    def test_unknown_slot_rejected(self, slot_store):
        book = InMemoryAppointmentBook(slot_store)
        result = book.book(BookingRequest(clinician_id="clin_a", slot_id="nope", patient_id="p", start_time=NOW))
        assert result.error == "Availability slot not found"

    def test_cancel_frees_slot(self, slot_store):
        book = InMemoryAppointmentBook(slot_store)
        booked = book.book(request_for(slot_store.get_slot("c_1")))

        cancelled = book.cancel(booked.appointment_id)

        assert cancelled.success
        assert book.get_appointment(booked.appointment_id).status == AppointmentStatus.CANCELLED
        assert not slot_store.get_slot("c_1").is_booked
        assert book.cancel(booked.appointment_id).error == "Appointment already cancelled"
        assert book.cancel("missing").error == "Appointment not found"

    def test_statistics(self, slot_store):
        book = InMemoryAppointmentBook(slot_store)
        first = book.book(request_for(slot_store.get_slot("a_1")))
        book.book(request_for(slot_store.get_slot("c_1")))
        book.cancel(first.appointment_id)

        stats = book.get_statistics()

        assert stats["total_appointments"] == 2
        assert stats["status_breakdown"] == {"cancelled": 1, "pending": 1}
        assert stats["clinician_load"] == {"clin_c": 1}
        assert stats["open_slots"] == 2
