"""
Collaborator State Management.

This module acts as the 'Memory' of the system. It provides the boundary
contracts the matching engine consumes, together with in-process
implementations of each:
1. ClinicianDirectory (who can be matched, and which plans they accept).
2. SlotStore (when each clinician is free).
3. BookingSink (turning a chosen slot into an appointment).
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union
from uuid import uuid4

from pydantic import ValidationError

from models import (
    Clinician,
    AvailabilitySlot,
    Appointment,
    AppointmentStatus,
    BookingRequest,
    BookingResult
)
from .availability import SlotRecord, coerce_slots, sort_slots
from .candidates import filter_by_insurance

logger = logging.getLogger(__name__)


class ClinicianDirectory(Protocol):
    def find_clinicians(self, insurance_provider: Optional[str] = None) -> List[Clinician]:
        ...


class SlotStore(Protocol):
    def get_slots(self, clinician_id: str, start: datetime, end: datetime) -> List[SlotRecord]:
        ...


class BookingSink(Protocol):
    def book(self, request: BookingRequest) -> BookingResult:
        ...


class InMemoryClinicianDirectory:
    """
    Clinician directory backed by plain dictionaries.
    Mirrors the credentialed-insurance junction layout of the clinical
    directory: insurance id -> plan name, clinician id -> insurance ids.
    """

    def __init__(
        self,
        clinicians: Iterable[Union[Clinician, Dict[str, Any]]],
        insurances: Optional[Dict[str, str]] = None,
        clinician_insurances: Optional[Dict[str, List[str]]] = None
    ):
        # Insertion order is the directory order used for candidate filtering
        self.clinicians: Dict[str, Clinician] = {}
        for i, record in enumerate(clinicians):
            try:
                clinician = record if isinstance(record, Clinician) else Clinician.model_validate(record)
            except ValidationError as e:
                logger.warning(f"Skipping invalid clinician record {i}: {e}")
                continue
            self.clinicians[clinician.id] = clinician

        self.insurances: Dict[str, str] = dict(insurances or {})
        self.clinician_insurances: Dict[str, List[str]] = {
            cid: list(ids) for cid, ids in (clinician_insurances or {}).items()
        }

    def resolve_insurance_id(self, provider: Optional[str]) -> Optional[str]:
        """
        Map a plan name to its credentialed-insurance id.
        Exact (case-insensitive) names win over partial matches.
        """
        if not provider or not provider.strip():
            return None
        wanted = provider.strip().lower()

        partial = None
        for insurance_id in sorted(self.insurances):
            name = (self.insurances[insurance_id] or "").strip().lower()
            if not name:
                continue
            if name == wanted:
                return insurance_id
            if partial is None and (wanted in name or name in wanted):
                partial = insurance_id
        return partial

    def find_clinicians(self, insurance_provider: Optional[str] = None) -> List[Clinician]:
        if not insurance_provider:
            return [self._with_accepted_names(c) for c in self.clinicians.values()]

        insurance_id = self.resolve_insurance_id(insurance_provider)
        if insurance_id is None:
            logger.warning(f"Insurance provider '{insurance_provider}' not found in credentialed insurances")
            return []

        ids = filter_by_insurance(list(self.clinicians), self.clinician_insurances, insurance_id)
        # Matched through the requested plan, so that name counts as accepted too
        return [self._with_accepted_names(self.clinicians[cid], insurance_provider.strip()) for cid in ids]

    def get_clinician(self, clinician_id: str) -> Optional[Clinician]:
        clinician = self.clinicians.get(clinician_id)
        return self._with_accepted_names(clinician) if clinician else None

    def _with_accepted_names(self, clinician: Clinician, requested: Optional[str] = None) -> Clinician:
        """Fold indexed insurance names (and the requested plan name) into the accepted list."""
        names = list(clinician.accepted_insurances)
        for insurance_id in self.clinician_insurances.get(clinician.id, []):
            name = self.insurances.get(insurance_id)
            if name and name not in names:
                names.append(name)
        if requested and requested.lower() not in (n.lower() for n in names):
            names.append(requested)
        if names == clinician.accepted_insurances:
            return clinician
        return clinician.model_copy(update={"accepted_insurances": names})


class InMemorySlotStore:
    """
    Availability slots indexed by clinician (for O(1) per-clinician lookup).
    """

    def __init__(self, slots: Optional[Iterable[SlotRecord]] = None):
        self.slots: Dict[str, AvailabilitySlot] = {}
        self.clinician_slots: Dict[str, List[str]] = defaultdict(list)
        for slot in coerce_slots(slots):
            if slot.id in self.slots:
                logger.warning(f"Skipping duplicate slot id {slot.id}")
                continue
            self.add_slot(slot)

    def add_slot(self, slot: AvailabilitySlot) -> None:
        if slot.id in self.slots:
            raise ValueError(f"Duplicate slot id {slot.id}")
        self.slots[slot.id] = slot
        self.clinician_slots[slot.clinician_id].append(slot.id)

    def get_slot(self, slot_id: str) -> Optional[AvailabilitySlot]:
        return self.slots.get(slot_id)

    def get_slots(self, clinician_id: str, start: datetime, end: datetime) -> List[AvailabilitySlot]:
        """All slots (booked or not) whose start falls in [start, end]."""
        found = [
            self.slots[sid] for sid in self.clinician_slots.get(clinician_id, [])
            if start <= self.slots[sid].start_time <= end
        ]
        return sort_slots(found)

    def set_booked(self, slot_id: str, is_booked: bool) -> AvailabilitySlot:
        slot = self.slots[slot_id]
        updated = slot.model_copy(update={"is_booked": is_booked})
        self.slots[slot_id] = updated
        return updated


class InMemoryAppointmentBook:
    """
    Booking sink that commits appointments against an InMemorySlotStore.
    """

    def __init__(self, slot_store: InMemorySlotStore):
        self.slot_store = slot_store
        self.appointments: Dict[str, Appointment] = {}
        self.patient_appointments: Dict[str, List[str]] = defaultdict(list)

    def book(self, request: BookingRequest) -> BookingResult:
        """
        Commit a booking. Rejects unknown, already-booked or mismatched slots.
        """
        slot = self.slot_store.get_slot(request.slot_id)
        if slot is None:
            return BookingResult(success=False, error="Availability slot not found")
        if slot.is_booked:
            return BookingResult(success=False, error="This time slot is already booked")
        if slot.clinician_id != request.clinician_id:
            return BookingResult(success=False, error="Slot does not belong to the requested clinician")
        if slot.start_time != request.start_time:
            return BookingResult(success=False, error="Slot start time does not match the request")

        now = datetime.now(timezone.utc)
        appointment = Appointment(
            id=uuid4().hex,
            clinician_id=request.clinician_id,
            slot_id=request.slot_id,
            patient_id=request.patient_id,
            start_time=request.start_time,
            status=AppointmentStatus.PENDING,
            created_at=now,
            updated_at=now
        )
        self.appointments[appointment.id] = appointment
        self.patient_appointments[request.patient_id].append(appointment.id)
        self.slot_store.set_booked(request.slot_id, True)

        logger.info(f"Appointment created: {appointment.id}")
        return BookingResult(success=True, appointment_id=appointment.id)

    def cancel(self, appointment_id: str) -> BookingResult:
        """Cancel an appointment and free its slot."""
        appointment = self.appointments.get(appointment_id)
        if appointment is None:
            return BookingResult(success=False, error="Appointment not found")
        if appointment.status == AppointmentStatus.CANCELLED:
            return BookingResult(success=False, appointment_id=appointment_id, error="Appointment already cancelled")

        self.appointments[appointment_id] = appointment.model_copy(update={
            "status": AppointmentStatus.CANCELLED,
            "updated_at": datetime.now(timezone.utc)
        })
        if self.slot_store.get_slot(appointment.slot_id) is not None:
            self.slot_store.set_booked(appointment.slot_id, False)

        logger.info(f"Appointment cancelled: {appointment_id}")
        return BookingResult(success=True, appointment_id=appointment_id)

    def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return self.appointments.get(appointment_id)

    def appointments_for_patient(self, patient_id: str) -> List[Appointment]:
        return [self.appointments[aid] for aid in self.patient_appointments.get(patient_id, [])]

    def get_statistics(self) -> Dict[str, Any]:
        """Booking counts for the final report."""
        by_status: Dict[str, int] = defaultdict(int)
        by_clinician: Dict[str, int] = defaultdict(int)
        for appt in self.appointments.values():
            by_status[appt.status.value] += 1
            if appt.status != AppointmentStatus.CANCELLED:
                by_clinician[appt.clinician_id] += 1

        return {
            "total_appointments": len(self.appointments),
            "status_breakdown": dict(by_status),
            "clinician_load": dict(by_clinician),
            "open_slots": sum(1 for s in self.slot_store.slots.values() if not s.is_booked)
        }
