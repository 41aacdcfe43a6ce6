from .scoring import FitScorer, calculate_fit_score
from .candidates import filter_by_insurance
from .availability import coerce_slots, filter_available_slots, group_slots_by_day, sort_slots
from .store import (
    ClinicianDirectory,
    SlotStore,
    BookingSink,
    InMemoryClinicianDirectory,
    InMemorySlotStore,
    InMemoryAppointmentBook
)
from .engine import MatchingEngine

__all__ = [
    "FitScorer",
    "calculate_fit_score",
    "filter_by_insurance",
    "coerce_slots",
    "filter_available_slots",
    "group_slots_by_day",
    "sort_slots",
    "ClinicianDirectory",
    "SlotStore",
    "BookingSink",
    "InMemoryClinicianDirectory",
    "InMemorySlotStore",
    "InMemoryAppointmentBook",
    "MatchingEngine",
]
