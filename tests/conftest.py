"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta, timezone

import pytest

from models import AvailabilitySlot, Clinician

NOW = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)  # a Monday


def make_slot(slot_id, clinician_id="clin_a", days=1, hour=9, booked=False, minutes=50):
    start = (NOW + timedelta(days=days)).replace(hour=hour, minute=0)
    return AvailabilitySlot(
        id=slot_id,
        clinician_id=clinician_id,
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        is_booked=booked
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sample_clinician():
    return Clinician(
        id="clin_a",
        name="Dr. Maya Patel",
        accepted_insurances=["Aetna", "United Healthcare"],
        specialties=["Anxiety", "Depression"],
        rating=4.8
    )


@pytest.fixture
def directory_records():
    """Clinicians plus the credentialed-insurance tables that go with them."""
    clinicians = [
        {"id": "clin_a", "name": "Dr. Maya Patel", "specialties": ["Anxiety", "Depression"], "rating": 4.8},
        {"id": "clin_b", "name": "Jordan Lee, LCSW", "specialties": ["ADHD"], "rating": 4.0},
        {"id": "clin_c", "name": "Dr. Sam Ortiz", "specialties": ["Childhood Anxiety"], "rating": None},
        {"id": "clin_d", "name": "Riley Chen, LMFT", "specialties": None, "rating": 3.5},
    ]
    insurances = {"ins_001": "Aetna", "ins_002": "Blue Cross Blue Shield", "ins_003": "Cigna"}
    clinician_insurances = {
        "clin_a": ["ins_001"],
        "clin_b": ["ins_002"],
        "clin_c": ["ins_001", "ins_003"],
    }
    return clinicians, insurances, clinician_insurances
