"""
Tests for the runner's cache and export helpers.
"""

import json
from datetime import timedelta

import run_matching
from matching import InMemoryClinicianDirectory, InMemorySlotStore, MatchingEngine
from models import Clinician, PatientRequirement
from tests.conftest import NOW, make_slot


def test_cache_round_trip(tmp_path):
    cache = tmp_path / "directory_cache.json"
    clinicians = [Clinician(id="clin_a", accepted_insurances=["Aetna"], rating=4.5)]
    slots = [make_slot("a_1", "clin_a")]

    run_matching.save_directory_cache({
        "clinicians": clinicians,
        "insurances": {"ins_001": "Aetna"},
        "clinician_insurances": {"clin_a": ["ins_001"]},
        "slots": slots,
    }, str(cache))
    loaded = run_matching.load_directory_cache(str(cache))

    assert loaded["insurances"] == {"ins_001": "Aetna"}
    assert InMemorySlotStore(loaded["slots"]).get_slot("a_1") == slots[0]
    assert InMemoryClinicianDirectory(loaded["clinicians"]).get_clinician("clin_a") == clinicians[0]


def test_missing_cache_returns_none(tmp_path):
    assert run_matching.load_directory_cache(str(tmp_path / "nope.json")) is None


def test_export_groups_slots_by_day(tmp_path):
    directory = InMemoryClinicianDirectory([{"id": "clin_a", "rating": 4.0}])
    store = InMemorySlotStore([
        make_slot("a_1", "clin_a", days=1, hour=9),
        make_slot("a_2", "clin_a", days=1, hour=14),
        make_slot("a_3", "clin_a", days=2, hour=9),
    ])
    requirement = PatientRequirement(preferred_specialty="Anxiety")
    response = MatchingEngine(directory, store).find_matches(requirement, now=NOW)
    out = tmp_path / "match_results.json"

    run_matching.export_match_results(response, requirement, str(out))

    data = json.loads(out.read_text())
    match = data["matches"][0]
    assert data["success"] is True
    assert match["fit_score"] == 15 + 8
    assert match["available_slot_count"] == 3
    day_one = (NOW + timedelta(days=1)).date().isoformat()
    assert [s["id"] for s in match["schedule"][day_one]] == ["a_1", "a_2"]
