"""
Unit tests for the clinician fit scorer.
"""

import pytest

from matching import FitScorer, calculate_fit_score
from models import Clinician, PatientRequirement
from tests.conftest import make_slot


def slots(n):
    return [make_slot(f"s{i}", hour=9 + (i % 8), days=1 + i // 8) for i in range(n)]


class TestScenarios:

    def test_full_match_scores_84(self, sample_clinician):
        requirement = PatientRequirement(insurance_provider="Aetna", preferred_specialty="Anxiety")
        # 40 insurance + 15 slots + 20 specialty + floor(9.6)
        assert calculate_fit_score(sample_clinician, requirement, slots(3)) == 84

    def test_out_of_network_without_slots_scores_rating_only(self, sample_clinician):
        requirement = PatientRequirement(insurance_provider="Blue Cross")
        assert calculate_fit_score(sample_clinician, requirement, []) == 9


class TestInsuranceTerm:

    def test_case_insensitive(self, sample_clinician):
        requirement = PatientRequirement(insurance_provider="united healthcare")
        assert FitScorer()._score_insurance(sample_clinician, requirement) == 40

    def test_partial_name_is_not_a_match(self, sample_clinician):
        requirement = PatientRequirement(insurance_provider="United")
        assert FitScorer()._score_insurance(sample_clinician, requirement) == 0

    @pytest.mark.parametrize("provider", ["Aetna", "Cigna", None, "", "   "])
    def test_empty_accepted_list_never_matches(self, provider):
        clinician = Clinician(id="c", accepted_insurances=[])
        requirement = PatientRequirement(insurance_provider=provider)
        assert FitScorer()._score_insurance(clinician, requirement) == 0


class TestAvailabilityTerm:

    def test_monotonic_then_flat(self):
        scorer = FitScorer()
        scores = [scorer._score_availability(slots(n)) for n in range(10)]
        assert scores[:7] == [0, 5, 10, 15, 20, 25, 30]
        assert all(s == 30 for s in scores[6:])
        assert scores == sorted(scores)

    def test_none_slots(self):
        assert FitScorer()._score_availability(None) == 0


class TestSpecialtyTerm:

    def test_substring_match(self):
        clinician = Clinician(id="c", specialties=["Childhood Anxiety"])
        requirement = PatientRequirement(preferred_specialty="anxiety")
        assert FitScorer()._score_specialty(clinician, requirement) == 20

    def test_blank_preference_is_no_preference(self):
        clinician = Clinician(id="c", specialties=["Anxiety"])
        requirement = PatientRequirement(preferred_specialty="  ")
        assert requirement.preferred_specialty is None
        assert FitScorer()._score_specialty(clinician, requirement) == 0


class TestRatingTerm:

    @pytest.mark.parametrize("rating,expected", [(0, 0), (None, 0), (1.2, 2), (4.8, 9), (5.0, 10)])
    def test_floored_and_capped(self, rating, expected):
        clinician = Clinician(id="c", rating=rating)
        assert FitScorer()._score_rating(clinician) == expected


class TestTotality:

    def test_all_none_inputs(self):
        assert calculate_fit_score(None, None, None) == 0

    def test_missing_requirement_still_scores_slots_and_rating(self, sample_clinician):
        assert calculate_fit_score(sample_clinician, None, slots(2)) == 10 + 9

    def test_missing_clinician_scores_slots_only(self):
        requirement = PatientRequirement(insurance_provider="Aetna", preferred_specialty="Anxiety")
        assert calculate_fit_score(None, requirement, slots(1)) == 5

    def test_maximum_stays_within_bounds(self):
        clinician = Clinician(id="c", accepted_insurances=["Aetna"], specialties=["Anxiety"], rating=5.0)
        requirement = PatientRequirement(insurance_provider="Aetna", preferred_specialty="Anxiety")
        assert calculate_fit_score(clinician, requirement, slots(20)) == 100

    def test_deterministic(self, sample_clinician):
        requirement = PatientRequirement(insurance_provider="Aetna")
        open_slots = slots(4)
        first = calculate_fit_score(sample_clinician, requirement, open_slots)
        assert all(calculate_fit_score(sample_clinician, requirement, open_slots) == first for _ in range(5))
