"""
Fit Scoring Engine for the Intake Matcher.

This module determines how well a clinician suits a patient's stated needs.
The score is an additive gradient (0 - 100) over four independent terms,
so a missing input only removes its own term instead of failing the match.
"""

import math
from typing import Optional, Sequence

from models import Clinician, PatientRequirement, AvailabilitySlot


class FitScorer:
    """
    Pure, stateless scorer. Safe to share across concurrent callers.
    """

    INSURANCE_POINTS = 40
    SLOT_POINTS = 5
    MAX_AVAILABILITY_POINTS = 30
    SPECIALTY_POINTS = 20
    RATING_MULTIPLIER = 2
    MAX_RATING_POINTS = 10
    MAX_SCORE = 100

    def calculate_score(
        self,
        clinician: Optional[Clinician],
        requirement: Optional[PatientRequirement],
        available_slots: Optional[Sequence[AvailabilitySlot]]
    ) -> int:
        """
        Master scoring function. Returns an integer 0-100.
        """
        score = 0

        # 1. Insurance (In-network) (+40)
        score += self._score_insurance(clinician, requirement)

        # 2. Availability (+5 per open slot, max 30)
        score += self._score_availability(available_slots)

        # 3. Specialty (+20)
        score += self._score_specialty(clinician, requirement)

        # 4. Rating bonus (max 10, floored)
        score += self._score_rating(clinician)

        # Clamp result
        return max(0, min(self.MAX_SCORE, score))

    def _score_insurance(self, clinician: Optional[Clinician], requirement: Optional[PatientRequirement]) -> int:
        if clinician is None or requirement is None or not requirement.insurance_provider:
            return 0

        wanted = requirement.insurance_provider.strip().lower()
        if any(plan.strip().lower() == wanted for plan in clinician.accepted_insurances):
            return self.INSURANCE_POINTS
        return 0

    def _score_availability(self, available_slots: Optional[Sequence[AvailabilitySlot]]) -> int:
        if not available_slots:
            return 0
        return min(self.MAX_AVAILABILITY_POINTS, len(available_slots) * self.SLOT_POINTS)

    def _score_specialty(self, clinician: Optional[Clinician], requirement: Optional[PatientRequirement]) -> int:
        if clinician is None or requirement is None or not requirement.preferred_specialty:
            return 0

        wanted = requirement.preferred_specialty.strip().lower()
        if any(wanted in specialty.lower() for specialty in clinician.specialties):
            return self.SPECIALTY_POINTS
        return 0

    def _score_rating(self, clinician: Optional[Clinician]) -> int:
        """
        Rating bonus, floored to whole points (4.8 stars -> 9.6 -> 9).
        """
        if clinician is None or not clinician.rating:
            return 0
        bonus = min(float(self.MAX_RATING_POINTS), clinician.rating * self.RATING_MULTIPLIER)
        return max(0, math.floor(bonus))


_default_scorer = FitScorer()


def calculate_fit_score(
    clinician: Optional[Clinician],
    requirement: Optional[PatientRequirement],
    available_slots: Optional[Sequence[AvailabilitySlot]]
) -> int:
    """Module-level shortcut around a shared FitScorer."""
    return _default_scorer.calculate_score(clinician, requirement, available_slots)
