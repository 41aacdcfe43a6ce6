"""
The Clinician Matching Engine.

This module implements the orchestration around the pure scoring logic:
1. Candidate lookup (Directory) - who is in-network for this patient.
2. Availability (Slot Store + Availability Filter) - who can see them soon.
3. Ranking (Fit Scorer) - who fits best, deterministically ordered.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from models import (
    Clinician,
    PatientRequirement,
    BookingRequest,
    BookingResult,
    ClinicianMatch,
    MatchResponse
)
from .availability import as_utc_if_naive, filter_available_slots
from .scoring import FitScorer
from .store import ClinicianDirectory, SlotStore, BookingSink

logger = logging.getLogger(__name__)


class MatchingEngine:
    """
    Main matching engine.
    Ingests a PatientRequirement, outputs a ranked list of clinicians.
    """

    DEFAULT_WINDOW_DAYS = 30

    def __init__(
        self,
        directory: ClinicianDirectory,
        slot_store: SlotStore,
        booking_sink: Optional[BookingSink] = None,
        scorer: Optional[FitScorer] = None,
        min_score: int = 1
    ):
        self.directory = directory
        self.slot_store = slot_store
        self.booking_sink = booking_sink
        self.scorer = scorer or FitScorer()
        self.min_score = min_score

    def find_matches(
        self,
        requirement: Optional[PatientRequirement],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        now: Optional[datetime] = None
    ) -> MatchResponse:
        """
        Execute the matching pipeline.
        """
        requirement = requirement or PatientRequirement()
        now = as_utc_if_naive(now) or datetime.now(timezone.utc)
        start = as_utc_if_naive(start) or now
        end = as_utc_if_naive(end) or start + timedelta(days=self.DEFAULT_WINDOW_DAYS)

        logger.info(f"Matching clinicians for insurance={requirement.insurance_provider!r} "
                    f"specialty={requirement.preferred_specialty!r}")

        # 1. Candidates
        try:
            clinicians = self.directory.find_clinicians(requirement.insurance_provider)
        except Exception as e:
            logger.error(f"Clinician directory lookup failed: {e}")
            return MatchResponse(success=False, error=f"Clinician directory unavailable: {e}")

        # 2. Availability + Score each candidate
        matches: List[ClinicianMatch] = []
        warnings: List[str] = []
        for clinician in clinicians or []:
            slots = self._fetch_available_slots(clinician, start, end, now, warnings)
            score = self.scorer.calculate_score(clinician, requirement, slots)

            if score < self.min_score:
                logger.debug(f"Dropping {clinician.id}: score {score} below floor {self.min_score}")
                continue
            matches.append(ClinicianMatch(clinician=clinician, fit_score=score, available_slots=slots))

        # 3. Rank: best score first, clinician id breaks ties
        matches.sort(key=lambda m: (-m.fit_score, m.clinician.id))

        logger.info(f"Matched {len(matches)} of {len(clinicians or [])} candidate clinicians")
        return MatchResponse(success=True, matches=matches, warnings=warnings)

    def _fetch_available_slots(
        self,
        clinician: Clinician,
        start: datetime,
        end: datetime,
        now: datetime,
        warnings: List[str]
    ):
        """
        Slot-store failures only cost this clinician its availability points.
        """
        try:
            records = self.slot_store.get_slots(clinician.id, start, end)
        except Exception as e:
            logger.warning(f"Slot lookup failed for {clinician.id}: {e}")
            warnings.append(f"Availability unavailable for clinician {clinician.id}")
            return []
        return filter_available_slots(records, start, end, now)

    def book(self, request: BookingRequest) -> BookingResult:
        """
        Forward a booking to the sink. Failures are reported, never raised,
        and leave previously returned match results untouched.
        """
        if self.booking_sink is None:
            return BookingResult(success=False, error="No booking service configured")
        try:
            result = self.booking_sink.book(request)
        except Exception as e:
            logger.error(f"Booking failed for slot {request.slot_id}: {e}")
            return BookingResult(success=False, error=str(e) or "Booking failed")

        if not result.success:
            logger.warning(f"Booking rejected for slot {request.slot_id}: {result.error}")
        return result
