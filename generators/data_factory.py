"""
Seed data generator for the Intake Matcher.
STRATEGY: one LLM request for the clinician roster, deterministic code for
the credentialing index and the availability calendar.
"""

import os
import json
import logging
import re
import google.generativeai as genai
from typing import List, Tuple, Dict, Any
from datetime import date, datetime, time, timedelta, timezone
from pydantic import ValidationError

from models import Clinician, AvailabilitySlot

logger = logging.getLogger(__name__)

DEFAULT_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")

KNOWN_INSURANCES = [
    "Aetna",
    "United Healthcare",
    "Blue Cross",
    "Cigna",
    "Anthem",
    "Molina",
    "Medicaid",
]

SPECIALTIES = [
    "Anxiety", "Depression", "ADHD", "Trauma", "Eating Disorders",
    "Behavioral Issues", "Autism Spectrum", "Family Therapy", "Grief", "OCD",
]

# Standard session start hours (UTC) offered on weekdays
SESSION_HOURS = [9, 11, 14, 16, 18]

ROSTER_PROMPT = """
Generate {count} licensed child and adolescent mental health clinicians.
OUTPUT: A single valid JSON Array of {count} objects.
STRICT SCHEMA RULES:
- "id": STRING of the form "clin_001", "clin_002", ... (unique).
- "name": Full name with credential, e.g. "Dr. Maya Patel, PsyD".
- "accepted_insurances": 1-4 values chosen ONLY from {insurances}.
- "specialties": 1-3 values chosen ONLY from {specialties}.
- "rating": number between 3.0 and 5.0 with one decimal.
- Vary the insurance mix; not every clinician should accept the same plans.
"""


class DataGenerator:
    def __init__(self, api_key: str | None = None, model=None):
        if model is None:
            self.api_key = api_key or os.environ.get("GOOGLE_API_KEY")
            if not self.api_key:
                raise ValueError("GOOGLE_API_KEY not found. Please set it in environment.")
            genai.configure(api_key=self.api_key)
            model = genai.GenerativeModel(DEFAULT_MODEL)
        self.model = model
        self.total_cost = 0.0

    def _estimate_cost(self, prompt_tokens: int, response_tokens: int) -> float:
        return (prompt_tokens * 0.075 + response_tokens * 0.30) / 1_000_000

    def _parse_roster(self, raw_text: str) -> List[Dict[str, Any]]:
        """
        Clinician records from a roster reply: a JSON array, possibly fenced,
        wrapped in prose or nested under "clinicians".
        """
        if not raw_text:
            return []

        clean_text = re.sub(r"```json\s*|\s*```", "", raw_text).strip()
        try:
            data = json.loads(clean_text)
        except json.JSONDecodeError:
            start, end = clean_text.find("["), clean_text.rfind("]")
            if start < 0 or end <= start:
                return []
            try:
                data = json.loads(clean_text[start:end + 1])
            except json.JSONDecodeError:
                return []

        if isinstance(data, dict):
            data = data.get("clinicians")
        if not isinstance(data, list):
            return []
        return [record for record in data if isinstance(record, dict)]

    def _build_roster(self, records: List[Dict[str, Any]]) -> List[Clinician]:
        """Validate records, dropping invalid ones and ids the model repeats."""
        roster: Dict[str, Clinician] = {}
        for i, record in enumerate(records):
            try:
                clinician = Clinician.model_validate(record)
            except ValidationError as e:
                logger.warning(f"Skipping invalid clinician record {i}: {e.error_count()} errors")
                continue
            if clinician.id in roster:
                logger.warning(f"Skipping repeated clinician id {clinician.id}")
                continue
            roster[clinician.id] = clinician
        return list(roster.values())

    def generate_clinicians(self, count: int = 20) -> Tuple[List[Clinician], float]:
        """
        Generates a pediatric mental-health clinician roster in one request.
        Returns ([], 0.0) when the request fails.
        """
        prompt = ROSTER_PROMPT.format(
            count=count,
            insurances=json.dumps(KNOWN_INSURANCES),
            specialties=json.dumps(SPECIALTIES)
        )
        generation_config = genai.GenerationConfig(
            response_mime_type="application/json",
            max_output_tokens=16000,
            temperature=0.7
        )

        logger.info(f"Requesting {count} clinicians...")
        try:
            response = self.model.generate_content(prompt, generation_config=generation_config)
            raw_text = response.text
        except Exception as e:
            logger.error(f"Clinician roster generation failed: {e}")
            return [], 0.0

        cost = 0.0
        usage = getattr(response, 'usage_metadata', None)
        if usage is not None:
            cost = self._estimate_cost(usage.prompt_token_count, usage.candidates_token_count)
        self.total_cost += cost

        clinicians = self._build_roster(self._parse_roster(raw_text))
        logger.info(f"Generated {len(clinicians)} clinicians.")
        return clinicians, cost


def build_insurance_index(clinicians: List[Clinician]) -> Tuple[Dict[str, str], Dict[str, List[str]]]:
    """
    Derive the credentialed-insurance tables from clinician records:
    insurance id -> plan name, and clinician id -> insurance ids.
    """
    insurances: Dict[str, str] = {}
    name_to_id: Dict[str, str] = {}
    clinician_insurances: Dict[str, List[str]] = {}

    for clinician in clinicians:
        ids = []
        for name in clinician.accepted_insurances:
            key = name.strip().lower()
            if key not in name_to_id:
                insurance_id = f"ins_{len(name_to_id) + 1:03d}"
                name_to_id[key] = insurance_id
                insurances[insurance_id] = name.strip()
            if name_to_id[key] not in ids:
                ids.append(name_to_id[key])
        clinician_insurances[clinician.id] = ids

    return insurances, clinician_insurances


def generate_availability(
    clinicians: List[Clinician],
    start_date: date,
    days: int = 30,
    session_minutes: int = 50
) -> List[AvailabilitySlot]:
    """
    Weekday sessions at SESSION_HOURS; each clinician works a rotating
    subset of hours so calendars differ between clinicians.
    """
    slots = []
    for c_index, clinician in enumerate(clinicians):
        hours = [h for i, h in enumerate(SESSION_HOURS) if (i + c_index) % 2 == 0]
        for offset in range(days):
            day = start_date + timedelta(days=offset)
            if day.weekday() >= 5:
                continue
            for hour in hours:
                start = datetime.combine(day, time(hour, 0), tzinfo=timezone.utc)
                slots.append(AvailabilitySlot(
                    id=f"{clinician.id}_{day.isoformat()}_{hour:02d}",
                    clinician_id=clinician.id,
                    start_time=start,
                    end_time=start + timedelta(minutes=session_minutes)
                ))
    return slots
