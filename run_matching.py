"""
Main Execution Script for the Intake Matcher.
Loads (or generates) a clinician directory, runs a match for a sample
patient, books the top slot and exports the results for the frontend.
"""

import os
import sys
import logging
from datetime import date, datetime, timedelta, timezone
import json

# Add current directory to path so imports work
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from generators.data_factory import DataGenerator, build_insurance_index, generate_availability
from matching import (
    MatchingEngine,
    InMemoryClinicianDirectory,
    InMemorySlotStore,
    InMemoryAppointmentBook,
    group_slots_by_day
)
from models import PatientRequirement, BookingRequest, MatchResponse

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger("Main")

# --- CONFIGURATION ---
API_KEY = os.environ.get("GOOGLE_API_KEY")
CACHE_FILENAME = "directory_cache.json"
EXPORT_FILENAME = "match_results.json"
USE_CACHE = True  # Set to False to force new AI generation
CLINICIAN_COUNT = 20
WINDOW_DAYS = 14
MIN_FIT_SCORE = 1
SAMPLE_REQUIREMENT = PatientRequirement(insurance_provider="Aetna", preferred_specialty="Anxiety")
# ---------------------


def save_directory_cache(data: dict, filename: str):
    """Helper to save generated data so we don't re-query the LLM every time."""
    serializable = {}
    for key, val in data.items():
        if isinstance(val, list):
            serializable[key] = [item.model_dump(mode='json') for item in val]
        else:
            serializable[key] = val

    with open(filename, 'w') as f:
        json.dump(serializable, f, indent=2)
    logger.info(f"Saved directory cache to {filename}")


def load_directory_cache(filename: str):
    """
    Helper to load JSON data. Records are validated by the stores themselves,
    so malformed entries are skipped there rather than failing the load.
    """
    try:
        with open(filename, 'r') as f:
            data = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        logger.warning(f"Cache file {filename} not found or invalid. Falling back to Generator.")
        return None

    logger.info(f"Loading cached directory from {filename}...")
    return {
        "clinicians": data.get("clinicians", []),
        "insurances": data.get("insurances", {}),
        "clinician_insurances": data.get("clinician_insurances", {}),
        "slots": data.get("slots", []),
    }


def generate_directory(start_date: date):
    generator = DataGenerator(api_key=API_KEY)
    clinicians, cost = generator.generate_clinicians(count=CLINICIAN_COUNT)
    logger.info(f"Total Estimated LLM Cost: ${cost:.4f}")

    insurances, clinician_insurances = build_insurance_index(clinicians)
    slots = generate_availability(clinicians, start_date, days=30)

    save_directory_cache({
        "clinicians": clinicians,
        "insurances": insurances,
        "clinician_insurances": clinician_insurances,
        "slots": slots,
    }, CACHE_FILENAME)

    return {
        "clinicians": clinicians,
        "insurances": insurances,
        "clinician_insurances": clinician_insurances,
        "slots": slots,
    }


def export_match_results(response: MatchResponse, requirement: PatientRequirement, filename: str):
    """
    Serializes the ranked matches for the scheduling page, with each
    clinician's open slots grouped by day.
    """
    data = {
        "requirement": requirement.model_dump(mode='json'),
        "success": response.success,
        "error": response.error,
        "warnings": response.warnings,
        "matches": [],
    }

    for match in response.matches:
        by_day = group_slots_by_day(match.available_slots)
        data["matches"].append({
            "clinician": match.clinician.model_dump(mode='json'),
            "fit_score": match.fit_score,
            "available_slot_count": match.available_slot_count,
            "schedule": {
                day.isoformat(): [slot.model_dump(mode='json') for slot in slots]
                for day, slots in by_day.items()
            },
        })

    with open(filename, 'w') as f:
        json.dump(data, f, indent=2)
    logger.info(f"Exported {len(response.matches)} matches to {filename}")


def main():
    if not API_KEY and not USE_CACHE:
        logger.error("GOOGLE_API_KEY not found. Please set it via 'export GOOGLE_API_KEY=...'")
        return

    logger.info("Starting Intake Matcher run...")
    now = datetime.now(timezone.utc)

    # --- PHASE 1: DATA ACQUISITION (Cache vs. GenAI) ---
    directory_data = load_directory_cache(CACHE_FILENAME) if USE_CACHE else None
    if not directory_data or not directory_data["clinicians"]:
        if not API_KEY:
            logger.error("No cached directory and no GOOGLE_API_KEY to generate one. Exiting.")
            return
        directory_data = generate_directory(now.date())

    directory = InMemoryClinicianDirectory(
        directory_data["clinicians"],
        insurances=directory_data["insurances"],
        clinician_insurances=directory_data["clinician_insurances"]
    )
    slot_store = InMemorySlotStore(directory_data["slots"])
    appointment_book = InMemoryAppointmentBook(slot_store)

    # --- PHASE 2: MATCHING ---
    engine = MatchingEngine(directory, slot_store, booking_sink=appointment_book, min_score=MIN_FIT_SCORE)
    response = engine.find_matches(SAMPLE_REQUIREMENT, start=now, end=now + timedelta(days=WINDOW_DAYS), now=now)

    print("\n" + "=" * 50)
    print("MATCH REPORT")
    print("=" * 50)
    if not response.success:
        print(f"Matching failed: {response.error}")
        return
    if not response.matches:
        print("No clinicians met the score floor.")
    for match in response.matches[:10]:
        c = match.clinician
        print(f"[{match.fit_score:3d}] {c.name or c.id} | {', '.join(c.specialties)} | "
              f"{match.available_slot_count} open slots")
    for warning in response.warnings:
        print(f"WARNING: {warning}")

    # --- PHASE 3: BOOK THE BEST SLOT ---
    if response.matches and response.matches[0].available_slots:
        best = response.matches[0]
        slot = best.available_slots[0]
        result = engine.book(BookingRequest(
            clinician_id=best.clinician.id,
            slot_id=slot.id,
            patient_id="demo_patient",
            start_time=slot.start_time
        ))
        print(f"\nBooking {slot.id}: {'booked (pending confirmation)' if result.success else result.error}")
        print(appointment_book.get_statistics())

    # --- PHASE 4: EXPORT FOR FRONTEND ---
    export_match_results(response, SAMPLE_REQUIREMENT, EXPORT_FILENAME)


if __name__ == "__main__":
    main()
