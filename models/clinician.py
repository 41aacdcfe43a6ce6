"""
Clinician and patient-requirement data models for the Intake Matcher.

This module defines the two sides of a match request:
1. Supply (Clinician records from the clinical directory)
2. Demand (PatientRequirement built from onboarding answers)
"""

import math
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, ConfigDict


class Clinician(BaseModel):
    """
    Read-only directory record for a care provider.
    Missing lists and ratings are normalised to safe defaults on load.
    """
    id: str = Field(min_length=1, description="Unique identifier")
    name: str = Field(default="", description="Display name")

    accepted_insurances: List[str] = Field(
        default_factory=list,
        description="Insurance plans accepted by this clinician (order irrelevant)"
    )
    specialties: List[str] = Field(
        default_factory=list,
        description="Specialty tags, e.g. 'Anxiety', 'Depression'"
    )
    rating: float = Field(default=0.0, ge=0.0, le=5.0, description="Patient rating 0.0-5.0")

    model_config = ConfigDict(frozen=True, json_schema_extra={
        "example": {
            "id": "clin_001",
            "name": "Dr. Maya Patel",
            "accepted_insurances": ["Aetna", "United Healthcare"],
            "specialties": ["Anxiety", "Depression"],
            "rating": 4.8
        }
    })

    @field_validator('accepted_insurances', 'specialties', mode='before')
    @classmethod
    def default_empty_list(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [str(item) for item in v if item]

    @field_validator('rating', mode='before')
    @classmethod
    def default_zero_rating(cls, v):
        """Unreadable ratings become 0.0; out-of-range ones are clamped to 0-5."""
        if v is None or isinstance(v, bool):
            return 0.0
        try:
            rating = float(v)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(rating):
            return 0.0
        return max(0.0, min(5.0, rating))

    @field_validator('name', mode='before')
    @classmethod
    def default_blank_name(cls, v):
        return "" if v is None else v


class PatientRequirement(BaseModel):
    """
    What the patient is looking for in a clinician.
    Blank strings are treated as 'no preference'.
    """
    insurance_provider: Optional[str] = Field(default=None, description="Insurance plan name")
    preferred_specialty: Optional[str] = Field(default=None, description="Specialty tag to look for")

    model_config = ConfigDict(frozen=True)

    @field_validator('insurance_provider', 'preferred_specialty', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None
