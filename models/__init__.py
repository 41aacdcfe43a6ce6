"""
Data models package for the Intake Matcher.

This package exports the core pillars of the data architecture:
1. Matching (Clinician, PatientRequirement, AvailabilitySlot)
2. Booking (BookingRequest, Appointment, MatchResponse)
3. Insurance (InsuranceCardData, Coverage, cost breakdowns)
4. Assessment (AssessmentState and its enums)
5. Support (SupportChat, ChatMessage)
"""

from .clinician import (
    Clinician,
    PatientRequirement
)

from .schedule import (
    AvailabilitySlot,
    AppointmentStatus,
    BookingRequest,
    Appointment,
    BookingResult,
    ClinicianMatch,
    MatchResponse
)

from .insurance import (
    InsuranceCardData,
    ScanResult,
    ValidationOutcome,
    Coverage,
    CostBreakdown,
    AnnualCostEstimate
)

from .assessment import (
    AssessmentPhase,
    SymptomFrequency,
    FunctionalImpact,
    SymptomDuration,
    Severity,
    Suitability,
    CompletionReason,
    Question,
    ExtractedAnswer,
    AssessmentState,
    AssessmentTurn
)

from .support import (
    ChatStatus,
    MessageRole,
    ChatMessage,
    SupportChat,
    ChatResult
)

__all__ = [
    # --- Matching Models ---
    "Clinician",
    "PatientRequirement",
    "AvailabilitySlot",

    # --- Booking Models ---
    "AppointmentStatus",
    "BookingRequest",
    "Appointment",
    "BookingResult",
    "ClinicianMatch",
    "MatchResponse",

    # --- Insurance Models ---
    "InsuranceCardData",
    "ScanResult",
    "ValidationOutcome",
    "Coverage",
    "CostBreakdown",
    "AnnualCostEstimate",

    # --- Assessment Models ---
    "AssessmentPhase",
    "SymptomFrequency",
    "FunctionalImpact",
    "SymptomDuration",
    "Severity",
    "Suitability",
    "CompletionReason",
    "Question",
    "ExtractedAnswer",
    "AssessmentState",
    "AssessmentTurn",

    # --- Support Models ---
    "ChatStatus",
    "MessageRole",
    "ChatMessage",
    "SupportChat",
    "ChatResult",
]
