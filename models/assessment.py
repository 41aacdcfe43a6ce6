"""
Structured assessment data models.

The assessment is an explicit finite-state machine: an immutable
AssessmentState is threaded through each transition and a new one returned.
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


class AssessmentPhase(str, Enum):
    """Ordered intake question phases. COMPLETION is terminal."""
    QUESTION_1_AGE = "question_1_age"
    QUESTION_2_CONCERNS = "question_2_concerns"
    QUESTION_3_DEPRESSION = "question_3_depression"
    QUESTION_4_ANXIETY = "question_4_anxiety"
    QUESTION_5_FUNCTIONAL = "question_5_functional"
    QUESTION_6_DURATION = "question_6_duration"
    QUESTION_7_CRISIS = "question_7_crisis"
    COMPLETION = "completion"


class SymptomFrequency(str, Enum):
    """PHQ-A / GAD-7 response scale."""
    NOT_AT_ALL = "not_at_all"
    SEVERAL_DAYS = "several_days"
    MORE_THAN_HALF = "more_than_half"
    NEARLY_EVERY_DAY = "nearly_every_day"

    @property
    def points(self) -> int:
        return list(SymptomFrequency).index(self)


class FunctionalImpact(str, Enum):
    NOT_AT_ALL = "not_at_all"
    SOMEWHAT = "somewhat"
    VERY_MUCH = "very_much"
    EXTREMELY = "extremely"


class SymptomDuration(str, Enum):
    LESS_THAN_2_WEEKS = "less_than_2_weeks"
    WEEKS_2_TO_4 = "2_4_weeks"
    MONTHS_1_TO_3 = "1_3_months"
    MORE_THAN_3_MONTHS = "more_than_3_months"


class Severity(str, Enum):
    MINIMAL = "minimal"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class Suitability(str, Enum):
    SUITABLE = "suitable"
    NOT_SUITABLE = "not_suitable"
    CRISIS = "crisis"


class CompletionReason(str, Enum):
    ALL_QUESTIONS_ANSWERED = "all_questions_answered"
    CRISIS_DETECTED = "crisis_detected"


class Question(BaseModel):
    """A single intake question bound to the answer field it fills."""
    phase: AssessmentPhase
    number: int = Field(ge=1, le=7)
    text: str
    field: str
    tool: Optional[str] = Field(default=None, description="Screening instrument, e.g. 'PHQ-A'")
    critical: bool = Field(default=False, description="A 'yes' answer ends the assessment as a crisis")
    use_llm_extraction: bool = False

    model_config = ConfigDict(frozen=True)


class ExtractedAnswer(BaseModel):
    """Structured reading of one free-text reply."""
    value: Any = None
    extracted_issues: List[str] = Field(default_factory=list)
    phq_items: Dict[str, SymptomFrequency] = Field(default_factory=dict)
    gad_items: Dict[str, SymptomFrequency] = Field(default_factory=dict)
    crisis_detected: bool = False


class AssessmentState(BaseModel):
    """
    Full state of one assessment. Never mutated in place;
    transitions return a copy.
    """

    # --- Progress ---
    phase: AssessmentPhase = Field(default=AssessmentPhase.QUESTION_1_AGE)
    progress_percent: int = Field(default=0, ge=0, le=100)

    # --- Answers (keyed by Question.field) ---
    answers: Dict[str, Any] = Field(default_factory=dict)
    extracted_issues: List[str] = Field(default_factory=list)
    phq_items: Dict[str, SymptomFrequency] = Field(default_factory=dict)
    gad_items: Dict[str, SymptomFrequency] = Field(default_factory=dict)

    # --- Outcome ---
    crisis_detected: bool = False
    completed: bool = False
    completion_reason: Optional[CompletionReason] = None
    phq_score: Optional[int] = None
    gad_score: Optional[int] = None
    severity: Optional[Severity] = None
    suitability: Optional[Suitability] = None

    model_config = ConfigDict(frozen=True)


class AssessmentTurn(BaseModel):
    """What one transition hands back to the chat layer."""
    state: AssessmentState
    message: str
    question: Optional[Question] = Field(default=None, description="Question now awaiting an answer")

    @property
    def is_complete(self) -> bool:
        return self.state.completed

    @property
    def crisis_detected(self) -> bool:
        return self.state.crisis_detected
