"""
Structured Assessment State Machine.

States are the named question phases; the only transition is "the parent
answered the current question". Each call takes an AssessmentState and
returns a new one, so a session can be persisted, replayed or resumed from
any point without hidden engine state.
"""

import logging
from typing import Callable, Dict, Optional

from models import (
    AssessmentPhase,
    AssessmentState,
    AssessmentTurn,
    CompletionReason,
    ExtractedAnswer,
    FunctionalImpact,
    Question,
    Severity,
    Suitability,
    SymptomDuration,
    SymptomFrequency
)
from .extraction import extract_answer
from .questions import ANSWER_FIELDS, QUESTION_BY_PHASE, QUESTIONS, next_phase

logger = logging.getLogger(__name__)

Extractor = Callable[[str, Question], ExtractedAnswer]

CRISIS_KEYWORDS = [
    "suicide", "kill myself", "kill himself", "kill herself", "end my life", "want to die",
    "self-harm", "self harm", "cutting", "hurting myself", "hurting himself", "hurting herself",
    "hurt others", "violence", "threat",
]

ACKNOWLEDGMENTS = [
    "Thank you for sharing that.",
    "I appreciate you telling me about that.",
    "I understand that must be difficult.",
    "Thank you for that information.",
    "I hear you.",
]

CRISIS_MESSAGE = """I'm concerned about what you've shared. If your child is in immediate danger, please call 988 (Suicide & Crisis Lifeline) or 911 right away.

For immediate support:
- National Suicide Prevention Lifeline: 988
- Crisis Text Line: Text HOME to 741741
- Emergency Services: 911

I've flagged this assessment for immediate review. A mental health professional will reach out to you as soon as possible. Your child's safety is our top priority."""

COMPLETION_MESSAGE = """Thank you for completing the assessment. Based on your responses, I've gathered important information about your child's mental health needs.

Your assessment results will be reviewed, and we'll help determine the best next steps for your child's care. This is a screening tool, not a diagnosis, and our team will work with you to create a personalized care plan.

Would you like to continue to the onboarding process?"""

ALREADY_COMPLETE_MESSAGE = "This assessment is already complete."
EMPTY_REPLY_PREFIX = "I didn't catch that."


# --- Scoring ---

def _sum_items(items: Dict[str, SymptomFrequency]) -> int:
    return sum(SymptomFrequency(v).points for v in items.values())


def calculate_phq_score(state: AssessmentState) -> int:
    """PHQ-A subset, 4 items x 0-3 points."""
    return _sum_items(state.phq_items)


def calculate_gad_score(state: AssessmentState) -> int:
    """GAD-7 subset, 3 items x 0-3 points."""
    return _sum_items(state.gad_items)


def determine_severity(phq_score: int, gad_score: int) -> Severity:
    total = phq_score + gad_score
    if total >= 20:
        return Severity.SEVERE
    if total >= 10:
        return Severity.MODERATE
    if total >= 5:
        return Severity.MILD
    return Severity.MINIMAL


def determine_suitability(state: AssessmentState, phq_score: int, gad_score: int, severity: Severity) -> Suitability:
    if state.crisis_detected:
        return Suitability.CRISIS

    if phq_score >= 10 or gad_score >= 10 or severity in (Severity.MODERATE, Severity.SEVERE):
        return Suitability.SUITABLE

    impact = state.answers.get("functional_impact")
    if impact in (FunctionalImpact.VERY_MUCH, FunctionalImpact.EXTREMELY):
        return Suitability.SUITABLE
    if isinstance(impact, str) and ("very much" in impact.lower() or "extremely" in impact.lower()):
        return Suitability.SUITABLE

    if state.answers.get("duration") in (SymptomDuration.MONTHS_1_TO_3, SymptomDuration.MORE_THAN_3_MONTHS):
        return Suitability.SUITABLE

    return Suitability.NOT_SUITABLE


def calculate_progress(answers: Dict[str, object]) -> int:
    answered = sum(1 for field in ANSWER_FIELDS if answers.get(field) is not None)
    return round(answered / len(ANSWER_FIELDS) * 100)


def detect_crisis(message: str, extracted: ExtractedAnswer, question: Question) -> bool:
    if extracted.crisis_detected:
        return True
    if question.critical and extracted.value == "yes":
        return True
    lower = (message or "").lower()
    return any(keyword in lower for keyword in CRISIS_KEYWORDS)


# --- Transitions ---

def start_assessment() -> AssessmentTurn:
    first = QUESTIONS[0]
    return AssessmentTurn(state=AssessmentState(phase=first.phase), message=first.text, question=first)


def current_question(state: AssessmentState) -> Optional[Question]:
    return QUESTION_BY_PHASE.get(state.phase)


def advance(state: AssessmentState, message: str, extractor: Optional[Extractor] = None) -> AssessmentTurn:
    """
    Apply one answer to `state` and return the resulting turn.
    """
    question = current_question(state)
    if state.completed or question is None:
        return AssessmentTurn(state=state, message=ALREADY_COMPLETE_MESSAGE)

    if not message or not message.strip():
        return AssessmentTurn(state=state, message=f"{EMPTY_REPLY_PREFIX} {question.text}", question=question)

    extracted = _extract(message, question, extractor)
    logger.info(f"[Assessment] {question.phase.value}: extracted {extracted.value!r}")

    answers = {**state.answers, question.field: extracted.value}
    updates = {
        "answers": answers,
        "phq_items": {**state.phq_items, **extracted.phq_items},
        "gad_items": {**state.gad_items, **extracted.gad_items},
        "extracted_issues": extracted.extracted_issues or state.extracted_issues,
        "progress_percent": calculate_progress(answers),
    }

    # 1. Crisis short-circuits the remaining questions
    if detect_crisis(message, extracted, question):
        logger.warning(f"[Assessment] Crisis indicators detected at {question.phase.value}")
        crisis_state = state.model_copy(update={
            **updates,
            "phase": AssessmentPhase.COMPLETION,
            "crisis_detected": True,
            "completed": True,
            "completion_reason": CompletionReason.CRISIS_DETECTED,
            "suitability": Suitability.CRISIS,
            "progress_percent": 100,
        })
        return AssessmentTurn(state=crisis_state, message=CRISIS_MESSAGE)

    # 2. Move on, no follow-up questions
    following = next_phase(question.phase)
    if following == AssessmentPhase.COMPLETION:
        return _complete(state.model_copy(update=updates))

    next_question = QUESTION_BY_PHASE[following]
    acknowledgment = ACKNOWLEDGMENTS[len(message) % len(ACKNOWLEDGMENTS)]
    new_state = state.model_copy(update={**updates, "phase": following})
    return AssessmentTurn(
        state=new_state,
        message=f"{acknowledgment} {next_question.text}",
        question=next_question
    )


def _extract(message: str, question: Question, extractor: Optional[Extractor]) -> ExtractedAnswer:
    if extractor is None:
        return extract_answer(message, question)
    try:
        return extractor(message, question)
    except Exception as e:
        logger.error(f"[Assessment] Extractor failed for {question.field}: {e}")
        return extract_answer(message, question)


def _complete(state: AssessmentState) -> AssessmentTurn:
    phq = calculate_phq_score(state)
    gad = calculate_gad_score(state)
    severity = determine_severity(phq, gad)
    suitability = determine_suitability(state, phq, gad, severity)

    final = state.model_copy(update={
        "phase": AssessmentPhase.COMPLETION,
        "completed": True,
        "completion_reason": CompletionReason.ALL_QUESTIONS_ANSWERED,
        "phq_score": phq,
        "gad_score": gad,
        "severity": severity,
        "suitability": suitability,
        "progress_percent": 100,
    })
    logger.info(f"[Assessment] Complete: PHQ={phq} GAD={gad} severity={severity.value} suitability={suitability.value}")
    return AssessmentTurn(state=final, message=COMPLETION_MESSAGE)
