"""
The seven intake questions, in the order they are asked.
Questions 3 and 4 follow validated screening tools (PHQ-A, GAD-7).
"""

from typing import Dict, List

from models import AssessmentPhase, Question

PHQ_ITEMS = ["interest", "mood", "sleep", "energy"]
GAD_ITEMS = ["anxiety", "worry", "concentration"]

QUESTIONS: List[Question] = [
    Question(
        phase=AssessmentPhase.QUESTION_1_AGE,
        number=1,
        field="child_age",
        text=("Hello! I'm here to help you understand your child's mental health needs. "
              "This conversation is completely confidential and non-judgmental. "
              "To get started, could you tell me your child's age?")
    ),
    Question(
        phase=AssessmentPhase.QUESTION_2_CONCERNS,
        number=2,
        field="initial_concerns",
        use_llm_extraction=True,
        text=("What specific concerns or changes have you noticed in your child recently that "
              "prompted you to seek help today? Please describe what you've observed.")
    ),
    Question(
        phase=AssessmentPhase.QUESTION_3_DEPRESSION,
        number=3,
        field="depression_symptoms",
        tool="PHQ-A",
        use_llm_extraction=True,
        text=("Over the past 2 weeks, how often has your child experienced: "
              "(a) little interest or pleasure in doing things, (b) feeling down, depressed, or hopeless, "
              "(c) trouble sleeping or sleeping too much, (d) feeling tired or having little energy? "
              "Please describe the frequency for each symptom. "
              "(Not at all, Several days, More than half the days, Nearly every day)")
    ),
    Question(
        phase=AssessmentPhase.QUESTION_4_ANXIETY,
        number=4,
        field="anxiety_symptoms",
        tool="GAD-7",
        use_llm_extraction=True,
        text=("Over the past 2 weeks, how often has your child experienced: "
              "(a) feeling nervous, anxious, or on edge, (b) not being able to stop or control worrying, "
              "(c) difficulty concentrating? Please describe the frequency for each. "
              "(Not at all, Several days, More than half the days, Nearly every day)")
    ),
    Question(
        phase=AssessmentPhase.QUESTION_5_FUNCTIONAL,
        number=5,
        field="functional_impact",
        use_llm_extraction=True,
        text=("How much have these symptoms affected your child's daily life - such as schoolwork, "
              "relationships with friends, or activities at home? "
              "(Not at all, Somewhat, Very much, Extremely)")
    ),
    Question(
        phase=AssessmentPhase.QUESTION_6_DURATION,
        number=6,
        field="duration",
        use_llm_extraction=True,
        text=("How long have these concerns been present? "
              "(Less than 2 weeks, 2-4 weeks, 1-3 months, More than 3 months)")
    ),
    Question(
        phase=AssessmentPhase.QUESTION_7_CRISIS,
        number=7,
        field="crisis_indicators",
        critical=True,
        use_llm_extraction=True,
        text=("Has your child ever expressed thoughts of self-harm, suicide, or hurting themselves "
              "or others? This is important for their safety.")
    ),
]

QUESTION_BY_PHASE: Dict[AssessmentPhase, Question] = {q.phase: q for q in QUESTIONS}
ANSWER_FIELDS: List[str] = [q.field for q in QUESTIONS]


def next_phase(phase: AssessmentPhase) -> AssessmentPhase:
    """The phase after `phase`; the last question leads to COMPLETION."""
    order = [q.phase for q in QUESTIONS]
    if phase not in order:
        return AssessmentPhase.COMPLETION
    index = order.index(phase)
    return order[index + 1] if index + 1 < len(order) else AssessmentPhase.COMPLETION
