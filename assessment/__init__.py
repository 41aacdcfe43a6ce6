from .questions import QUESTIONS, QUESTION_BY_PHASE, next_phase
from .extraction import extract_answer, LLMAnswerExtractor
from .engine import advance, start_assessment, current_question

__all__ = [
    "QUESTIONS",
    "QUESTION_BY_PHASE",
    "next_phase",
    "extract_answer",
    "LLMAnswerExtractor",
    "advance",
    "start_assessment",
    "current_question",
]
