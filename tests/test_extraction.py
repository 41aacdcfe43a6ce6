"""
Tests for rule-based and LLM-backed answer extraction.
"""

from unittest.mock import MagicMock

import pytest

from assessment import QUESTION_BY_PHASE, LLMAnswerExtractor, extract_answer
from assessment.extraction import parse_json_object
from models import AssessmentPhase, FunctionalImpact, SymptomDuration, SymptomFrequency

AGE = QUESTION_BY_PHASE[AssessmentPhase.QUESTION_1_AGE]
CONCERNS = QUESTION_BY_PHASE[AssessmentPhase.QUESTION_2_CONCERNS]
DEPRESSION = QUESTION_BY_PHASE[AssessmentPhase.QUESTION_3_DEPRESSION]
ANXIETY = QUESTION_BY_PHASE[AssessmentPhase.QUESTION_4_ANXIETY]
IMPACT = QUESTION_BY_PHASE[AssessmentPhase.QUESTION_5_FUNCTIONAL]
DURATION = QUESTION_BY_PHASE[AssessmentPhase.QUESTION_6_DURATION]
CRISIS = QUESTION_BY_PHASE[AssessmentPhase.QUESTION_7_CRISIS]


def model_returning(text):
    model = MagicMock()
    model.generate_content.return_value = MagicMock(text=text)
    return model


class TestRuleExtraction:

    @pytest.mark.parametrize("message,expected", [("14", 14), ("He is 7 years old", 7), ("fourteen", "fourteen")])
    def test_age(self, message, expected):
        assert extract_answer(message, AGE).value == expected

    def test_concern_keywords(self):
        answer = extract_answer("He can't sleep and stays alone in his room", CONCERNS)
        assert answer.extracted_issues == ["sleep problems", "social withdrawal"]

    def test_strongest_frequency_applies_to_all_items(self):
        answer = extract_answer("Sometimes sad, but tired every day", DEPRESSION)
        assert set(answer.phq_items) == {"interest", "mood", "sleep", "energy"}
        assert set(answer.phq_items.values()) == {SymptomFrequency.NEARLY_EVERY_DAY}
        assert answer.gad_items == {}

    @pytest.mark.parametrize("message", ["not every day, maybe sometimes", "Not daily", "not that often"])
    def test_negated_frequency_is_not_nearly_every_day(self, message):
        answer = extract_answer(message, DEPRESSION)
        assert set(answer.phq_items.values()) == {SymptomFrequency.SEVERAL_DAYS}

    def test_frequency_words_must_stand_alone(self):
        # "softened" must not read as "often"
        answer = extract_answer("Her mood has softened, it happens some days", ANXIETY)
        assert set(answer.gad_items.values()) == {SymptomFrequency.SEVERAL_DAYS}

    def test_unstated_frequency_scores_zero(self):
        answer = extract_answer("Hard to say really", ANXIETY)
        assert answer.gad_items == {item: SymptomFrequency.NOT_AT_ALL for item in ("anxiety", "worry", "concentration")}

    @pytest.mark.parametrize("message,expected", [
        ("Extremely, she won't go to school", FunctionalImpact.EXTREMELY),
        ("quite a lot", FunctionalImpact.VERY_MUCH),
        ("somewhat", FunctionalImpact.SOMEWHAT),
        ("hard to tell", "hard to tell"),
    ])
    def test_functional_impact(self, message, expected):
        assert extract_answer(message, IMPACT).value == expected

    @pytest.mark.parametrize("message,expected", [
        ("about a week", SymptomDuration.LESS_THAN_2_WEEKS),
        ("3 weeks", SymptomDuration.WEEKS_2_TO_4),
        ("a couple of months", SymptomDuration.MONTHS_1_TO_3),
        ("over a year now", SymptomDuration.MORE_THAN_3_MONTHS),
    ])
    def test_duration(self, message, expected):
        assert extract_answer(message, DURATION).value == expected

    @pytest.mark.parametrize("message,value,crisis", [
        ("Yes", "yes", True),
        ("yeah, once last spring", "yes", True),
        ("No, never", "no", False),
        ("I'm not sure", "no", False),
        ("Maybe?", "Maybe?", False),
    ])
    def test_safety_question(self, message, value, crisis):
        answer = extract_answer(message, CRISIS)
        assert answer.value == value
        assert answer.crisis_detected is crisis


class TestParseJsonObject:

    def test_fenced(self):
        assert parse_json_object('```json\n{"value": "somewhat"}\n```') == {"value": "somewhat"}

    def test_wrapped_in_prose(self):
        assert parse_json_object('Here you go: {"value": "extremely"} hope that helps') == {"value": "extremely"}

    @pytest.mark.parametrize("raw", ["", None, "no json here", "[1, 2]", "{broken"])
    def test_unusable(self, raw):
        assert parse_json_object(raw) is None


class TestLLMAnswerExtractor:

    def test_depression_frequencies(self):
        model = model_returning('```json\n{"interest": "nearly_every_day", "mood": "several_days", "sleep": "bogus"}\n```')
        answer = LLMAnswerExtractor(model=model)("He's lost interest in everything", DEPRESSION)

        assert answer.phq_items == {
            "interest": SymptomFrequency.NEARLY_EVERY_DAY,
            "mood": SymptomFrequency.SEVERAL_DAYS,
            "sleep": SymptomFrequency.NOT_AT_ALL,
            "energy": SymptomFrequency.NOT_AT_ALL,
        }
        prompt = model.generate_content.call_args[0][0]
        assert "He's lost interest in everything" in prompt

    def test_concerns_summary_and_issues(self):
        model = model_returning('{"issues": ["anxiety", "school-related stress"], "summary": "Anxious about school"}')
        answer = LLMAnswerExtractor(model=model)("she is scared to go to class", CONCERNS)
        assert answer.value == "Anxious about school"
        assert answer.extracted_issues == ["anxiety", "school-related stress"]

    def test_crisis_flag(self):
        model = model_returning('{"crisis_detected": true, "indicators": ["self-harm"]}')
        answer = LLMAnswerExtractor(model=model)("she has scratched her arms before", CRISIS)
        assert answer.value == "yes"
        assert answer.crisis_detected

    def test_invalid_enum_falls_back_to_rules(self):
        model = model_returning('{"value": "huge"}')
        answer = LLMAnswerExtractor(model=model)("very much", IMPACT)
        assert answer.value == FunctionalImpact.VERY_MUCH

    def test_unparseable_reply_falls_back_to_rules(self):
        answer = LLMAnswerExtractor(model=model_returning("I cannot help with that"))("6 months", DURATION)
        assert answer.value == SymptomDuration.MORE_THAN_3_MONTHS

    def test_api_error_falls_back_to_rules(self):
        model = MagicMock()
        model.generate_content.side_effect = RuntimeError("503 service unavailable")
        answer = LLMAnswerExtractor(model=model)("Yes", CRISIS)
        assert answer.crisis_detected

    def test_rule_only_questions_skip_the_model(self):
        model = model_returning("{}")
        answer = LLMAnswerExtractor(model=model)("8", AGE)
        assert answer.value == 8
        model.generate_content.assert_not_called()

    def test_requires_api_key_without_model(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        with pytest.raises(ValueError):
            LLMAnswerExtractor()
