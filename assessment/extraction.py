"""
Answer extraction for the structured assessment.

Two strategies share one signature, `(message, question) -> ExtractedAnswer`:
1. extract_answer: deterministic keyword/regex rules (always available).
2. LLMAnswerExtractor: asks Gemini for structured JSON and falls back to
   the rules whenever the call or the parse fails.
"""

import os
import re
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import google.generativeai as genai

from models import (
    ExtractedAnswer,
    FunctionalImpact,
    Question,
    SymptomDuration,
    SymptomFrequency
)
from .questions import GAD_ITEMS, PHQ_ITEMS

logger = logging.getLogger(__name__)

DEFAULT_EXTRACTION_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")

# Most specific phrasing first; negated frequencies ("not every day") before their positive forms
FREQUENCY_PHRASES: List[Tuple[str, SymptomFrequency]] = [
    (r"\bnot (?:that |very |so )?(?:nearly |almost )?(?:every ?day|daily|all the time|constantly|often|most days)\b",
     SymptomFrequency.SEVERAL_DAYS),
    (r"\b(?:nearly every day|almost every day|every day|everyday|daily|all the time|constantly)\b", SymptomFrequency.NEARLY_EVERY_DAY),
    (r"\b(?:more than half|most days|most of the time|often)\b", SymptomFrequency.MORE_THAN_HALF),
    (r"\b(?:several days|a few days|some days|sometimes|occasionally)\b", SymptomFrequency.SEVERAL_DAYS),
    (r"\b(?:not at all|never|none)\b", SymptomFrequency.NOT_AT_ALL),
]

IMPACT_PHRASES: List[Tuple[str, FunctionalImpact]] = [
    (r"extreme", FunctionalImpact.EXTREMELY),
    (r"very much|a lot|severely|significantly", FunctionalImpact.VERY_MUCH),
    (r"not at all|no impact|hasn't affected|has not affected", FunctionalImpact.NOT_AT_ALL),
    (r"somewhat|a little|a bit|some", FunctionalImpact.SOMEWHAT),
]

DURATION_PHRASES: List[Tuple[str, SymptomDuration]] = [
    (r"less than (?:2|two) weeks|a few days|(?:one|1|a) week\b", SymptomDuration.LESS_THAN_2_WEEKS),
    (r"(?:2|two)\s*(?:-|to)\s*(?:4|four) weeks|(?:2|two|3|three) weeks|a month\b", SymptomDuration.WEEKS_2_TO_4),
    (r"(?:1|one)\s*(?:-|to)\s*(?:3|three) months|(?:2|two) months|a couple (?:of )?months", SymptomDuration.MONTHS_1_TO_3),
    (r"more than (?:3|three) months|(?:4|5|6|four|five|six|several|many) months|years?\b", SymptomDuration.MORE_THAN_3_MONTHS),
]

# Keyword -> issue label, used when no LLM summary is available
ISSUE_KEYWORDS: List[Tuple[str, str]] = [
    (r"sleep", "sleep problems"),
    (r"eat|appetite|food", "appetite changes"),
    (r"anxious|anxiety|worr|nervous|panic", "anxiety"),
    (r"sad|cry|crying|depress|hopeless", "emotional distress"),
    (r"alone|withdraw|isolat|no friends", "social withdrawal"),
    (r"school|grades|homework", "school-related stress"),
    (r"angry|anger|tantrum|irritab|aggress", "anger or irritability"),
    (r"focus|concentrat|attention", "attention difficulties"),
]

YES_PATTERN = re.compile(r"\b(yes|yeah|yep|yup)\b")
NO_PATTERN = re.compile(r"\b(no|nope|never|not)\b")


def _first_phrase(text: str, phrases: List[Tuple[str, Any]]) -> Optional[Any]:
    for pattern, value in phrases:
        if re.search(pattern, text):
            return value
    return None


def extract_answer(message: str, question: Question) -> ExtractedAnswer:
    """
    Rule-based extraction. Unrecognised replies are kept verbatim.
    """
    raw = (message or "").strip()
    lower = raw.lower()

    if question.field == "child_age":
        match = re.search(r"\d+", raw)
        return ExtractedAnswer(value=int(match.group(0)) if match else raw)

    if question.field == "initial_concerns":
        issues = []
        for pattern, label in ISSUE_KEYWORDS:
            if re.search(pattern, lower) and label not in issues:
                issues.append(label)
        return ExtractedAnswer(value=raw, extracted_issues=issues)

    if question.field in ("depression_symptoms", "anxiety_symptoms"):
        # Free text rarely separates items; the strongest stated frequency applies to all
        frequency = _first_phrase(lower, FREQUENCY_PHRASES) or SymptomFrequency.NOT_AT_ALL
        items = PHQ_ITEMS if question.field == "depression_symptoms" else GAD_ITEMS
        scored = {item: frequency for item in items}
        if question.field == "depression_symptoms":
            return ExtractedAnswer(value=raw, phq_items=scored)
        return ExtractedAnswer(value=raw, gad_items=scored)

    if question.field == "functional_impact":
        return ExtractedAnswer(value=_first_phrase(lower, IMPACT_PHRASES) or raw)

    if question.field == "duration":
        return ExtractedAnswer(value=_first_phrase(lower, DURATION_PHRASES) or raw)

    if question.critical:
        if YES_PATTERN.search(lower):
            return ExtractedAnswer(value="yes", crisis_detected=True)
        if NO_PATTERN.search(lower):
            return ExtractedAnswer(value="no")
        return ExtractedAnswer(value=raw)

    return ExtractedAnswer(value=raw)


# --- LLM extraction ---

FREQUENCY_CHOICES = " | ".join(f'"{f.value}"' for f in SymptomFrequency)

EXTRACTION_PROMPTS: Dict[str, str] = {
    "initial_concerns": """
        Extract specific mental health issues/concerns from this parent's description of their child: "{message}"
        Return a JSON object: {{"issues": ["issue1", "issue2"], "summary": "brief summary"}}
        Example: "she's been very anxious about school and cries a lot"
          -> {{"issues": ["anxiety", "school-related stress", "emotional distress"], "summary": "School-related anxiety with frequent crying"}}
        """,
    "depression_symptoms": """
        Extract depression symptom frequencies (past 2 weeks) from this response: "{message}"
        Symptoms: interest (little interest or pleasure), mood (feeling down or hopeless),
        sleep (trouble sleeping or sleeping too much), energy (tired, little energy).
        Return a JSON object: {{"interest": F, "mood": F, "sleep": F, "energy": F}}
        where F is one of: """ + FREQUENCY_CHOICES + """. Use "not_at_all" for symptoms not mentioned.
        """,
    "anxiety_symptoms": """
        Extract anxiety symptom frequencies (past 2 weeks) from this response: "{message}"
        Symptoms: anxiety (nervous, anxious, on edge), worry (cannot stop or control worrying),
        concentration (difficulty concentrating).
        Return a JSON object: {{"anxiety": F, "worry": F, "concentration": F}}
        where F is one of: """ + FREQUENCY_CHOICES + """. Use "not_at_all" for symptoms not mentioned.
        """,
    "functional_impact": """
        Extract the functional impact level from: "{message}"
        Return a JSON object: {{"value": V}} where V is one of:
        """ + " | ".join(f'"{f.value}"' for f in FunctionalImpact) + """
        """,
    "duration": """
        Extract how long the concerns have been present from: "{message}"
        Return a JSON object: {{"value": V}} where V is one of:
        """ + " | ".join(f'"{d.value}"' for d in SymptomDuration) + """
        """,
    "crisis_indicators": """
        Determine if this response indicates crisis (self-harm, suicide, violence): "{message}"
        Return a JSON object: {{"crisis_detected": true | false, "indicators": ["indicator1"]}}
        """,
}


def parse_json_object(raw_text: str) -> Optional[Dict[str, Any]]:
    """
    Handles Markdown fences and stray prose around the JSON object.
    """
    if not raw_text:
        return None

    clean_text = re.sub(r"```json\s*|\s*```", "", raw_text).strip()
    try:
        data = json.loads(clean_text)
    except json.JSONDecodeError:
        match = re.search(r"(\{.*\})", clean_text, re.DOTALL)
        if not match:
            return None
        try:
            data = json.loads(match.group(1))
        except json.JSONDecodeError:
            return None

    return data if isinstance(data, dict) else None


class LLMAnswerExtractor:
    """Callable extractor backed by Gemini, with rule-based fallback."""

    def __init__(self, api_key: str | None = None, model_name: str = DEFAULT_EXTRACTION_MODEL, model=None):
        if model is None:
            self.api_key = api_key or os.environ.get("GOOGLE_API_KEY")
            if not self.api_key:
                raise ValueError("GOOGLE_API_KEY not found. Please set it in environment.")
            genai.configure(api_key=self.api_key)
            model = genai.GenerativeModel(model_name)
        self.model = model

    def __call__(self, message: str, question: Question) -> ExtractedAnswer:
        if not question.use_llm_extraction or question.field not in EXTRACTION_PROMPTS:
            return extract_answer(message, question)

        try:
            answer = self._extract(message, question)
        except Exception as e:
            logger.error(f"LLM extraction error for {question.field}: {e}")
            answer = None

        if answer is None:
            logger.warning(f"Falling back to rule extraction for {question.field}")
            return extract_answer(message, question)
        return answer

    def _extract(self, message: str, question: Question) -> Optional[ExtractedAnswer]:
        prompt = EXTRACTION_PROMPTS[question.field].format(message=message.replace('"', "'"))
        generation_config = genai.GenerationConfig(
            response_mime_type="application/json",
            max_output_tokens=200,
            temperature=0.1
        )
        response = self.model.generate_content(prompt, generation_config=generation_config)
        parsed = parse_json_object(response.text)
        if parsed is None:
            return None

        if question.field == "initial_concerns":
            issues = [str(i) for i in parsed.get("issues") or [] if i]
            return ExtractedAnswer(value=parsed.get("summary") or message, extracted_issues=issues)

        if question.field == "depression_symptoms":
            return ExtractedAnswer(value=message, phq_items=self._frequencies(parsed, PHQ_ITEMS))

        if question.field == "anxiety_symptoms":
            return ExtractedAnswer(value=message, gad_items=self._frequencies(parsed, GAD_ITEMS))

        if question.field == "functional_impact":
            return ExtractedAnswer(value=FunctionalImpact(parsed.get("value")))

        if question.field == "duration":
            return ExtractedAnswer(value=SymptomDuration(parsed.get("value")))

        # crisis_indicators
        detected = bool(parsed.get("crisis_detected"))
        return ExtractedAnswer(value="yes" if detected else "no", crisis_detected=detected)

    @staticmethod
    def _frequencies(parsed: Dict[str, Any], items: List[str]) -> Dict[str, SymptomFrequency]:
        result = {}
        for item in items:
            try:
                result[item] = SymptomFrequency(parsed.get(item) or SymptomFrequency.NOT_AT_ALL.value)
            except ValueError:
                result[item] = SymptomFrequency.NOT_AT_ALL
        return result
