"""
Insurance card field extraction from OCR text.

Each field has an ordered list of independent rules. A rule is a pure
function `text -> Optional[str]`; the first rule that returns a value wins.
Fields never depend on one another, so a card that is missing its group
number still yields a member id.
"""

import re
from typing import Callable, Dict, List, Optional, Pattern, Tuple

from models import InsuranceCardData

Rule = Callable[[str], Optional[str]]

LOW_CONFIDENCE = 0.3
BASE_CONFIDENCE = 0.5
CONFIDENCE_PER_FIELD = 0.1
MAX_CONFIDENCE = 0.9


def normalize_card_text(text: Optional[str]) -> str:
    """Uppercase and collapse runs of spaces/tabs. Line breaks are kept."""
    if not text:
        return ""
    lines = [re.sub(r"[ \t\r\f\v]+", " ", line).strip() for line in text.upper().split("\n")]
    return "\n".join(line for line in lines if line)


def regex_rule(pattern: str) -> Rule:
    """Build a rule returning the first capture group of `pattern`."""
    compiled: Pattern = re.compile(pattern)

    def rule(text: str) -> Optional[str]:
        match = compiled.search(text)
        if match and match.group(1):
            value = match.group(1).strip(" -")
            return value or None
        return None

    return rule


def keyword_rule(pattern: str, canonical: str) -> Rule:
    """Build a rule returning `canonical` whenever `pattern` appears."""
    compiled = re.compile(pattern)

    def rule(text: str) -> Optional[str]:
        return canonical if compiled.search(text) else None

    return rule


MEMBER_ID_RULES: List[Rule] = [
    regex_rule(r"MEMBER\s*(?:ID|NUMBER|NO\.?)\s*[#:]?\s*([A-Z0-9-]+)"),
    regex_rule(r"\bID\s*[#:]?\s*([A-Z0-9-]{6,})"),
    regex_rule(r"MEMBER\s*#?[:\s]*([A-Z0-9-]+)"),
    regex_rule(r"SUBSCRIBER\s*ID[:\s]*([A-Z0-9-]+)"),
]

GROUP_NUMBER_RULES: List[Rule] = [
    regex_rule(r"GROUP\s*(?:NUMBER|NO\.?)\s*[#:]?\s*([A-Z0-9-]+)"),
    regex_rule(r"GROUP\s*#?[:\s]*([A-Z0-9-]*\d[A-Z0-9-]*)"),
    regex_rule(r"\bGRP\s*#?[:\s]*([A-Z0-9-]+)"),
    regex_rule(r"POLICY\s*GROUP[:\s]*([A-Z0-9-]+)"),
]

# Ordered by how often the plan appears on cards we receive
KNOWN_PROVIDERS: List[Tuple[str, str]] = [
    (r"AETNA", "Aetna"),
    (r"UNITED\s*HEALTH\s*CARE", "United Healthcare"),
    (r"BLUE\s*CROSS", "Blue Cross"),
    (r"CIGNA", "Cigna"),
    (r"ANTHEM", "Anthem"),
    (r"MOLINA", "Molina"),
    (r"MEDICARE", "Medicare"),
    (r"MEDICAID", "Medicaid"),
]

PROVIDER_RULES: List[Rule] = [keyword_rule(p, name) for p, name in KNOWN_PROVIDERS]

PLAN_NAME_RULES: List[Rule] = [
    regex_rule(r"PLAN\s*NAME[ \t]*:?[ \t]*([A-Z0-9][A-Z0-9 -]*)"),
    regex_rule(r"\bPLAN[ \t]*:[ \t]*([A-Z0-9][A-Z0-9 -]*)"),
]

FIELD_RULES: Dict[str, List[Rule]] = {
    "member_id": MEMBER_ID_RULES,
    "group_number": GROUP_NUMBER_RULES,
    "provider": PROVIDER_RULES,
    "plan_name": PLAN_NAME_RULES,
}


def first_match(rules: List[Rule], text: str) -> Optional[str]:
    for rule in rules:
        value = rule(text)
        if value:
            return value
    return None


def estimate_confidence(fields_found: int) -> float:
    if fields_found <= 0:
        return LOW_CONFIDENCE
    return min(MAX_CONFIDENCE, round(BASE_CONFIDENCE + fields_found * CONFIDENCE_PER_FIELD, 2))


def extract_insurance_data(text: Optional[str]) -> InsuranceCardData:
    """
    Pull member id, group number, provider and plan name out of raw card text.
    Never raises; an unreadable card comes back with every field empty
    and low confidence.
    """
    normalized = normalize_card_text(text)
    fields = {name: first_match(rules, normalized) for name, rules in FIELD_RULES.items()}
    found = sum(1 for v in fields.values() if v)

    return InsuranceCardData(
        **fields,
        confidence=estimate_confidence(found),
        full_text=text or ""
    )
