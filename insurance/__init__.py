from .card_extractor import extract_insurance_data, normalize_card_text
from .ocr import CardScanner
from .validators import validate_member_id, validate_group_number
from .cost import calculate_session_cost, calculate_annual_cost

__all__ = [
    "extract_insurance_data",
    "normalize_card_text",
    "CardScanner",
    "validate_member_id",
    "validate_group_number",
    "calculate_session_cost",
    "calculate_annual_cost",
]
