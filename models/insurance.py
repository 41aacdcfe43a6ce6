"""
Insurance data models for the Intake Matcher.

Covers the three stages of insurance verification:
1. Card scanning (InsuranceCardData, ScanResult)
2. Format validation (ValidationOutcome)
3. Cost estimation (Coverage, CostBreakdown, AnnualCostEstimate)
"""

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class InsuranceCardData(BaseModel):
    """Fields recognised on an insurance card. Any field may be missing."""
    member_id: Optional[str] = None
    group_number: Optional[str] = None
    provider: Optional[str] = Field(default=None, description="Canonical provider name")
    plan_name: Optional[str] = None

    confidence: float = Field(default=0.3, ge=0.0, le=1.0, description="Heuristic extraction confidence")
    full_text: str = Field(default="", description="Raw recognised text")
    image_url: Optional[str] = None

    @property
    def fields_found(self) -> int:
        return sum(1 for v in (self.member_id, self.group_number, self.provider, self.plan_name) if v)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "member_id": "W123456789",
            "group_number": "0123456-10-001",
            "provider": "Aetna",
            "plan_name": "OPEN ACCESS MANAGED CHOICE",
            "confidence": 0.9
        }
    })


class ScanResult(BaseModel):
    """Structured outcome of a card scan."""
    success: bool
    data: Optional[InsuranceCardData] = None
    error: Optional[str] = None


class ValidationOutcome(BaseModel):
    valid: bool
    error: Optional[str] = None


class Coverage(BaseModel):
    """Benefit details for a verified plan. All amounts in USD."""
    copay: float = Field(default=0.0, ge=0)
    deductible: float = Field(default=0.0, ge=0)
    deductible_used: float = Field(default=0.0, ge=0)
    coverage_percent: float = Field(default=0.0, ge=0, le=100, description="Share paid by the plan after deductible")
    out_of_pocket_max: float = Field(default=0.0, ge=0)
    out_of_pocket_used: float = Field(default=0.0, ge=0)

    @property
    def deductible_remaining(self) -> float:
        return max(0.0, self.deductible - self.deductible_used)


class CostBreakdown(BaseModel):
    session_cost: float
    out_of_pocket: float
    insurance_pays: float
    copay: float = 0.0
    deductible_remaining: float = 0.0
    out_of_pocket_max: float = 0.0
    message: str


class AnnualCostEstimate(BaseModel):
    sessions_per_year: int
    total_cost: float
    total_out_of_pocket: float
    total_insurance_pays: float
    average_per_session: float
    first_session: CostBreakdown
    subsequent_session: CostBreakdown
