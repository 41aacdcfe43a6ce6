"""
Out-of-pocket cost estimation for therapy sessions.

Cost models are tried in order: flat copay, unmet deductible,
co-insurance percentage, then no coverage. The out-of-pocket maximum
is applied last and can only lower what the patient pays.
"""

from typing import Optional

from models import Coverage, CostBreakdown, AnnualCostEstimate

DEFAULT_SESSION_COST = 150.0
DEFAULT_SESSIONS_PER_YEAR = 12


def _cents(value: float) -> float:
    return round(value, 2)


def calculate_session_cost(coverage: Optional[Coverage], session_cost: float = DEFAULT_SESSION_COST) -> CostBreakdown:
    if coverage is None:
        return CostBreakdown(
            session_cost=session_cost,
            out_of_pocket=session_cost,
            insurance_pays=0.0,
            message="No coverage information available"
        )

    deductible_remaining = coverage.deductible_remaining

    if coverage.copay > 0:
        out_of_pocket = min(coverage.copay, session_cost)
        insurance_pays = session_cost - out_of_pocket
        message = f"You pay ${coverage.copay:g} copay per session"
    elif deductible_remaining > 0:
        out_of_pocket = min(session_cost, deductible_remaining)
        insurance_pays = 0.0
        message = f"Deductible not met. You pay full cost until ${coverage.deductible:g} deductible is met"
    elif coverage.coverage_percent > 0:
        insurance_pays = session_cost * coverage.coverage_percent / 100
        out_of_pocket = session_cost - insurance_pays
        message = f"Insurance covers {coverage.coverage_percent:g}% after deductible"
    else:
        out_of_pocket = session_cost
        insurance_pays = 0.0
        message = "Coverage details not available"

    if coverage.out_of_pocket_max > 0:
        remaining_oop = coverage.out_of_pocket_max - coverage.out_of_pocket_used
        if remaining_oop <= 0:
            out_of_pocket = 0.0
            insurance_pays = session_cost
            message = "Out-of-pocket maximum reached. Insurance covers 100%"
        elif out_of_pocket > remaining_oop:
            out_of_pocket = remaining_oop
            insurance_pays = session_cost - remaining_oop
            message = f"Out-of-pocket maximum nearly reached. You pay ${remaining_oop:g} this session"

    return CostBreakdown(
        session_cost=session_cost,
        out_of_pocket=_cents(out_of_pocket),
        insurance_pays=_cents(insurance_pays),
        copay=coverage.copay,
        deductible_remaining=deductible_remaining,
        out_of_pocket_max=coverage.out_of_pocket_max,
        message=message
    )


def calculate_annual_cost(
    coverage: Optional[Coverage],
    sessions_per_year: int = DEFAULT_SESSIONS_PER_YEAR,
    session_cost: float = DEFAULT_SESSION_COST
) -> AnnualCostEstimate:
    """
    Yearly estimate. The deductible is assumed met after the first session.
    """
    if sessions_per_year < 1:
        raise ValueError("sessions_per_year must be at least 1")

    first = calculate_session_cost(coverage, session_cost)
    if coverage is not None:
        subsequent = calculate_session_cost(
            coverage.model_copy(update={"deductible_used": coverage.deductible}),
            session_cost
        )
    else:
        subsequent = first

    total_cost = sessions_per_year * session_cost
    total_oop = first.out_of_pocket + subsequent.out_of_pocket * (sessions_per_year - 1)

    return AnnualCostEstimate(
        sessions_per_year=sessions_per_year,
        total_cost=_cents(total_cost),
        total_out_of_pocket=_cents(total_oop),
        total_insurance_pays=_cents(total_cost - total_oop),
        average_per_session=_cents(total_oop / sessions_per_year),
        first_session=first,
        subsequent_session=subsequent
    )
