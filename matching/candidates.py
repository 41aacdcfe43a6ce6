"""
Candidate narrowing by insurance network.
"""

from typing import Iterable, List, Mapping, Optional


def filter_by_insurance(
    clinician_ids: Optional[Iterable[str]],
    clinician_insurance_index: Optional[Mapping[str, Iterable[str]]],
    insurance_id: Optional[str]
) -> List[str]:
    """
    Keep the clinicians whose indexed insurances contain insurance_id.

    Input order is preserved. A clinician missing from the index accepts
    no insurance. Any missing argument yields an empty list.
    """
    if not clinician_ids or not clinician_insurance_index or not insurance_id:
        return []

    return [
        cid for cid in clinician_ids
        if insurance_id in set(clinician_insurance_index.get(cid) or ())
    ]
