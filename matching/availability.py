"""
Availability Filtering Logic.

This module answers the question: "Which of these slots can a patient book?"
A slot qualifies when it starts inside the requested window, lies in the
future and has not been booked. Malformed records are dropped, never raised.
"""

import logging
from collections import OrderedDict
from datetime import date as date_type, datetime, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from models import AvailabilitySlot

logger = logging.getLogger(__name__)

SlotRecord = Union[AvailabilitySlot, Dict[str, Any]]


def as_utc_if_naive(moment: Optional[datetime]) -> Optional[datetime]:
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def coerce_slots(records: Optional[Iterable[SlotRecord]]) -> List[AvailabilitySlot]:
    """
    Validate raw slot records, skipping any that cannot be parsed
    (missing fields, unparseable or naive timestamps, end before start).
    """
    if not records:
        return []

    slots = []
    for i, record in enumerate(records):
        if isinstance(record, AvailabilitySlot):
            slots.append(record)
            continue
        try:
            slots.append(AvailabilitySlot.model_validate(record))
        except (ValidationError, TypeError) as e:
            logger.warning(f"Skipping malformed slot record {i}: {e}")
    return slots


def sort_slots(slots: Iterable[AvailabilitySlot]) -> List[AvailabilitySlot]:
    """Chronological order; ties broken by slot id so the order is deterministic."""
    return sorted(slots, key=lambda s: (s.start_time, s.id))


def filter_available_slots(
    records: Optional[Iterable[SlotRecord]],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    now: Optional[datetime] = None
) -> List[AvailabilitySlot]:
    """
    Bookable slots with start <= start_time <= end and start_time > now,
    sorted by (start_time, id). A missing bound leaves that side open.
    Naive bounds are read as UTC.
    """
    now = as_utc_if_naive(now) or datetime.now(timezone.utc)
    start = as_utc_if_naive(start)
    end = as_utc_if_naive(end)

    selected = []
    for slot in coerce_slots(records):
        if slot.is_booked:
            continue
        if slot.start_time <= now:
            continue
        if start is not None and slot.start_time < start:
            continue
        if end is not None and slot.start_time > end:
            continue
        selected.append(slot)

    return sort_slots(selected)


def group_slots_by_day(
    slots: Iterable[AvailabilitySlot],
    tz: Optional[tzinfo] = None
) -> "OrderedDict[date_type, List[AvailabilitySlot]]":
    """
    Bucket slots by calendar day for display.

    The day is taken in `tz` when given, otherwise in each slot's own offset.
    Days come out in ascending order, slots within a day chronologically.
    """
    grouped: "OrderedDict[date_type, List[AvailabilitySlot]]" = OrderedDict()
    for slot in sort_slots(slots):
        local_start = slot.start_time.astimezone(tz) if tz else slot.start_time
        grouped.setdefault(local_start.date(), []).append(slot)

    return OrderedDict(sorted(grouped.items(), key=lambda item: item[0]))
