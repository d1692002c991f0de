# beautybook/services/slots/slot_generator.py
"""
Candidate slot generation.

Pure functions only: no database, no clock. Given an operating window and a
service duration they always return the same ordered list.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple

Interval = Tuple[datetime, datetime]


@dataclass
class Slot:
    """A bookable start time and the end of the service that would start there"""
    start: datetime
    end: datetime
    available: bool = True

    @property
    def time(self) -> str:
        return self.start.strftime("%H:%M")

    def to_dict(self) -> dict:
        return {"time": self.time, "available": self.available}


def generate_slots(
        window_start: datetime,
        window_end: datetime,
        duration_minutes: int,
        interval_minutes: int = 30
) -> List[Slot]:
    """
    Step through the window every ``interval_minutes`` and keep each start
    whose service would finish by ``window_end``.

    A slot never runs past closing, even partially.
    """
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")

    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=interval_minutes)

    slots = []
    current = window_start
    while current < window_end:
        slot_end = current + duration
        if slot_end > window_end:
            # Later starts only end later
            break
        slots.append(Slot(start=current, end=slot_end))
        current += step

    return slots


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval overlap: touching endpoints do not conflict"""
    return a_start < b_end and b_start < a_end


def mark_unavailable(
        slots: Sequence[Slot],
        busy: Iterable[Interval],
        not_before: Optional[datetime] = None
) -> List[Slot]:
    """
    Flag slots that overlap any busy interval or start before ``not_before``.

    Returns the same slot objects, in order, with ``available`` updated.
    """
    busy = list(busy)
    for slot in slots:
        if not_before is not None and slot.start < not_before:
            slot.available = False
            continue
        slot.available = not any(
            overlaps(slot.start, slot.end, busy_start, busy_end)
            for busy_start, busy_end in busy
        )
    return list(slots)
