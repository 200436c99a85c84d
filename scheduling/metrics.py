from __future__ import annotations
import math
from datetime import datetime
from typing import Any, NamedTuple, Optional

from .calendar import as_utc
from .lifecycle import ShiftStatus


class ShiftMetrics(NamedTuple):
    duration_hours: float
    cost: float
    hourly_wage: float
    # bounds missing, unparseable or end <= start; the caller should ask for a fix
    malformed: bool = False

    @property
    def minutes(self) -> float:
        return self.duration_hours * 60


def parse_instant(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, str) and value:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def _number(value: Any) -> float:
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0.0
    return n if math.isfinite(n) else 0.0


def compute_metrics(shift: Any) -> ShiftMetrics:
    """
    Paid hours and labor cost of one shift.

    Works on anything exposing ``start_at``, ``end_at``, ``break_minutes``,
    ``hourly_wage`` and ``status`` (engine shifts, ORM rows, test doubles).
    Never raises: cancelled shifts and malformed bounds cost nothing.
    """
    wage = max(0.0, _number(getattr(shift, "hourly_wage", 0)))

    if getattr(shift, "status", None) == ShiftStatus.cancelled:
        return ShiftMetrics(0.0, 0.0, wage)

    start = parse_instant(getattr(shift, "start_at", None))
    end = parse_instant(getattr(shift, "end_at", None))
    if start is None or end is None or end <= start:
        return ShiftMetrics(0.0, 0.0, wage, malformed=True)

    raw_minutes = (end - start).total_seconds() / 60
    break_minutes = max(0.0, _number(getattr(shift, "break_minutes", 0)))
    net_minutes = max(0.0, raw_minutes - break_minutes)
    duration_hours = net_minutes / 60

    return ShiftMetrics(duration_hours, duration_hours * wage, wage)


def is_cancelled(shift: Any) -> bool:
    return getattr(shift, "status", None) == ShiftStatus.cancelled
