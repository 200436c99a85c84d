from __future__ import annotations
import math
import unicodedata
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Iterable, Mapping, NamedTuple, Optional, Union

from .calendar import ZoneLike, date_only
from .metrics import compute_metrics, is_cancelled

UNKNOWN_EMPLOYEE = "Employee"


@dataclass
class EmployeeCost:
    employee_id: int
    name: str
    total_hours: float = 0.0
    total_cost: float = 0.0
    shift_count: int = 0

    @property
    def total_minutes(self) -> float:
        return self.total_hours * 60


class BudgetState(str, Enum):
    no_shifts = "no_shifts"
    not_set = "not_set"
    no_limit = "no_limit"
    remaining = "remaining"
    exceeded = "exceeded"


class BudgetStatus(NamedTuple):
    state: BudgetState
    amount: float = 0.0


@dataclass
class WeekSummary:
    breakdown: list[EmployeeCost]
    total_cost: float
    total_hours: float
    shift_count: int
    day_totals: dict[date, float] = field(default_factory=dict)
    budget: BudgetStatus = BudgetStatus(BudgetState.no_shifts)

    @property
    def top_contributor(self) -> Optional[EmployeeCost]:
        return top_contributor(self.breakdown)


def collation_key(name: str) -> str:
    """Accent- and case-insensitive sort key, independent of the process locale."""
    decomposed = unicodedata.normalize("NFKD", name)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _rank(row: EmployeeCost) -> tuple:
    # cost desc, minutes desc, name asc; raw name and id settle the rest
    return (-row.total_cost, -row.total_minutes, collation_key(row.name), row.name, str(row.employee_id))


def _names(employees: Union[Mapping[int, str], Iterable[Any], None]) -> dict[int, str]:
    if employees is None:
        return {}
    if isinstance(employees, Mapping):
        return dict(employees)
    return {e.id: e.full_name for e in employees}


def per_employee_breakdown(
    shifts: Iterable[Any],
    employees: Union[Mapping[int, str], Iterable[Any], None] = None,
) -> list[EmployeeCost]:
    names = _names(employees)
    rows: dict[int, EmployeeCost] = {}
    for shift in shifts:
        if is_cancelled(shift):
            continue
        m = compute_metrics(shift)
        row = rows.get(shift.employee_id)
        if row is None:
            row = rows[shift.employee_id] = EmployeeCost(
                shift.employee_id, names.get(shift.employee_id, UNKNOWN_EMPLOYEE)
            )
        row.total_hours += m.duration_hours
        row.total_cost += m.cost
        row.shift_count += 1
    return sorted(rows.values(), key=_rank)


def week_total(shifts: Iterable[Any]) -> float:
    return sum(compute_metrics(s).cost for s in shifts if not is_cancelled(s))


def day_cost_totals(shifts: Iterable[Any], zone: ZoneLike) -> dict[date, float]:
    totals: dict[date, float] = defaultdict(float)
    for shift in shifts:
        if is_cancelled(shift):
            continue
        m = compute_metrics(shift)
        if m.malformed:
            continue
        totals[date_only(shift.start_at, zone)] += m.cost
    return dict(totals)


def top_contributor(breakdown: list[EmployeeCost]) -> Optional[EmployeeCost]:
    return breakdown[0] if breakdown else None


def normalize_budget_limit(value: Any) -> Optional[float]:
    """Blank, non-numeric or negative limits mean "not set"."""
    if value is None or value == "":
        return None
    try:
        n = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(n) or n < 0:
        return None
    return n


def budget_status(total: float, limit: Optional[float], *, shift_count: int) -> BudgetStatus:
    if shift_count == 0:
        return BudgetStatus(BudgetState.no_shifts)
    if limit is None:
        return BudgetStatus(BudgetState.not_set)
    if limit <= 0:
        return BudgetStatus(BudgetState.no_limit)
    left = limit - total
    if left >= 0:
        return BudgetStatus(BudgetState.remaining, left)
    return BudgetStatus(BudgetState.exceeded, total - limit)


def summarize_week(
    shifts: Iterable[Any],
    employees: Union[Mapping[int, str], Iterable[Any], None],
    zone: ZoneLike,
    budget_limit: Optional[float],
) -> WeekSummary:
    shifts = list(shifts)
    breakdown = per_employee_breakdown(shifts, employees)
    total = week_total(shifts)
    return WeekSummary(
        breakdown=breakdown,
        total_cost=total,
        total_hours=sum(row.total_hours for row in breakdown),
        shift_count=len(shifts),
        day_totals=day_cost_totals(shifts, zone),
        budget=budget_status(total, budget_limit, shift_count=len(shifts)),
    )
