"""
Hours and labor cost over an arbitrary range of days.

A shift belongs to the local day its start falls on, in its location's
timezone. Cancelled shifts are left out; malformed ones count as zero.
"""
from __future__ import annotations
import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from employee.models import Employee
from location.models import Location
from location.service import get_location_for_org
from scheduling.aggregator import collation_key, per_employee_breakdown
from scheduling.calendar import date_only
from scheduling.metrics import compute_metrics, is_cancelled
from shift.models import Shift
from shift.service import get_shifts
from .schema import EmployeeHours, HoursCostReport, LocationHours, ReportTotals

logger = logging.getLogger(__name__)

MAX_RANGE_DAYS = 366
# widest UTC offset in the tz database, both directions
_ZONE_SLACK = timedelta(hours=14)


def _utc_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    lo = datetime.combine(start, time.min, tzinfo=timezone.utc) - _ZONE_SLACK
    hi = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc) + _ZONE_SLACK
    return lo, hi


def hours_cost_report(
    db: Session,
    *,
    org_id: int,
    start: date,
    end: date,
    location_id: Optional[int] = None,
) -> HoursCostReport:
    if end < start:
        raise HTTPException(status_code=422, detail="'to' must be on or after 'from'")
    if (end - start).days >= MAX_RANGE_DAYS:
        raise HTTPException(status_code=422, detail=f"range is limited to {MAX_RANGE_DAYS} days")
    if location_id is not None and not get_location_for_org(db, location_id, org_id):
        raise HTTPException(status_code=404, detail="Location not found")

    locations = {
        loc.id: loc
        for loc in db.scalars(select(Location).where(Location.org_id == org_id))
    }
    lo, hi = _utc_bounds(start, end)
    candidates = get_shifts(db, org_id=org_id, location_id=location_id, start=lo, end=hi)
    shifts: list[Shift] = [
        s for s in candidates
        if not is_cancelled(s) and start <= date_only(s.start_at, locations[s.location_id].timezone) <= end
    ]

    names = {
        e.id: e.full_name
        for e in db.scalars(select(Employee).where(Employee.org_id == org_id))
    }
    per_employee = [
        EmployeeHours(
            employee_id=row.employee_id,
            full_name=row.name,
            total_hours=row.total_hours,
            total_cost=row.total_cost,
            shift_count=row.shift_count,
        )
        for row in per_employee_breakdown(shifts, names)
    ]

    by_location: dict[int, LocationHours] = {}
    for shift in shifts:
        m = compute_metrics(shift)
        row = by_location.get(shift.location_id)
        if row is None:
            row = by_location[shift.location_id] = LocationHours(
                location_id=shift.location_id, name=locations[shift.location_id].name
            )
        row.total_hours += m.duration_hours
        row.total_cost += m.cost
        row.shift_count += 1
    per_location = sorted(
        by_location.values(), key=lambda r: (-r.total_cost, collation_key(r.name), r.location_id)
    )

    totals = ReportTotals(
        total_hours=sum(r.total_hours for r in per_location),
        total_cost=sum(r.total_cost for r in per_location),
        shift_count=len(shifts),
    )
    logger.debug(f"Report for org {org_id} {start}..{end}: {len(shifts)} shift(s)")
    return HoursCostReport(
        from_=start,
        to=end,
        location_id=location_id,
        totals=totals,
        per_employee=per_employee,
        per_location=per_location,
    )
