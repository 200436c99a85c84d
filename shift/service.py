# shift/service.py
from __future__ import annotations
import logging
from datetime import date, datetime
from typing import Optional, Sequence
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from fastapi import HTTPException

from core.database import utcnow
from employee.service import check_refs, get_employee_for_org
from location.service import get_location_for_org
from scheduling.calendar import week_window
from scheduling.errors import TransitionError
from scheduling.lifecycle import (
    SCHEDULING_FIELDS,
    ShiftStatus,
    coerce_status,
    ensure_deletable,
    ensure_fields_mutable,
    ensure_transition,
)
from .models import Shift
from .schemas import ShiftPatch, ShiftUpsertItem

logger = logging.getLogger(__name__)


def get_shift_for_org(db: Session, shift_id: int, org_id: int) -> Optional[Shift]:
    stmt = select(Shift).where(Shift.id == shift_id, Shift.org_id == org_id)
    return db.scalars(stmt).first()

def get_shift_by_ref(db: Session, client_ref: str, org_id: int) -> Optional[Shift]:
    stmt = select(Shift).where(Shift.client_ref == client_ref, Shift.org_id == org_id)
    return db.scalars(stmt).first()

def get_shifts(
    db: Session,
    *,
    org_id: int,
    location_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> list[Shift]:
    """Shifts starting in ``[start, end)``."""
    stmt = select(Shift).where(Shift.org_id == org_id)
    if location_id is not None:
        stmt = stmt.where(Shift.location_id == location_id)
    if start is not None:
        stmt = stmt.where(Shift.start_at >= start)
    if end is not None:
        stmt = stmt.where(Shift.start_at < end)
    stmt = stmt.order_by(Shift.start_at, Shift.id)
    return list(db.scalars(stmt))

def get_week_shifts(db: Session, *, org_id: int, location_id: int, week_start: date) -> list[Shift]:
    location = get_location_for_org(db, location_id, org_id)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    start, end = week_window(week_start, location.timezone)
    return get_shifts(db, org_id=org_id, location_id=location_id, start=start, end=end)


def _check_refs(db: Session, org_id: int, values: dict) -> None:
    check_refs(db, org_id, location_id=values.get("location_id"), role_id=values.get("role_id"))
    employee_id = values.get("employee_id")
    if employee_id is not None and not get_employee_for_org(db, employee_id, org_id):
        raise HTTPException(status_code=422, detail="employee not found in this organization")

def _changed(row: Shift, values: dict) -> set[str]:
    return {k for k, v in values.items() if k in SCHEDULING_FIELDS and getattr(row, k) != v}

def _apply_status(row: Shift, target: Optional[ShiftStatus], reason: Optional[str]) -> None:
    """Move ``row`` to ``target`` and stamp the transition time. No-op when already there."""
    current = coerce_status(row.status)
    if target is None or target is current:
        return
    ensure_transition(row.id, current, target)
    row.status = target
    if target is ShiftStatus.closed:
        row.closed_at = utcnow()
    elif target is ShiftStatus.cancelled:
        row.cancelled_at = utcnow()
        row.cancel_reason = reason


def _upsert_one(db: Session, org_id: int, item: ShiftUpsertItem) -> Shift:
    values = item.model_dump(include=SCHEDULING_FIELDS)
    _check_refs(db, org_id, values)

    if item.id is not None:
        row = get_shift_for_org(db, item.id, org_id)
        if not row:
            raise HTTPException(status_code=404, detail=f"Shift {item.id} not found")
    elif item.client_ref is not None:
        row = get_shift_by_ref(db, item.client_ref, org_id)
    else:
        row = None

    if row is None:
        row = Shift(org_id=org_id, client_ref=item.client_ref, status=ShiftStatus.open, **values)
        db.add(row)
        db.flush()
        _apply_status(row, item.status, item.cancel_reason)
        return row

    # a re-sent identical payload for a locked shift is accepted unchanged
    ensure_fields_mutable(row.id, row.status, _changed(row, values))
    for k, v in values.items():
        setattr(row, k, v)
    _apply_status(row, item.status, item.cancel_reason)
    db.flush()
    return row

def bulk_upsert_shifts(db: Session, org_id: int, items: Sequence[ShiftUpsertItem]) -> list[Shift]:
    """Write the whole batch in one transaction; any rejected item rolls back all of it."""
    try:
        rows = [_upsert_one(db, org_id, item) for item in items]
        db.commit()
    except TransitionError as exc:
        db.rollback()
        logger.info(f"Bulk upsert rejected for org {org_id}: {exc}")
        raise HTTPException(status_code=409, detail=str(exc))
    except HTTPException:
        db.rollback()
        raise
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="conflicting shift write")
    for row in rows:
        db.refresh(row)
    logger.info(f"Upserted {len(rows)} shift(s) for org {org_id}")
    return rows


def patch_shift(db: Session, row: Shift, patch: ShiftPatch) -> Shift:
    data = patch.model_dump(exclude_unset=True)
    target = data.pop("status", None)
    reason = data.pop("cancel_reason", None)
    # scheduling fields are non-nullable apart from notes
    values = {k: v for k, v in data.items() if v is not None or k == "notes"}

    if reason is not None and target is not ShiftStatus.cancelled:
        raise HTTPException(status_code=422, detail="cancel_reason requires status 'cancelled'")

    new_start = values.get("start_at", row.start_at)
    new_end = values.get("end_at", row.end_at)
    if new_start >= new_end:
        raise HTTPException(status_code=422, detail="start_at must be before end_at")
    _check_refs(db, row.org_id, values)

    try:
        ensure_fields_mutable(row.id, row.status, _changed(row, values))
        for k, v in values.items():
            setattr(row, k, v)
        _apply_status(row, target, reason)
    except TransitionError as exc:
        db.rollback()
        logger.info(f"Patch of shift {row.id} rejected: {exc}")
        raise HTTPException(status_code=409, detail=str(exc))

    db.commit()
    db.refresh(row)
    return row

def delete_shift(db: Session, row: Shift) -> None:
    try:
        ensure_deletable(row)
    except TransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    db.delete(row)
    db.commit()
