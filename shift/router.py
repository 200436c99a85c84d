from datetime import date
from typing import Union
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from core.database import get_db
from authz.deps import Caller, get_current_active_user
from .schemas import ShiftSchema, ShiftBulkUpsertPayload, ShiftUpsertItem, ShiftPatch
from shift import service

shift_router = APIRouter(prefix="/shifts", tags=["Shifts"])
schedule_router = APIRouter(prefix="/schedule", tags=["Schedule"])

@schedule_router.get("", response_model=list[ShiftSchema])
def week_schedule(
    location_id: int,
    week_start: date = Query(..., description="First day of the week, YYYY-MM-DD"),
    db: Session = Depends(get_db),
    user: Caller = Depends(get_current_active_user),
):
    return service.get_week_shifts(db, org_id=user.org_id, location_id=location_id, week_start=week_start)

@shift_router.post("/bulk-upsert", response_model=list[ShiftSchema])
def bulk_upsert(
    payload: Union[ShiftBulkUpsertPayload, list[ShiftUpsertItem]],
    db: Session = Depends(get_db),
    user: Caller = Depends(get_current_active_user),
):
    items = payload.shifts if isinstance(payload, ShiftBulkUpsertPayload) else payload
    if not items:
        raise HTTPException(status_code=422, detail="at least one shift is required")
    return service.bulk_upsert_shifts(db, user.org_id, items)

@shift_router.get("/{shift_id}", response_model=ShiftSchema)
def get_shift(shift_id: int, db: Session = Depends(get_db), user: Caller = Depends(get_current_active_user)):
    obj = service.get_shift_for_org(db, shift_id, user.org_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Shift not found")
    return obj

@shift_router.patch("/{shift_id}", response_model=ShiftSchema)
def patch_shift(shift_id: int, payload: ShiftPatch, db: Session = Depends(get_db), user: Caller = Depends(get_current_active_user)):
    obj = service.get_shift_for_org(db, shift_id, user.org_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Shift not found")
    return service.patch_shift(db, obj, payload)

@shift_router.delete("/{shift_id}")
def delete_shift(shift_id: int, db: Session = Depends(get_db), user: Caller = Depends(get_current_active_user)):
    obj = service.get_shift_for_org(db, shift_id, user.org_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Shift not found")
    service.delete_shift(db, obj)
    return {"message": "Shift deleted"}
