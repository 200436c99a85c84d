from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.database import get_db
from authz.deps import Caller, get_current_active_user
from .schema import HoursCostReport
from . import service

report_router = APIRouter(prefix="/reports", tags=["Reports"])

@report_router.get("/hours-cost", response_model=HoursCostReport)
def hours_cost(
    from_: date = Query(..., alias="from", description="First day, YYYY-MM-DD"),
    to: date = Query(..., description="Last day (inclusive), YYYY-MM-DD"),
    location_id: Optional[int] = None,
    db: Session = Depends(get_db),
    user: Caller = Depends(get_current_active_user),
):
    return service.hours_cost_report(db, org_id=user.org_id, start=from_, end=to, location_id=location_id)
