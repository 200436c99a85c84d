import logging
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException

from scheduling.aggregator import normalize_budget_limit
from scheduling.calendar import WeekStart, parse_time_of_day
from .models import Organization
from .schema import CompanySettingsSchema, CompanySettingsUpdate, OrganizationCreate

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    "locale": "tr-TR",
    "currency": "TRY",
    "timezone": "Europe/Istanbul",
    "week_starts_on": "mon",
    "default_shift_start": "09:00",
    "default_shift_end": "17:00",
}

def get_organization(db: Session, org_id: int) -> Optional[Organization]:
    return db.get(Organization, org_id)

def create_organization(db: Session, dto: OrganizationCreate) -> Organization:
    org = Organization(name=dto.name, timezone=dto.timezone)
    db.add(org)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="organization name already exists")
    db.refresh(org)
    logger.info(f"Created organization {org.id} ({org.name})")
    return org

def _hhmm(value: Optional[str], fallback: str) -> str:
    if not value:
        return fallback
    h, m = parse_time_of_day(value, (-1, -1))
    return fallback if h < 0 else f"{h:02d}:{m:02d}"

def settings_of(org: Organization) -> CompanySettingsSchema:
    """Company settings with defaults filled in and the budget normalized."""
    return CompanySettingsSchema(
        id=org.id,
        name=org.name,
        locale=org.locale or DEFAULT_SETTINGS["locale"],
        currency=org.currency or DEFAULT_SETTINGS["currency"],
        timezone=org.timezone or DEFAULT_SETTINGS["timezone"],
        week_starts_on=WeekStart.parse(org.week_starts_on).value,
        default_shift_start=_hhmm(org.default_shift_start, DEFAULT_SETTINGS["default_shift_start"]),
        default_shift_end=_hhmm(org.default_shift_end, DEFAULT_SETTINGS["default_shift_end"]),
        weekly_budget_limit=normalize_budget_limit(org.weekly_budget_limit),
    )

def get_settings(db: Session, org_id: int) -> CompanySettingsSchema:
    org = db.get(Organization, org_id)
    if not org:
        raise HTTPException(status_code=404, detail="organization not found")
    return settings_of(org)

def update_settings(db: Session, org_id: int, patch: CompanySettingsUpdate) -> CompanySettingsSchema:
    org = db.get(Organization, org_id)
    if not org:
        raise HTTPException(status_code=404, detail="organization not found")

    data = patch.model_dump(exclude_unset=True)
    # only the budget may be cleared; other nulls are ignored
    data = {k: v for k, v in data.items() if v is not None or k == "weekly_budget_limit"}
    if not data:
        raise HTTPException(status_code=400, detail="At least one field is required")

    for k, v in data.items():
        setattr(org, k, v)
    db.commit()
    db.refresh(org)
    return settings_of(org)
