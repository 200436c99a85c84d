from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from core.database import get_db
from authz.deps import Caller, get_current_active_user

from .schema import (
    CompanySettingsSchema,
    CompanySettingsUpdate,
    OrganizationCreate,
    OrganizationCreatePayload,
    OrganizationSchema,
)
from . import service

organization_router = APIRouter(prefix="/organizations", tags=["organizations"])
company_router = APIRouter(prefix="/company", tags=["Company"])

# Create org (tenant bootstrap, no tenant header yet)
@organization_router.post("", response_model=OrganizationSchema, status_code=status.HTTP_201_CREATED)
def organization_post(payload: OrganizationCreatePayload, db: Session = Depends(get_db)):
    dto = OrganizationCreate(name=payload.name, timezone=payload.timezone or "Europe/Istanbul")
    return service.create_organization(db, dto)

@organization_router.get("/me", response_model=OrganizationSchema)
def my_organization(db: Session = Depends(get_db), user: Caller = Depends(get_current_active_user)):
    obj = service.get_organization(db, user.org_id)
    if not obj:
        raise HTTPException(status_code=404, detail="organization not found")
    return obj

@company_router.get("/settings", response_model=CompanySettingsSchema)
def company_settings(db: Session = Depends(get_db), user: Caller = Depends(get_current_active_user)):
    return service.get_settings(db, user.org_id)

@company_router.patch("/settings", response_model=CompanySettingsSchema)
def company_settings_patch(
    payload: CompanySettingsUpdate,
    db: Session = Depends(get_db),
    user: Caller = Depends(get_current_active_user),
    ):
    return service.update_settings(db, user.org_id, payload)
