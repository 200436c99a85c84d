from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from core.database import get_db
from organization.models import Organization


@dataclass(frozen=True)
class Caller:
    org_id: int
    user_id: Optional[int] = None


def get_current_active_user(
    x_org_id: Optional[int] = Header(None),
    x_user_id: Optional[int] = Header(None),
    db: Session = Depends(get_db),
) -> Caller:
    """Tenant of the request, as forwarded by the gateway in ``X-Org-Id``."""
    if x_org_id is None:
        raise HTTPException(status_code=401, detail="X-Org-Id header required")
    if db.get(Organization, x_org_id) is None:
        raise HTTPException(status_code=401, detail="unknown organization")
    return Caller(org_id=x_org_id, user_id=x_user_id)

