import logging
from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import select

from organization import service as org_service
from .models import Location
from .schemas import LocationCreate, LocationUpdate

logger = logging.getLogger(__name__)


def get_locations(db: Session, *, org_id: int) -> List[Location]:
    stmt = select(Location).where(Location.org_id == org_id).order_by(Location.name.asc())
    return list(db.scalars(stmt))

def get_location_for_org(db: Session, location_id: int, org_id: int) -> Optional[Location]:
    stmt = select(Location).where(Location.id == location_id, Location.org_id == org_id)
    return db.scalars(stmt).first()

def create_location(db: Session, loc: LocationCreate) -> Location:
    timezone = loc.timezone or org_service.get_settings(db, loc.org_id).timezone
    row = Location(org_id=loc.org_id, name=loc.name, timezone=timezone)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info(f"Created location {row.id} ({timezone}) for org {loc.org_id}")
    return row

def update_location(db: Session, location_id: int, org_id: int, patch: LocationUpdate) -> Optional[Location]:
    row = get_location_for_org(db, location_id, org_id)
    if not row:
        return None
    # both columns are non-nullable; an explicit null leaves the value alone
    data = patch.model_dump(exclude_unset=True, exclude_none=True)
    if data.get("timezone", row.timezone) != row.timezone:
        logger.info(f"Location {location_id} moves from {row.timezone} to {data['timezone']}")
    for k, v in data.items():
        setattr(row, k, v)
    db.commit()
    db.refresh(row)
    return row

def delete_location(db: Session, location_id: int, org_id: int) -> bool:
    row = get_location_for_org(db, location_id, org_id)
    if not row:
        return False
    db.delete(row)
    db.commit()
    return True
