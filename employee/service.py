from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import select
from fastapi import HTTPException

from location.service import get_location_for_org
from jobrole.service import get_jobrole_for_org
from .models import Employee
from .schema import EmployeeCreate, EmployeeUpdate

def get_employees(
    db: Session,
    *,
    org_id: int,
    location_id: Optional[int] = None,
    active: Optional[bool] = None,
) -> List[Employee]:
    statement = select(Employee).where(Employee.org_id == org_id)
    if location_id is not None:
        statement = statement.where(Employee.location_id == location_id)
    if active is not None:
        statement = statement.where(Employee.active == active)
    statement = statement.order_by(Employee.full_name.asc(), Employee.id.asc())
    return list(db.scalars(statement))

def get_employee_for_org(db: Session, employee_id: int, org_id: int) -> Optional[Employee]:
    statement = select(Employee).where(Employee.id == employee_id, Employee.org_id == org_id)
    return db.scalars(statement).first()

def check_refs(db: Session, org_id: int, *, location_id: Optional[int], role_id: Optional[int]) -> None:
    """Location and role must belong to the caller's organization."""
    if location_id is not None and not get_location_for_org(db, location_id, org_id):
        raise HTTPException(status_code=422, detail="location not found in this organization")
    if role_id is not None and not get_jobrole_for_org(db, role_id, org_id):
        raise HTTPException(status_code=422, detail="role not found in this organization")

def create_employee(db: Session, employee: EmployeeCreate) -> Employee:
    check_refs(db, employee.org_id, location_id=employee.location_id, role_id=employee.role_id)
    db_employee = Employee(**employee.model_dump())
    db.add(db_employee)
    db.commit()
    db.refresh(db_employee)
    return db_employee

def update_employee(db: Session, employee_id: int, patch: EmployeeUpdate) -> Optional[Employee]:
    db_employee = db.get(Employee, employee_id)
    if not db_employee:
        return None
    data = patch.model_dump(exclude_unset=True)
    for k in ("full_name", "active"):
        if k in data and data[k] is None:
            data.pop(k)
    check_refs(db, db_employee.org_id, location_id=data.get("location_id"), role_id=data.get("role_id"))
    for k, v in data.items():
        setattr(db_employee, k, v)
    db.commit()
    db.refresh(db_employee)
    return db_employee

def delete_employee(db: Session, employee_id: int) -> None:
    db_employee = db.get(Employee, employee_id)
    if db_employee:
        db.delete(db_employee)
        db.commit()
    return
