from __future__ import annotations
import secrets
import time
from datetime import datetime
from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, field_validator

from .calendar import WeekStart, as_utc
from .lifecycle import ShiftStatus

# persisted shifts carry the store's integer key, local ones a "tmp-..." string
ShiftId = Union[int, str]

TEMP_ID_PREFIX = "tmp-"


def is_temp_id(shift_id: ShiftId) -> bool:
    return isinstance(shift_id, str) and shift_id.startswith(TEMP_ID_PREFIX)


def new_temp_id() -> str:
    return f"{TEMP_ID_PREFIX}{secrets.token_hex(4)}-{int(time.time() * 1000)}"


class SyncState(str, Enum):
    local_only = "local_only"       # temporary id, never handed to the queue
    pending_sync = "pending_sync"   # enqueued or in flight
    synced = "synced"               # as last loaded from the store


class Shift(BaseModel):
    id: ShiftId
    location_id: int
    employee_id: int
    role_id: int
    start_at: datetime
    end_at: datetime
    break_minutes: int = 0
    hourly_wage: float = 0.0
    notes: Optional[str] = None
    status: ShiftStatus = ShiftStatus.open
    cancel_reason: Optional[str] = None
    closed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("start_at", "end_at")
    @classmethod
    def utc(cls, dt: datetime) -> datetime:
        return as_utc(dt)

    @field_validator("status", mode="before")
    @classmethod
    def default_open(cls, v):
        return ShiftStatus.open if v is None else v

    @property
    def is_temporary(self) -> bool:
        return is_temp_id(self.id)


class ShiftInput(BaseModel):
    """What the batch upsert call carries for one shift."""
    id: Optional[int] = None
    client_ref: Optional[str] = None
    location_id: int
    employee_id: int
    role_id: int
    start_at: datetime
    end_at: datetime
    break_minutes: int = 0
    hourly_wage: float = 0.0
    notes: Optional[str] = None
    status: Optional[ShiftStatus] = None
    cancel_reason: Optional[str] = None

    @classmethod
    def from_shift(cls, shift: Shift) -> "ShiftInput":
        temporary = is_temp_id(shift.id)
        return cls(
            id=None if temporary else shift.id,
            client_ref=shift.id if temporary else None,
            location_id=shift.location_id,
            employee_id=shift.employee_id,
            role_id=shift.role_id,
            start_at=shift.start_at,
            end_at=shift.end_at,
            break_minutes=shift.break_minutes,
            hourly_wage=shift.hourly_wage,
            notes=shift.notes,
            status=shift.status,
            cancel_reason=shift.cancel_reason,
        )


class ShiftEdit(BaseModel):
    """Form state of the shift editor."""
    id: ShiftId
    employee_id: int
    role_id: int
    start_at: datetime
    end_at: datetime
    break_minutes: int = 0
    hourly_wage: float = 0.0
    notes: Optional[str] = None


class Location(BaseModel):
    id: int
    name: str
    timezone: str
    model_config = ConfigDict(from_attributes=True)


class Role(BaseModel):
    id: int
    name: str
    hourly_wage_default: Optional[float] = None
    model_config = ConfigDict(from_attributes=True)


class Employee(BaseModel):
    id: int
    full_name: str
    location_id: Optional[int] = None
    role_id: Optional[int] = None
    hourly_rate: Optional[float] = None
    active: bool = True
    model_config = ConfigDict(from_attributes=True)


class CompanySettings(BaseModel):
    locale: str = "tr-TR"
    currency: str = "TRY"
    timezone: str = "Europe/Istanbul"
    week_starts_on: WeekStart = WeekStart.monday
    default_shift_start: str = "09:00"
    default_shift_end: str = "17:00"
    weekly_budget_limit: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("week_starts_on", mode="before")
    @classmethod
    def lenient_week_start(cls, v):
        return WeekStart.parse(v)
