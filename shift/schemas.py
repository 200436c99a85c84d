from datetime import datetime
from typing import Optional
from pydantic import AwareDatetime, BaseModel, Field, ConfigDict, model_validator

from scheduling.lifecycle import ShiftStatus

MAX_WAGE = 9999999999.99


class ShiftSchema(BaseModel):
    id: int
    org_id: int
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
    client_ref: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class ShiftUpsertItem(BaseModel):
    """One shift of a batch; matched by ``id``, else by ``client_ref``, else inserted."""
    id: Optional[int] = None
    client_ref: Optional[str] = Field(None, min_length=1, max_length=64)
    location_id: int
    employee_id: int
    role_id: int
    start_at: AwareDatetime = Field(..., description="TZ-aware ISO8601")
    end_at: AwareDatetime = Field(..., description="TZ-aware ISO8601")
    break_minutes: int = Field(0, ge=0)
    hourly_wage: float = Field(..., ge=0, le=MAX_WAGE, allow_inf_nan=False)
    notes: Optional[str] = Field(None, max_length=2000)
    status: Optional[ShiftStatus] = None
    cancel_reason: Optional[str] = Field(None, max_length=2000)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_at <= self.start_at:
            raise ValueError("end_at must be after start_at")
        return self

class ShiftBulkUpsertPayload(BaseModel):
    shifts: list[ShiftUpsertItem] = Field(..., min_length=1)
    model_config = ConfigDict(extra="forbid")

class ShiftPatch(BaseModel):
    location_id: Optional[int] = None
    employee_id: Optional[int] = None
    role_id: Optional[int] = None
    start_at: Optional[AwareDatetime] = None
    end_at: Optional[AwareDatetime] = None
    break_minutes: Optional[int] = Field(None, ge=0)
    hourly_wage: Optional[float] = Field(None, ge=0, le=MAX_WAGE, allow_inf_nan=False)
    notes: Optional[str] = Field(None, max_length=2000)
    status: Optional[ShiftStatus] = None
    cancel_reason: Optional[str] = Field(None, max_length=2000)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def check_dates_if_both_present(self):
        if self.start_at is not None and self.end_at is not None and self.start_at >= self.end_at:
            raise ValueError("start_at must be before end_at")
        return self
