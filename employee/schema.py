from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class EmployeeSchema(BaseModel):
    id: int
    org_id: int
    full_name: str
    location_id: Optional[int] = None
    role_id: Optional[int] = None
    hourly_rate: Optional[float] = None
    active: bool = True
    model_config = ConfigDict(from_attributes=True)

# PUBLIC payload, what clients send
class EmployeeCreatePayload(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    location_id: Optional[int] = None
    role_id: Optional[int] = None
    hourly_rate: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    active: bool = True
    model_config = ConfigDict(extra="forbid")


# INTERNAL DTO for the service
class EmployeeCreate(EmployeeCreatePayload):
    org_id: int

class EmployeeUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    location_id: Optional[int] = None
    role_id: Optional[int] = None
    hourly_rate: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    active: Optional[bool] = None
    model_config = ConfigDict(extra="forbid")
