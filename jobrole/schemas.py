from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

class JobRoleSchema(BaseModel):
    id: int
    org_id: int
    name: str
    hourly_wage_default: Optional[float] = None
    model_config = ConfigDict(from_attributes=True)

# PUBLIC payload, what clients send
class JobRoleCreatePayload(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    hourly_wage_default: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    model_config = ConfigDict(extra="forbid")


# INTERNAL DTO for the service
class JobRoleCreate(BaseModel):
    org_id: int
    name: str
    hourly_wage_default: Optional[float] = None


class JobRoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    hourly_wage_default: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    model_config = ConfigDict(extra="forbid")
