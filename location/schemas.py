from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from organization.schema import Timezone

class LocationSchema(BaseModel):
    id: int
    org_id: int
    name: str
    timezone: str
    model_config = ConfigDict(from_attributes=True)

# PUBLIC payload, what clients send
class LocationCreatePayload(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    # defaults to the company timezone
    timezone: Optional[Timezone] = None
    model_config = ConfigDict(extra="forbid")


# INTERNAL DTO for the service
class LocationCreate(BaseModel):
    org_id: int
    name: str
    # None means the company timezone
    timezone: Optional[str] = None

class LocationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    timezone: Optional[Timezone] = None
    model_config = ConfigDict(extra="forbid")
