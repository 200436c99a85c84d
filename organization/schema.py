from typing import Annotated, Literal, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from scheduling.calendar import resolve_zone

Locale = Literal["tr-TR", "en-US", "ar-EG"]
Currency = Literal["TRY", "USD", "EGP"]
HHMM = r"^\d{2}:\d{2}$"


def known_zone(v: str) -> str:
    if resolve_zone(v).degraded:
        raise ValueError(f"unknown timezone: {v}")
    return v


Timezone = Annotated[str, AfterValidator(known_zone)]


class OrganizationSchema(BaseModel):
    id: int
    name: str
    timezone: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)

# what clients send
class OrganizationCreatePayload(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    timezone: Optional[Timezone] = None
    model_config = ConfigDict(extra="forbid")

# internal DTO for service
class OrganizationCreate(BaseModel):
    name: str
    timezone: str = "Europe/Istanbul"


class CompanySettingsSchema(BaseModel):
    id: int
    name: str
    locale: str
    currency: str
    timezone: str
    week_starts_on: Literal["mon", "sun"]
    default_shift_start: str
    default_shift_end: str
    weekly_budget_limit: Optional[float] = None


class CompanySettingsUpdate(BaseModel):
    locale: Optional[Locale] = None
    currency: Optional[Currency] = None
    timezone: Optional[Timezone] = Field(None, min_length=1)
    week_starts_on: Optional[Literal["mon", "sun"]] = None
    default_shift_start: Optional[str] = Field(None, pattern=HHMM)
    default_shift_end: Optional[str] = Field(None, pattern=HHMM)
    weekly_budget_limit: Optional[float] = Field(None, ge=0)
    model_config = ConfigDict(extra="forbid")

    @field_validator("weekly_budget_limit", mode="before")
    @classmethod
    def blank_budget(cls, v):
        # a cleared input field clears the limit
        return None if v == "" else v
