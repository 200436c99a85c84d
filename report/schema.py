from datetime import date
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ReportTotals(BaseModel):
    total_hours: float = 0.0
    total_cost: float = 0.0
    shift_count: int = 0


class EmployeeHours(ReportTotals):
    employee_id: int
    full_name: str


class LocationHours(ReportTotals):
    location_id: int
    name: str


class HoursCostReport(BaseModel):
    from_: date = Field(alias="from")
    to: date
    location_id: Optional[int] = None
    totals: ReportTotals
    per_employee: list[EmployeeHours]
    per_location: list[LocationHours]

    model_config = ConfigDict(populate_by_name=True)
