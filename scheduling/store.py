from __future__ import annotations
from datetime import date
from typing import Any, Optional, Protocol, Sequence

from .schema import CompanySettings, Employee, Location, Role, Shift, ShiftInput


class StoreError(Exception):
    """A persistence call failed. Transport and rejection are handled alike."""


class StoreTransportError(StoreError):
    pass


class StoreRejectedError(StoreError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ScheduleStore(Protocol):
    """Request/response boundary the engine persists through.

    Tenant isolation and authorization are the implementation's job.
    """

    async def list_shifts(self, location_id: int, week_start: date) -> list[Shift]: ...

    async def batch_upsert_shifts(self, shifts: Sequence[ShiftInput]) -> list[Shift]: ...

    async def patch_shift(self, shift_id: int, fields: dict[str, Any]) -> Shift: ...

    async def delete_shift(self, shift_id: int) -> None: ...

    async def list_locations(self) -> list[Location]: ...

    async def list_roles(self) -> list[Role]: ...

    async def list_employees(self, location_id: int) -> list[Employee]: ...

    async def get_company_settings(self) -> CompanySettings: ...
