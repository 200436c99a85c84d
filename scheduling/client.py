from __future__ import annotations
import logging
from datetime import date
from typing import Any, Optional, Sequence

import httpx
from pydantic import TypeAdapter

from core.config_loader import settings
from .schema import CompanySettings, Employee, Location, Role, Shift, ShiftInput
from .store import StoreRejectedError, StoreTransportError

logger = logging.getLogger(__name__)

_FIELDS = TypeAdapter(dict[str, Any])


def _error_detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"Request failed: {resp.status_code}"
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, list) and detail:
        # pydantic validation errors
        first = detail[0]
        return first.get("msg", str(first)) if isinstance(first, dict) else str(first)
    if detail:
        return str(detail)
    return f"Request failed: {resp.status_code}"


class HttpScheduleStore:
    """ScheduleStore over the REST API (``/api/...``)."""

    def __init__(
        self,
        org_id: int,
        *,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self._headers = {"X-Org-Id": str(org_id)}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.SCHEDULE_API_URL,
            timeout=timeout if timeout is not None else settings.SCHEDULE_API_TIMEOUT,
        )

    async def __aenter__(self) -> "HttpScheduleStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            resp = await self._client.request(method, path, headers=self._headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning(f"{method} {path} failed: {exc!r}")
            raise StoreTransportError(f"{method} {path} failed: {exc}") from exc
        if resp.is_error:
            raise StoreRejectedError(_error_detail(resp), resp.status_code)
        if not resp.content:
            return None
        return resp.json()

    async def list_shifts(self, location_id: int, week_start: date) -> list[Shift]:
        data = await self._request(
            "GET", "/schedule", params={"location_id": location_id, "week_start": week_start.isoformat()}
        )
        return [Shift.model_validate(row) for row in data]

    async def batch_upsert_shifts(self, shifts: Sequence[ShiftInput]) -> list[Shift]:
        body = {"shifts": [s.model_dump(mode="json", exclude_none=True) for s in shifts]}
        data = await self._request("POST", "/shifts/bulk-upsert", json=body)
        return [Shift.model_validate(row) for row in data]

    async def patch_shift(self, shift_id: int, fields: dict[str, Any]) -> Shift:
        body = _FIELDS.dump_python(fields, mode="json")
        data = await self._request("PATCH", f"/shifts/{shift_id}", json=body)
        return Shift.model_validate(data)

    async def delete_shift(self, shift_id: int) -> None:
        await self._request("DELETE", f"/shifts/{shift_id}")

    async def list_locations(self) -> list[Location]:
        return [Location.model_validate(row) for row in await self._request("GET", "/locations")]

    async def list_roles(self) -> list[Role]:
        return [Role.model_validate(row) for row in await self._request("GET", "/roles")]

    async def list_employees(self, location_id: int) -> list[Employee]:
        data = await self._request("GET", "/employees", params={"location_id": location_id})
        return [Employee.model_validate(row) for row in data]

    async def get_company_settings(self) -> CompanySettings:
        return CompanySettings.model_validate(await self._request("GET", "/company/settings"))
