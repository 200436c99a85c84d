"""
The weekly scheduling view: one grid and one sync queue per (location, week).

Every action that talks to the store catches ``StoreError`` and leaves the
message in ``board.error``; the optimistic grid is never rolled back.
Validation and lifecycle violations raise synchronously, before anything is
applied or queued.
"""
from __future__ import annotations
import asyncio
import logging
import math
from datetime import date
from typing import Optional

from core.config_loader import settings as app_settings
from .aggregator import WeekSummary, normalize_budget_limit, summarize_week
from .calendar import (
    add_days,
    date_only,
    instant_to_wall_clock,
    parse_time_of_day,
    set_date_keeping_time,
    start_of_week,
    wall_clock_to_instant,
)
from .errors import ShiftValidationError
from .grid import ScheduleGrid
from .lifecycle import ShiftAction, ShiftStatus, cancel, close, ensure_deletable, ensure_editable
from .schema import (
    CompanySettings,
    Employee,
    Location,
    Role,
    Shift,
    ShiftEdit,
    ShiftId,
    ShiftInput,
    is_temp_id,
    new_temp_id,
)
from .store import ScheduleStore, StoreError
from .sync_queue import FlushOutcome, SyncQueue

logger = logging.getLogger(__name__)


def validate_bounds(start_at, end_at, break_minutes, hourly_wage) -> None:
    if hourly_wage is None or not math.isfinite(hourly_wage) or hourly_wage < 0:
        raise ShiftValidationError("Hourly wage must be a valid non-negative number")
    if break_minutes is None or break_minutes < 0:
        raise ShiftValidationError("Break minutes must be a valid non-negative number")
    if end_at <= start_at:
        raise ShiftValidationError("End time must be after start time")


class ScheduleBoard:
    def __init__(self, store: ScheduleStore, *, debounce: Optional[float] = None):
        self.store = store
        self.debounce = debounce

        self.locations: list[Location] = []
        self.roles: list[Role] = []
        self.employees: list[Employee] = []
        self.company = CompanySettings()

        self.location_id: Optional[int] = None
        self.week_start: date = start_of_week(date.today())
        self.grid: Optional[ScheduleGrid] = None
        self.queue: Optional[SyncQueue] = None

        self.error: Optional[str] = None
        self.loading = False
        self.saving = False

    # ---------- context ----------

    @property
    def location(self) -> Optional[Location]:
        return next((l for l in self.locations if l.id == self.location_id), None)

    @property
    def zone(self) -> str:
        loc = self.location
        return loc.timezone if loc and loc.timezone else app_settings.DEFAULT_TIMEZONE

    @property
    def week_days(self) -> list[date]:
        return self.grid.week_days if self.grid else []

    def _fail(self, message: str, exc: Exception) -> None:
        self.error = str(exc) or message
        logger.warning(f"{message}: {exc}")

    def _require_grid(self) -> ScheduleGrid:
        if self.grid is None or self.queue is None:
            raise ShiftValidationError("No location selected")
        return self.grid

    def _require_shift(self, shift_id: ShiftId) -> Shift:
        shift = self._require_grid().get(shift_id)
        if shift is None:
            raise ShiftValidationError(f"Unknown shift {shift_id}")
        return shift

    async def load_base(self) -> bool:
        self.loading = True
        self.error = None
        try:
            locations, roles, company = await asyncio.gather(
                self.store.list_locations(),
                self.store.list_roles(),
                self.store.get_company_settings(),
            )
        except StoreError as exc:
            self._fail("Failed to load schedule base data", exc)
            return False
        finally:
            self.loading = False

        self.locations = locations
        self.roles = roles
        self.company = company.model_copy(
            update={"weekly_budget_limit": normalize_budget_limit(company.weekly_budget_limit)}
        )
        self.week_start = start_of_week(self.week_start, self.company.week_starts_on)

        target = self.location_id if self.location is not None else (locations[0].id if locations else None)
        if target is None:
            return True
        return await self.navigate(target, self.week_start)

    async def navigate(
        self,
        location_id: int,
        week_start: Optional[date] = None,
        *,
        discard_pending: bool = False,
    ) -> bool:
        """Switch the visible (location, week); the previous queue is torn down first."""
        await self._teardown(discard_pending=discard_pending)

        self.location_id = location_id
        self.week_start = start_of_week(week_start or self.week_start, self.company.week_starts_on)
        self.grid = ScheduleGrid(location_id, self.week_start, self.zone)
        if self.grid.zone_degraded:
            logger.warning(f"Location {location_id} has an unusable timezone; costs use UTC days")
        self.queue = SyncQueue(self.store, self.reload, on_timer=self.flush, debounce=self.debounce)
        return await self.reload()

    async def next_week(self) -> bool:
        return await self.navigate(self.location_id, add_days(self.week_start, 7))

    async def previous_week(self) -> bool:
        return await self.navigate(self.location_id, add_days(self.week_start, -7))

    async def _teardown(self, *, discard_pending: bool) -> None:
        queue, self.queue = self.queue, None
        if queue is None:
            return
        outcome = await queue.close(flush_pending=not discard_pending)
        if outcome is FlushOutcome.failed:
            self.error = queue.last_error
            logger.error(f"Lost {len(queue)} unsaved shift edit(s) while leaving the week")

    async def close(self) -> None:
        await self._teardown(discard_pending=False)

    async def reload(self) -> bool:
        grid = self.grid
        if grid is None:
            return False
        self.loading = True
        try:
            employees, shifts = await asyncio.gather(
                self.store.list_employees(grid.location_id),
                self.store.list_shifts(grid.location_id, grid.week_start),
            )
        except StoreError as exc:
            self._fail("Failed to load schedule", exc)
            return False
        finally:
            self.loading = False
        if grid is not self.grid:
            # navigated away while loading
            return False
        self.employees = employees
        grid.replace_all(shifts, keep=self.queue.pending if self.queue is not None else ())
        return True

    # ---------- optimistic edits ----------

    def _enqueue(self, shift: Shift) -> None:
        if self.queue.enqueue(shift):
            self.grid.mark_pending(shift.id)

    def _seed_wage(self, employee: Employee) -> float:
        if employee.hourly_rate is not None:
            return employee.hourly_rate
        role = next((r for r in self.roles if r.id == employee.role_id), None)
        if role is not None and role.hourly_wage_default is not None:
            return role.hourly_wage_default
        return 0.0

    def create_shift(self, employee_id: int, day: date) -> Shift:
        """Place a local-only shift in a cell; it is queued once the editor saves it."""
        grid = self._require_grid()
        employee = next((e for e in self.employees if e.id == employee_id), None)
        if employee is None:
            raise ShiftValidationError(f"Unknown employee {employee_id}")
        if employee.role_id is None:
            raise ShiftValidationError(f"Employee {employee_id} has no role")

        start_h, start_m = parse_time_of_day(self.company.default_shift_start, (9, 0))
        end_h, end_m = parse_time_of_day(self.company.default_shift_end, (17, 0))
        start_at = wall_clock_to_instant(day, start_h, start_m, grid.zone)
        end_at = wall_clock_to_instant(day, end_h, end_m, grid.zone)
        if end_at <= start_at:
            # overnight default, e.g. 22:00-06:00
            end_at = wall_clock_to_instant(add_days(day, 1), end_h, end_m, grid.zone)

        shift = Shift(
            id=new_temp_id(),
            location_id=grid.location_id,
            employee_id=employee.id,
            role_id=employee.role_id,
            start_at=start_at,
            end_at=end_at,
            break_minutes=0,
            hourly_wage=self._seed_wage(employee),
        )
        grid.apply_optimistic(shift)
        return shift

    def move_shift(self, shift_id: ShiftId, employee_id: int, day: date) -> Shift:
        """Drop a shift on another cell, keeping its local times of day."""
        grid = self._require_grid()
        source = self._require_shift(shift_id)
        ensure_editable(source, ShiftAction.move)

        offset = (day - date_only(source.start_at, grid.zone)).days
        end_day = add_days(date_only(source.end_at, grid.zone), offset)
        moved = source.model_copy(update={
            "employee_id": employee_id,
            "start_at": set_date_keeping_time(source.start_at, day, grid.zone),
            "end_at": set_date_keeping_time(source.end_at, end_day, grid.zone),
        })
        if moved.end_at <= moved.start_at:
            raise ShiftValidationError("End time must be after start time")

        grid.apply_optimistic(moved)
        self._enqueue(moved)
        return moved

    async def save_edit(self, edit: ShiftEdit) -> bool:
        """
        Save the editor's fields. A local-only shift goes through the queue
        and is flushed right away; a persisted one is patched and reloaded.
        """
        grid = self._require_grid()
        current = self._require_shift(edit.id)
        ensure_editable(current, ShiftAction.edit)
        validate_bounds(edit.start_at, edit.end_at, edit.break_minutes, edit.hourly_wage)

        fields = {
            "employee_id": edit.employee_id,
            "role_id": edit.role_id,
            "start_at": edit.start_at,
            "end_at": edit.end_at,
            "break_minutes": edit.break_minutes,
            "hourly_wage": edit.hourly_wage,
            "notes": edit.notes or None,
        }
        if is_temp_id(edit.id):
            updated = current.model_copy(update={**fields, "status": ShiftStatus.open})
            grid.apply_optimistic(updated)
            self._enqueue(updated)
            return await self.flush()

        # the patch carries every field a queued drag could have changed
        self.queue.discard(edit.id)
        self.saving = True
        self.error = None
        try:
            await self.store.patch_shift(edit.id, fields)
        except StoreError as exc:
            self._fail("Failed to save shift", exc)
            return False
        finally:
            self.saving = False
        return await self.reload()

    def cancel_edit(self, shift_id: ShiftId) -> None:
        """Closing the editor on a never-saved shift throws it away."""
        if is_temp_id(shift_id) and self.grid is not None:
            self.grid.remove_local(shift_id)
            self.queue.discard(shift_id)

    async def flush(self) -> bool:
        """
        Send everything queued. Also runs when the debounce timer fires. A
        flush already in flight is waited out, then whatever was queued
        during it goes out in a second batch.
        """
        queue = self.queue
        if queue is None:
            return True
        self.saving = True
        self.error = None
        try:
            outcome = await queue.flush()
            while outcome is FlushOutcome.busy:
                await queue.wait_idle()
                outcome = await queue.flush()
        finally:
            self.saving = queue.is_flushing
        if outcome is FlushOutcome.failed:
            self.error = queue.last_error
            return False
        return True

    # ---------- immediate calls ----------

    async def delete_shift(self, shift_id: ShiftId) -> bool:
        grid = self._require_grid()
        shift = self._require_shift(shift_id)
        ensure_deletable(shift)

        if is_temp_id(shift_id):
            grid.remove_local(shift_id)
            self.queue.discard(shift_id)
            return True

        self.saving = True
        self.error = None
        try:
            await self.store.delete_shift(shift_id)
        except StoreError as exc:
            self._fail("Failed to delete shift", exc)
            return False
        finally:
            self.saving = False
        grid.remove_local(shift_id)
        self.queue.discard(shift_id)
        return True

    async def _transition(self, shift: Shift, fields: dict, message: str) -> bool:
        if is_temp_id(shift.id):
            raise ShiftValidationError("Save the shift before changing its status")
        queue = self.queue
        if shift.id in queue.pending or queue.is_flushing:
            # a queued open-state upsert would be rejected once the row is locked
            if not await self.flush():
                return False
        self.saving = True
        self.error = None
        try:
            await self.store.patch_shift(shift.id, fields)
        except StoreError as exc:
            self._fail(message, exc)
            return False
        finally:
            self.saving = False
        # the row is locked now; drop anything queued for it while the patch ran
        queue.discard(shift.id)
        return await self.reload()

    async def close_shift(self, shift_id: ShiftId) -> bool:
        closed = close(self._require_shift(shift_id))
        return await self._transition(closed, {"status": closed.status}, "Failed to close shift")

    async def cancel_shift(self, shift_id: ShiftId, reason: Optional[str] = None) -> bool:
        cancelled = cancel(self._require_shift(shift_id), reason)
        return await self._transition(
            cancelled,
            {"status": cancelled.status, "cancel_reason": cancelled.cancel_reason},
            "Failed to cancel shift",
        )

    async def copy_last_week(self) -> int:
        """Re-place last week's shifts at the same local times, seven days later."""
        grid = self._require_grid()
        self.saving = True
        self.error = None
        try:
            previous = await self.store.list_shifts(grid.location_id, add_days(grid.week_start, -7))
            payload = []
            for shift in previous:
                if shift.status is ShiftStatus.cancelled:
                    continue
                start = instant_to_wall_clock(shift.start_at, grid.zone)
                end = instant_to_wall_clock(shift.end_at, grid.zone)
                payload.append(ShiftInput(
                    # stable key: copying the same week twice updates instead of duplicating
                    client_ref=f"copy-{shift.id}-{grid.week_start.isoformat()}",
                    location_id=grid.location_id,
                    employee_id=shift.employee_id,
                    role_id=shift.role_id,
                    start_at=wall_clock_to_instant(add_days(start.day, 7), start.hour, start.minute, grid.zone),
                    end_at=wall_clock_to_instant(add_days(end.day, 7), end.hour, end.minute, grid.zone),
                    break_minutes=shift.break_minutes,
                    hourly_wage=shift.hourly_wage,
                    notes=shift.notes,
                ))
            if payload:
                await self.store.batch_upsert_shifts(payload)
        except StoreError as exc:
            self._fail("Failed to copy previous week", exc)
            return 0
        finally:
            self.saving = False
        await self.reload()
        return len(payload)

    # ---------- read side ----------

    def visible_employees(self, search: str = "", selected_id: Optional[int] = None) -> list[Employee]:
        needle = search.strip().casefold()
        return [
            e for e in self.employees
            if (selected_id is None or e.id == selected_id)
            and (not needle or needle in e.full_name.casefold())
        ]

    def summary(self) -> WeekSummary:
        grid = self._require_grid()
        return summarize_week(grid.shifts, self.employees, grid.zone, self.company.weekly_budget_limit)
