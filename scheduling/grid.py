from __future__ import annotations
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from .calendar import ZoneLike, date_only, resolve_zone, week_days
from .metrics import compute_metrics
from .schema import Shift, ShiftId, SyncState, is_temp_id


def _start_order(shift: Shift) -> tuple:
    return (shift.start_at, str(shift.id))


class ScheduleGrid:
    """
    Shifts of one (location, week) pair, addressable by (employee, day).

    Rebuilt wholesale on navigation and after every successful flush. The
    cell index is derived from the full shift set on demand; a week holds
    tens of shifts, not millions.
    """

    def __init__(self, location_id: int, week_start: date, zone: ZoneLike = "UTC"):
        self.location_id = location_id
        self.week_start = week_start
        self.zone = resolve_zone(zone)
        self._shifts: dict[ShiftId, Shift] = {}
        self._sync: dict[ShiftId, SyncState] = {}
        self._cells: Optional[dict[tuple[int, date], list[Shift]]] = None

    def __len__(self) -> int:
        return len(self._shifts)

    def __contains__(self, shift_id: ShiftId) -> bool:
        return shift_id in self._shifts

    @property
    def week_days(self) -> list[date]:
        return week_days(self.week_start)

    @property
    def zone_degraded(self) -> bool:
        return self.zone.degraded

    @property
    def shifts(self) -> list[Shift]:
        return sorted(self._shifts.values(), key=_start_order)

    def get(self, shift_id: ShiftId) -> Optional[Shift]:
        return self._shifts.get(shift_id)

    def day_of(self, shift: Shift) -> date:
        return date_only(shift.start_at, self.zone)

    # ---------- mutation ----------

    def apply_optimistic(self, shift: Shift) -> None:
        """Insert or replace by id, ahead of any store confirmation."""
        self._shifts[shift.id] = shift
        if shift.id not in self._sync:
            self._sync[shift.id] = SyncState.local_only if is_temp_id(shift.id) else SyncState.synced
        self._cells = None

    def remove_local(self, shift_id: ShiftId) -> Optional[Shift]:
        removed = self._shifts.pop(shift_id, None)
        self._sync.pop(shift_id, None)
        if removed is not None:
            self._cells = None
        return removed

    def replace_all(self, shifts: Iterable[Shift], keep: Iterable[ShiftId] = ()) -> None:
        """
        Swap in the store's view of the week. Local-only shifts survive, and
        so do the local copies of ``keep`` (edits still waiting in the queue).
        """
        carried = {
            sid for sid, state in self._sync.items() if state is SyncState.local_only
        }
        carried.update(sid for sid in keep if sid in self._shifts)

        shifts_by_id = {s.id: s for s in shifts}
        sync = {sid: SyncState.synced for sid in shifts_by_id}
        for sid in carried:
            shifts_by_id[sid] = self._shifts[sid]
            sync[sid] = self._sync[sid]
        self._shifts = shifts_by_id
        self._sync = sync
        self._cells = None

    def mark_pending(self, shift_id: ShiftId) -> None:
        if shift_id in self._shifts:
            self._sync[shift_id] = SyncState.pending_sync

    def sync_state(self, shift_id: ShiftId) -> Optional[SyncState]:
        return self._sync.get(shift_id)

    # ---------- read model ----------

    def _index(self) -> dict[tuple[int, date], list[Shift]]:
        if self._cells is None:
            cells: dict[tuple[int, date], list[Shift]] = defaultdict(list)
            for shift in self._shifts.values():
                cells[(shift.employee_id, self.day_of(shift))].append(shift)
            for items in cells.values():
                items.sort(key=_start_order)
            self._cells = dict(cells)
        return self._cells

    def cell(self, employee_id: int, day: date) -> list[Shift]:
        return list(self._index().get((employee_id, day), ()))

    def cells_for(self, employee_id: int, days: Optional[Iterable[date]] = None) -> list[list[Shift]]:
        return [self.cell(employee_id, d) for d in (days if days is not None else self.week_days)]

    def employee_ids(self) -> list[int]:
        return sorted({s.employee_id for s in self._shifts.values()})

    def malformed_ids(self) -> list[ShiftId]:
        return [s.id for s in self.shifts if compute_metrics(s).malformed]
