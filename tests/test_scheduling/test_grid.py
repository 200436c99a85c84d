import unittest
from datetime import date, datetime, timedelta, timezone

from scheduling.grid import ScheduleGrid
from scheduling.schema import Shift, SyncState, new_temp_id

ISTANBUL = "Europe/Istanbul"
WEEK = date(2026, 2, 23)


def at(day, hour, minute=0):
    # Istanbul is UTC+3 all year
    return datetime(2026, 2, day, hour, minute, tzinfo=timezone.utc) - timedelta(hours=3)


def make_shift(id, employee_id, day, hour, hours=8, **overrides):
    fields = dict(
        id=id, location_id=1, employee_id=employee_id, role_id=1,
        start_at=at(day, hour), end_at=at(day, hour) + timedelta(hours=hours), hourly_wage=100.0,
    )
    fields.update(overrides)
    return Shift(**fields)


class ScheduleGridTests(unittest.TestCase):
    def setUp(self):
        self.grid = ScheduleGrid(1, WEEK, ISTANBUL)

    def test_week_days(self):
        self.assertEqual(self.grid.week_days[0], WEEK)
        self.assertEqual(len(self.grid.week_days), 7)
        self.assertFalse(self.grid.zone_degraded)

    def test_cells_are_keyed_by_local_day(self):
        # 00:30 local on the 25th is still the 24th in UTC
        late = Shift(
            id=1, location_id=1, employee_id=5, role_id=1,
            start_at=at(25, 0, 30), end_at=at(25, 8, 30), hourly_wage=100.0,
        )
        self.grid.replace_all([late])
        self.assertEqual(self.grid.cell(5, date(2026, 2, 25)), [late])
        self.assertEqual(self.grid.cell(5, date(2026, 2, 24)), [])

    def test_multiple_shifts_per_cell_sorted_by_start(self):
        evening = make_shift(2, 5, 24, 18, hours=4)
        morning = make_shift(3, 5, 24, 8, hours=4)
        self.grid.replace_all([evening, morning])
        self.assertEqual([s.id for s in self.grid.cell(5, date(2026, 2, 24))], [3, 2])

    def test_cells_for_covers_the_week(self):
        self.grid.replace_all([make_shift(1, 5, 23, 9), make_shift(2, 5, 27, 9)])
        row = self.grid.cells_for(5)
        self.assertEqual(len(row), 7)
        self.assertEqual([len(c) for c in row], [1, 0, 0, 0, 1, 0, 0])

    def test_optimistic_temp_shift_is_local_only(self):
        tmp = make_shift(new_temp_id(), 5, 24, 9)
        self.grid.apply_optimistic(tmp)
        self.assertIn(tmp.id, self.grid)
        self.assertEqual(self.grid.sync_state(tmp.id), SyncState.local_only)
        self.assertTrue(tmp.is_temporary)

        self.grid.mark_pending(tmp.id)
        self.assertEqual(self.grid.sync_state(tmp.id), SyncState.pending_sync)

    def test_optimistic_replace_moves_cells(self):
        shift = make_shift(9, 5, 24, 9)
        self.grid.replace_all([shift])
        self.assertEqual(self.grid.sync_state(9), SyncState.synced)

        moved = shift.model_copy(update={"employee_id": 6, "start_at": at(26, 9), "end_at": at(26, 17)})
        self.grid.apply_optimistic(moved)
        self.assertEqual(self.grid.cell(5, date(2026, 2, 24)), [])
        self.assertEqual(self.grid.cell(6, date(2026, 2, 26)), [moved])
        self.assertEqual(len(self.grid), 1)

    def test_replace_all_drops_sent_temp_shifts(self):
        tmp = make_shift(new_temp_id(), 5, 24, 9)
        self.grid.apply_optimistic(tmp)
        self.grid.mark_pending(tmp.id)
        self.grid.replace_all([make_shift(10, 5, 24, 9)])
        self.assertEqual([s.id for s in self.grid.shifts], [10])
        self.assertEqual(self.grid.sync_state(10), SyncState.synced)

    def test_replace_all_keeps_local_only_shifts(self):
        tmp = make_shift(new_temp_id(), 5, 25, 9)
        self.grid.apply_optimistic(tmp)
        self.grid.replace_all([make_shift(10, 5, 24, 9)])
        self.assertEqual([s.id for s in self.grid.shifts], [10, tmp.id])
        self.assertEqual(self.grid.sync_state(tmp.id), SyncState.local_only)
        self.assertEqual(self.grid.cell(5, date(2026, 2, 25)), [tmp])

    def test_replace_all_keeps_queued_edits(self):
        self.grid.replace_all([make_shift(10, 5, 24, 9)])
        dragged = make_shift(10, 6, 26, 9)
        self.grid.apply_optimistic(dragged)
        self.grid.mark_pending(10)

        self.grid.replace_all([make_shift(10, 5, 24, 9), make_shift(11, 7, 24, 9)], keep=[10, 99])
        self.assertEqual(self.grid.get(10), dragged)
        self.assertEqual(self.grid.sync_state(10), SyncState.pending_sync)
        self.assertNotIn(99, self.grid)
        self.assertEqual(self.grid.sync_state(11), SyncState.synced)

    def test_remove_local(self):
        shift = make_shift(11, 5, 24, 9)
        self.grid.apply_optimistic(shift)
        self.assertEqual(self.grid.remove_local(11), shift)
        self.assertIsNone(self.grid.remove_local(11))
        self.assertIsNone(self.grid.sync_state(11))

    def test_employee_ids_and_malformed(self):
        broken = make_shift(12, 8, 24, 9, hours=-1)
        self.grid.replace_all([make_shift(13, 5, 24, 9), broken])
        self.assertEqual(self.grid.employee_ids(), [5, 8])
        self.assertEqual(self.grid.malformed_ids(), [12])


if __name__ == "__main__":
    unittest.main()
