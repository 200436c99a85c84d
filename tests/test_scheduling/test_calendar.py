import unittest
from datetime import date, datetime, timezone

from scheduling.calendar import (
    MAX_OFFSET_ATTEMPTS,
    WallClock,
    WeekStart,
    add_days,
    date_only,
    instant_to_wall_clock,
    parse_day,
    parse_time_of_day,
    resolve_wall_clock,
    resolve_zone,
    set_date_keeping_time,
    start_of_week,
    wall_clock_to_instant,
    week_days,
    week_window,
)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class WallClockTests(unittest.TestCase):
    def test_istanbul_morning_is_three_hours_ahead(self):
        got = wall_clock_to_instant(date(2026, 2, 25), 9, 0, "Europe/Istanbul")
        self.assertEqual(got, utc(2026, 2, 25, 6, 0))

    def test_round_trip_ordinary_day(self):
        for zone in ("Europe/Istanbul", "America/New_York", "Asia/Kolkata", "UTC"):
            instant = wall_clock_to_instant(date(2026, 6, 10), 17, 45, zone)
            self.assertEqual(
                instant_to_wall_clock(instant, zone), WallClock(date(2026, 6, 10), 17, 45), zone
            )

    def test_round_trip_on_dst_change_days(self):
        # Berlin: spring forward 2026-03-29, fall back 2026-10-25
        for day in (date(2026, 3, 29), date(2026, 10, 25)):
            for hour in (0, 1, 4, 9, 23):
                instant = wall_clock_to_instant(day, hour, 15, "Europe/Berlin")
                self.assertEqual(instant_to_wall_clock(instant, "Europe/Berlin"), WallClock(day, hour, 15))

    def test_offset_changes_across_spring_forward(self):
        before = wall_clock_to_instant(date(2026, 3, 29), 1, 30, "Europe/Berlin")
        after = wall_clock_to_instant(date(2026, 3, 29), 3, 30, "Europe/Berlin")
        self.assertEqual(before, utc(2026, 3, 29, 0, 30))
        self.assertEqual(after, utc(2026, 3, 29, 1, 30))

    def test_nonexistent_time_in_gap_does_not_converge(self):
        got = resolve_wall_clock(date(2026, 3, 29), 2, 30, "Europe/Berlin")
        self.assertFalse(got.converged)
        self.assertFalse(got.zone_degraded)
        self.assertIn(got.instant, (utc(2026, 3, 29, 0, 30), utc(2026, 3, 29, 1, 30)))

    def test_ambiguous_fall_back_time_converges(self):
        got = resolve_wall_clock(date(2026, 10, 25), 2, 30, "Europe/Berlin")
        self.assertTrue(got.converged)
        self.assertEqual(instant_to_wall_clock(got.instant, "Europe/Berlin"), WallClock(date(2026, 10, 25), 2, 30))

    def test_attempts_are_bounded(self):
        self.assertEqual(MAX_OFFSET_ATTEMPTS, 8)

    def test_naive_instant_is_read_as_utc(self):
        got = instant_to_wall_clock(datetime(2026, 2, 25, 22, 30), "Europe/Istanbul")
        self.assertEqual(got, WallClock(date(2026, 2, 26), 1, 30))


class ZoneResolutionTests(unittest.TestCase):
    def test_known_zone(self):
        res = resolve_zone("Europe/Istanbul")
        self.assertFalse(res.degraded)
        self.assertEqual(res.name, "Europe/Istanbul")

    def test_unknown_zone_degrades_to_utc_and_warns(self):
        with self.assertLogs("scheduling.calendar", level="WARNING"):
            res = resolve_zone("Atlantis/Poseidonia")
        self.assertTrue(res.degraded)
        got = resolve_wall_clock(date(2026, 2, 25), 9, 0, "Atlantis/Poseidonia")
        self.assertTrue(got.zone_degraded)
        self.assertEqual(got.instant, utc(2026, 2, 25, 9, 0))

    def test_missing_zone_degrades(self):
        self.assertTrue(resolve_zone(None).degraded)
        self.assertTrue(resolve_zone("").degraded)


class WeekTests(unittest.TestCase):
    def test_sunday_start_for_a_wednesday(self):
        self.assertEqual(start_of_week(date(2026, 2, 25), WeekStart.sunday), date(2026, 2, 22))

    def test_monday_start_for_a_wednesday(self):
        self.assertEqual(start_of_week(date(2026, 2, 25), WeekStart.monday), date(2026, 2, 23))

    def test_sunday_belongs_to_previous_monday_week(self):
        self.assertEqual(start_of_week(date(2026, 3, 1), "mon"), date(2026, 2, 23))

    def test_sunday_is_its_own_sunday_week_start(self):
        self.assertEqual(start_of_week(date(2026, 2, 22), "sun"), date(2026, 2, 22))

    def test_week_start_is_idempotent(self):
        for convention in WeekStart:
            for offset in range(14):
                day = add_days(date(2026, 2, 16), offset)
                once = start_of_week(day, convention)
                self.assertEqual(start_of_week(once, convention), once)
                self.assertLessEqual((day - once).days, 6)

    def test_unknown_convention_means_monday(self):
        self.assertIs(WeekStart.parse("friday"), WeekStart.monday)
        self.assertIs(WeekStart.parse("Sunday"), WeekStart.sunday)

    def test_week_days(self):
        days = week_days(date(2026, 2, 22))
        self.assertEqual(len(days), 7)
        self.assertEqual(days[0], date(2026, 2, 22))
        self.assertEqual(days[-1], date(2026, 2, 28))

    def test_week_window_is_half_open_in_zone(self):
        start, end = week_window(date(2026, 2, 22), "UTC")
        self.assertEqual(start, utc(2026, 2, 22))
        self.assertEqual(end, utc(2026, 3, 1))

        start, end = week_window(date(2026, 2, 22), "Europe/Istanbul")
        self.assertEqual(start, utc(2026, 2, 21, 21, 0))
        self.assertEqual(end, utc(2026, 2, 28, 21, 0))

    def test_date_only_uses_zone(self):
        instant = utc(2026, 2, 24, 22, 30)
        self.assertEqual(date_only(instant, "UTC"), date(2026, 2, 24))
        self.assertEqual(date_only(instant, "Europe/Istanbul"), date(2026, 2, 25))


class HelperTests(unittest.TestCase):
    def test_set_date_keeping_time(self):
        instant = wall_clock_to_instant(date(2026, 2, 23), 9, 30, "Europe/Istanbul")
        moved = set_date_keeping_time(instant, date(2026, 2, 27), "Europe/Istanbul")
        self.assertEqual(instant_to_wall_clock(moved, "Europe/Istanbul"), WallClock(date(2026, 2, 27), 9, 30))

    def test_set_date_keeping_time_across_dst(self):
        instant = wall_clock_to_instant(date(2026, 3, 27), 9, 0, "Europe/Berlin")
        moved = set_date_keeping_time(instant, date(2026, 3, 30), "Europe/Berlin")
        self.assertEqual(moved, utc(2026, 3, 30, 7, 0))

    def test_parse_time_of_day(self):
        self.assertEqual(parse_time_of_day("07:05", (9, 0)), (7, 5))
        self.assertEqual(parse_time_of_day("7:05", (9, 0)), (7, 5))
        self.assertEqual(parse_time_of_day("24:00", (9, 0)), (9, 0))
        self.assertEqual(parse_time_of_day("noon", (9, 0)), (9, 0))
        self.assertEqual(parse_time_of_day(None, (17, 0)), (17, 0))

    def test_parse_day(self):
        self.assertEqual(parse_day("2026-02-25"), date(2026, 2, 25))
        self.assertEqual(parse_day(utc(2026, 2, 25, 13)), date(2026, 2, 25))


if __name__ == "__main__":
    unittest.main()
