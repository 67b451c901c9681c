from __future__ import annotations

import unittest
from datetime import date, datetime, timedelta, timezone

from .trends import chart_data, daily_totals, day_label, day_start, parse_timestamp, window

UTC = timezone.utc
NOW = datetime(2026, 10, 18, 15, 30, tzinfo=UTC)


class DailyTotalsTests(unittest.TestCase):
    def test_empty_input_gives_seven_zero_days_ending_today(self):
        series = daily_totals(NOW, [], tz=UTC)
        self.assertEqual(len(series), 7)
        self.assertEqual([total for _, total in series], [0] * 7)
        self.assertEqual(series[-1][0], date(2026, 10, 18))
        self.assertEqual(series[0][0], date(2026, 10, 12))

    def test_days_are_consecutive_and_ascending(self):
        days = [day for day, _ in daily_totals(NOW, [], tz=UTC)]
        for earlier, later in zip(days, days[1:]):
            self.assertEqual(later - earlier, timedelta(days=1))

    def test_same_day_entries_are_summed(self):
        three_days_ago = NOW - timedelta(days=3)
        series = daily_totals(NOW, [(three_days_ago, 10), (three_days_ago.replace(hour=9), 15)], tz=UTC)
        self.assertEqual(dict(series)[date(2026, 10, 15)], 25)
        self.assertEqual(sum(total for _, total in series), 25)

    def test_entries_outside_window_are_dropped(self):
        series = daily_totals(NOW, [(NOW - timedelta(days=10), 500), (NOW, 5)], tz=UTC)
        self.assertEqual(sum(total for _, total in series), 5)
        self.assertEqual(len(series), 7)

    def test_future_entries_are_dropped(self):
        series = daily_totals(NOW, [(NOW + timedelta(days=1), 7)], tz=UTC)
        self.assertEqual(sum(total for _, total in series), 0)

    def test_buckets_by_local_calendar_day(self):
        plus_ten = timezone(timedelta(hours=10))
        # 20:00 UTC on the 17th is already the 18th at UTC+10
        late = datetime(2026, 10, 17, 20, 0, tzinfo=UTC)
        series = dict(daily_totals(NOW, [(late, 3)], tz=plus_ten))
        self.assertEqual(series[date(2026, 10, 18)], 3)
        self.assertEqual(series[date(2026, 10, 17)], 0)

    def test_custom_window_length(self):
        self.assertEqual(len(daily_totals(NOW, [], days=3, tz=UTC)), 3)


class HelperTests(unittest.TestCase):
    def test_parse_timestamp_accepts_z_suffix(self):
        self.assertEqual(parse_timestamp("2026-10-18T08:00:00Z"), datetime(2026, 10, 18, 8, tzinfo=UTC))

    def test_parse_timestamp_accepts_trimmed_fractions(self):
        self.assertEqual(
            parse_timestamp("2026-10-18T12:00:00.12345+00:00"),
            datetime(2026, 10, 18, 12, 0, 0, 123450, tzinfo=UTC),
        )
        self.assertEqual(
            parse_timestamp("2026-10-18T12:00:00.5Z"),
            datetime(2026, 10, 18, 12, 0, 0, 500000, tzinfo=UTC),
        )
        self.assertEqual(
            parse_timestamp("2026-10-18T12:00:00.1234567+00:00"),
            datetime(2026, 10, 18, 12, 0, 0, 123456, tzinfo=UTC),
        )

    def test_day_start_is_local_midnight(self):
        self.assertEqual(day_start(date(2026, 10, 18), UTC), datetime(2026, 10, 18, tzinfo=UTC))

    def test_window_ends_today(self):
        self.assertEqual(window(NOW, 2, UTC), [date(2026, 10, 17), date(2026, 10, 18)])

    def test_chart_data_labels(self):
        data = chart_data([(date(2026, 10, 17), 1.234), (date(2026, 10, 18), 0)])
        self.assertEqual(data, {"labels": ["Oct 17", "Oct 18"], "values": [1.23, 0]})
        self.assertEqual(day_label(date(2026, 1, 5)), "Jan 5")


if __name__ == "__main__":
    unittest.main()
