"""Tests for session_report/stats.py"""

import unittest
from datetime import datetime, timedelta, timezone

from session_report.models import ScreenVisit, Session, UserAction
from session_report.stats import SessionStats, compute_stats

BASE = datetime(2025, 10, 24, 10, 0, 0, tzinfo=timezone.utc)


def _t(seconds: float) -> datetime:
    return BASE + timedelta(seconds=seconds)


class TestComputeStats(unittest.TestCase):
    def test_empty(self):
        stats = compute_stats([])
        self.assertEqual(stats, SessionStats())

    def test_aggregates(self):
        tap = UserAction(timestamp=_t(1), action_type="👆", details="Save", raw_event="ui_button_tap")
        sessions = [
            Session(1, _t(0), _t(20), screens=[
                ScreenVisit("Home", _t(0), _t(10), actions=[tap, tap]),
                ScreenVisit("Detail", _t(10), _t(20)),
            ]),
            Session(2, _t(0), _t(40), screens=[ScreenVisit("Home", _t(0), _t(40), actions=[tap])]),
            Session(3, _t(0), _t(0)),
        ]
        stats = compute_stats(sessions)
        self.assertEqual(stats.session_count, 3)
        self.assertEqual(stats.screen_count, 3)
        self.assertEqual(stats.action_count, 3)
        self.assertAlmostEqual(stats.avg_duration, 30.0)
        self.assertAlmostEqual(stats.avg_screens, 1.0)

    def test_accepts_generator(self):
        stats = compute_stats(Session(n, _t(0), _t(5)) for n in (1, 2))
        self.assertEqual(stats.session_count, 2)
        self.assertAlmostEqual(stats.avg_duration, 5.0)


class TestModelDurations(unittest.TestCase):
    def test_open_screen_has_zero_duration(self):
        self.assertEqual(ScreenVisit("Home", _t(0)).duration, 0.0)

    def test_unfinished_session_has_zero_duration(self):
        self.assertEqual(Session(1, _t(0)).duration, 0.0)

    def test_negative_session_duration_clamped(self):
        self.assertEqual(Session(1, _t(10), _t(0)).duration, 0.0)


if __name__ == "__main__":
    unittest.main()
