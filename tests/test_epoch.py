"""
Daily epoch bookkeeping tests.
"""

import unittest

from meridian.epoch import (
    SECONDS_PER_DAY,
    DailyCounter,
    epoch_start,
    is_stale,
    within_limit,
)

DAY = 1_700_006_400  # 2023-11-15T00:00:00Z


class TestEpochStart(unittest.TestCase):

    def test_start_of_day_is_fixed_point(self):
        self.assertEqual(epoch_start(DAY), DAY)

    def test_mid_day_rounds_down(self):
        self.assertEqual(epoch_start(DAY + 3600), DAY)
        self.assertEqual(epoch_start(DAY + SECONDS_PER_DAY - 1), DAY)

    def test_next_day(self):
        self.assertEqual(epoch_start(DAY + SECONDS_PER_DAY), DAY + SECONDS_PER_DAY)

    def test_staleness_follows_utc_day(self):
        self.assertFalse(is_stale(DAY + 10, DAY + SECONDS_PER_DAY - 1))
        self.assertTrue(is_stale(DAY + SECONDS_PER_DAY - 1, DAY + SECONDS_PER_DAY))


class TestWithinLimit(unittest.TestCase):

    def test_zero_limit_is_unlimited(self):
        self.assertTrue(within_limit(0, 10**18, 10**18))

    def test_boundary_inclusive(self):
        self.assertTrue(within_limit(100, 60, 40))
        self.assertFalse(within_limit(100, 60, 41))


class TestDailyCounter(unittest.TestCase):

    def test_add_accumulates_within_day(self):
        counter = DailyCounter(epoch=DAY)
        counter.add(30, DAY + 1)
        counter.add(20, DAY + 2)
        self.assertEqual(counter.volume, 50)
        self.assertEqual(counter.current(DAY + 3), 50)

    def test_stale_epoch_reads_as_zero(self):
        counter = DailyCounter(volume=90, epoch=DAY)
        self.assertEqual(counter.current(DAY + SECONDS_PER_DAY), 0)
        self.assertTrue(counter.allows(100, 100, DAY + SECONDS_PER_DAY))
        self.assertFalse(counter.allows(100, 11, DAY + 5))

    def test_reading_does_not_reset(self):
        counter = DailyCounter(volume=90, epoch=DAY)
        counter.current(DAY + SECONDS_PER_DAY)
        self.assertEqual(counter.volume, 90)
        self.assertEqual(counter.epoch, DAY)

    def test_add_resets_stale_epoch(self):
        counter = DailyCounter(volume=90, epoch=DAY)
        counter.add(5, DAY + SECONDS_PER_DAY + 7)
        self.assertEqual(counter.volume, 5)
        self.assertEqual(counter.epoch, DAY + SECONDS_PER_DAY)

    def test_reset(self):
        counter = DailyCounter(volume=90, epoch=DAY)
        counter.reset(DAY + 2 * SECONDS_PER_DAY + 1)
        self.assertEqual(counter.volume, 0)
        self.assertEqual(counter.epoch, DAY + 2 * SECONDS_PER_DAY)


if __name__ == "__main__":
    unittest.main()
