"""Tests for the sign-change scanner."""

import unittest

from numerik_pkg.parser import compile_expression
from numerik_pkg.scanner import scan, validate_range
from numerik_pkg.types import InvalidRange, SignChangeInterval


class TestScan(unittest.TestCase):
    """Test bracket detection over a fixed grid."""

    def test_grid_aligned_roots_are_kept(self):
        intervals = scan(compile_expression("x^2-4"), -10, 10, 0.1)
        self.assertEqual(len(intervals), 2)
        self.assertEqual(
            [(round(i.start, 1), round(i.end, 1)) for i in intervals],
            [(-2.1, -2.0), (1.9, 2.0)],
        )
        self.assertEqual(intervals[0].f_end, 0.0)

    def test_cubic_has_three_brackets(self):
        intervals = scan(compile_expression("x^3-9x+3"), -10, 10, 0.1)
        self.assertEqual([round(i.start, 1) for i in intervals], [-3.2, 0.3, 2.8])
        for interval in intervals:
            self.assertLess(interval.f_start * interval.f_end, 0)
            self.assertLess(interval.start, interval.end)

    def test_ascending_order(self):
        intervals = scan(compile_expression("(x-1)(x-3)(x+5)"), -10, 10, 0.25)
        starts = [i.start for i in intervals]
        self.assertEqual(starts, sorted(starts))

    def test_tiny_values_keep_sign_change(self):
        # f(x1) * f(x2) underflows to -0.0 here; the signs still differ
        intervals = scan(compile_expression("1e-170*(x-0.05)"), -1, 1, 0.1)
        self.assertEqual(len(intervals), 1)
        self.assertLess(intervals[0].start, 0.05)
        self.assertGreater(intervals[0].end, 0.05)

    def test_no_sign_change(self):
        self.assertEqual(scan(compile_expression("x^2+1"), -10, 10, 0.1), [])

    def test_root_at_lower_bound(self):
        intervals = scan(compile_expression("x"), 0, 1, 0.5)
        self.assertEqual(len(intervals), 1)
        self.assertEqual((intervals[0].start, intervals[0].end), (0.0, 0.5))

    def test_last_interval_clipped_to_upper(self):
        intervals = scan(compile_expression("x - 0.95"), 0, 1, 0.3)
        self.assertEqual(len(intervals), 1)
        self.assertEqual(intervals[0].end, 1.0)

    def test_evaluation_failures_skipped(self):
        # The pole at 0 sits on the grid, so both sub-intervals touching it are skipped
        self.assertEqual(scan(compile_expression("1/x"), -1, 1, 0.1), [])

    def test_full_precision_kept(self):
        interval = scan(compile_expression("x^3-9x+3"), 0, 1, 0.1)[0]
        self.assertNotEqual(interval.f_start, round(interval.f_start, 4))
        rounded = interval.to_dict(precision=4)
        self.assertEqual(rounded["f_start"], round(interval.f_start, 4))


class TestStrictScan(unittest.TestCase):
    """Test the near-zero variant."""

    def test_exact_zero_becomes_centered_interval(self):
        intervals = scan(compile_expression("x^2-4"), -10, 10, 0.1, strict=True)
        self.assertEqual([i.exact_zero_at for i in intervals], [-2.0, 2.0])
        for interval in intervals:
            self.assertTrue(interval.is_near_exact)
            self.assertAlmostEqual(interval.start, interval.exact_zero_at - 0.05)
            self.assertAlmostEqual(interval.end, interval.exact_zero_at + 0.05)

    def test_sign_changes_still_reported(self):
        intervals = scan(compile_expression("x^3-9x+3"), -10, 10, 0.1, strict=True)
        self.assertEqual(len(intervals), 3)
        self.assertFalse(any(i.is_near_exact for i in intervals))

    def test_custom_epsilon(self):
        # f(0) = 0.01 never changes sign; a loose epsilon reports it
        handle = compile_expression("x^2 + 0.01")
        self.assertEqual(scan(handle, -1, 1, 0.5, strict=True), [])
        intervals = scan(handle, -1, 1, 0.5, strict=True, epsilon=0.1)
        self.assertEqual([i.exact_zero_at for i in intervals], [0.0])


class TestValidateRange(unittest.TestCase):
    """Test bound validation before any sample is evaluated."""

    def test_step_count(self):
        self.assertEqual(validate_range(0, 1, 0.25), 4)

    def test_lower_not_below_upper(self):
        with self.assertRaises(InvalidRange):
            validate_range(1, 1, 0.1)
        with self.assertRaises(InvalidRange):
            scan(compile_expression("x"), 5, -5, 0.1)

    def test_non_positive_step(self):
        with self.assertRaises(InvalidRange):
            validate_range(0, 1, 0)
        with self.assertRaises(InvalidRange):
            validate_range(0, 1, -0.1)

    def test_too_many_steps(self):
        with self.assertRaises(InvalidRange) as ctx:
            validate_range(0, 1e7, 1e-3)
        self.assertEqual(ctx.exception.code, "INVALID_RANGE")

    def test_non_finite(self):
        with self.assertRaises(InvalidRange):
            validate_range(float("-inf"), 0, 0.1)


class TestIntervalDict(unittest.TestCase):
    def test_exact_zero_only_when_set(self):
        self.assertNotIn("exact_zero_at", SignChangeInterval(0, 1, -1, 1).to_dict())
        self.assertEqual(
            SignChangeInterval(0, 1, -1, 1, exact_zero_at=0.5).to_dict()["exact_zero_at"],
            0.5,
        )


if __name__ == "__main__":
    unittest.main()
