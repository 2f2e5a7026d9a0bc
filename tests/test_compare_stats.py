"""Tests for benchdiff.compare.stats — interval-overlap significance."""

from __future__ import annotations

import unittest

from compare_test_helpers import make_estimate

from benchdiff.compare.results import Estimate
from benchdiff.compare.stats import (
    Verdict,
    classify,
    compare_estimates,
    diff_percentage,
    significant_diff_percentage,
    widen,
)


class TestWiden(unittest.TestCase):
    def test_two_standard_errors(self) -> None:
        interval = widen(Estimate(value=10.0, standard_error=1.0))
        self.assertEqual(interval.low, 8.0)
        self.assertEqual(interval.high, 12.0)

    def test_custom_factor(self) -> None:
        interval = widen(Estimate(value=10.0, standard_error=1.0), factor=3.0)
        self.assertEqual((interval.low, interval.high), (7.0, 13.0))


class TestDiffPercentage(unittest.TestCase):
    def test_formula(self) -> None:
        self.assertEqual(diff_percentage(0.02, 0.05), (0.02 / 0.05 - 1) * 100)

    def test_zero_base(self) -> None:
        self.assertIsNone(diff_percentage(1.0, 0.0))


class TestClassify(unittest.TestCase):
    def test_faster(self) -> None:
        verdict = classify(Estimate(50.0, 1.0), Estimate(20.0, 1.0))
        self.assertEqual(verdict, Verdict.FASTER)

    def test_slower(self) -> None:
        verdict = classify(Estimate(20.0, 1.0), Estimate(50.0, 1.0))
        self.assertEqual(verdict, Verdict.SLOWER)

    def test_overlap_not_significant(self) -> None:
        verdict = classify(Estimate(10.0, 1.0), Estimate(11.0, 1.0))
        self.assertEqual(verdict, Verdict.NOT_SIGNIFICANT)

    def test_touching_intervals_not_significant(self) -> None:
        # base [8, 12], changes [12, 16]
        self.assertEqual(classify(Estimate(10.0, 1.0), Estimate(14.0, 1.0)), Verdict.NOT_SIGNIFICANT)
        # base [12, 16], changes [8, 12]
        self.assertEqual(classify(Estimate(14.0, 1.0), Estimate(10.0, 1.0)), Verdict.NOT_SIGNIFICANT)

    def test_just_past_touching_is_significant(self) -> None:
        self.assertEqual(classify(Estimate(10.0, 1.0), Estimate(14.5, 1.0)), Verdict.SLOWER)

    def test_zero_error_equal_values(self) -> None:
        self.assertEqual(classify(Estimate(5.0, 0.0), Estimate(5.0, 0.0)), Verdict.NOT_SIGNIFICANT)


class TestSignificantDiffPercentage(unittest.TestCase):
    def test_faster_uses_changes_max_and_base_min(self) -> None:
        result = significant_diff_percentage(Estimate(50.0, 1.0), Estimate(20.0, 1.0))
        self.assertEqual(result, (22.0 / 48.0 - 1) * 100)

    def test_slower_uses_changes_min_and_base_max(self) -> None:
        result = significant_diff_percentage(Estimate(20.0, 1.0), Estimate(50.0, 1.0))
        self.assertEqual(result, (48.0 / 22.0 - 1) * 100)

    def test_overlap_is_zero(self) -> None:
        self.assertEqual(significant_diff_percentage(Estimate(10.0, 1.0), Estimate(11.0, 1.0)), 0.0)

    def test_more_conservative_than_point_estimate(self) -> None:
        base, changes = Estimate(50.0, 1.0), Estimate(20.0, 1.0)
        point = diff_percentage(changes.value, base.value)
        edge = significant_diff_percentage(base, changes)
        assert point is not None and edge is not None
        self.assertLess(abs(edge), abs(point))


class TestCompareEstimates(unittest.TestCase):
    def test_percent_diff_exact(self) -> None:
        base = make_estimate(73.0, 2.0)
        changes = make_estimate(81.5, 1.5)
        sig = compare_estimates(base, changes)
        self.assertEqual(sig.percent_diff, (changes.value / base.value - 1) * 100)

    def test_equal_estimates(self) -> None:
        sig = compare_estimates(make_estimate(100.0, 1.0), make_estimate(100.0, 1.0))
        self.assertEqual(sig.verdict, Verdict.NOT_SIGNIFICANT)
        self.assertFalse(sig.is_significant)
        self.assertEqual(sig.percent_diff, 0.0)
        self.assertEqual(sig.significant_percent_diff, 0.0)

    def test_faster_scenario(self) -> None:
        sig = compare_estimates(make_estimate(50.0, 1.0), make_estimate(20.0, 1.0))
        self.assertEqual(sig.verdict, Verdict.FASTER)
        self.assertTrue(sig.is_significant)
        assert sig.significant_percent_diff is not None
        self.assertLess(sig.significant_percent_diff, 0)

    def test_missing_base(self) -> None:
        sig = compare_estimates(None, make_estimate(20.0, 1.0))
        self.assertEqual(sig.verdict, Verdict.UNAVAILABLE)
        self.assertIsNone(sig.percent_diff)
        self.assertIsNone(sig.significant_percent_diff)
        self.assertFalse(sig.is_significant)

    def test_missing_changes(self) -> None:
        sig = compare_estimates(make_estimate(20.0, 1.0), None)
        self.assertEqual(sig.verdict, Verdict.UNAVAILABLE)
        self.assertFalse(sig.is_significant)

    def test_overlapping_never_significant(self) -> None:
        for base_v, changes_v in [(10.0, 10.5), (10.0, 13.9), (13.9, 10.0), (10.0, 14.0)]:
            sig = compare_estimates(Estimate(base_v, 1.0), Estimate(changes_v, 1.0))
            self.assertFalse(sig.is_significant, (base_v, changes_v))
