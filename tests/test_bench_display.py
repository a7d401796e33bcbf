"""Tests for ratebench.bench.display."""

from __future__ import annotations

import unittest

from bench_test_helpers import make_result

from ratebench.bench.compare import Ranking, rank_results
from ratebench.bench.display import format_history, format_rate, format_ranking


class TestFormatRate(unittest.TestCase):
    def test_large_rate(self) -> None:
        self.assertEqual(format_rate(1234567.8, 0.4567), "1,234,568 ±0.457%")

    def test_small_rate(self) -> None:
        self.assertEqual(format_rate(12.5, 2.0), "12.500 ±2.000%")


class TestFormatRanking(unittest.TestCase):
    def test_empty(self) -> None:
        self.assertEqual(format_ranking(Ranking()), "No benchmark results.")

    def test_rows_in_registration_order(self) -> None:
        ranking = rank_results([make_result("Slow", 250.0), make_result("Fast", 1000.0)])
        output = format_ranking(ranking)
        lines = output.splitlines()
        self.assertIn("Label", lines[0])
        self.assertIn("Times slower", lines[0])
        self.assertTrue(lines[2].startswith("  Slow"))
        self.assertTrue(lines[3].startswith("* Fast"))

    def test_slowdown_column(self) -> None:
        ranking = rank_results([make_result("Fast", 1000.0), make_result("Slow", 250.0)])
        output = format_ranking(ranking)
        self.assertIn("1.000x", output)
        self.assertIn("4.000x", output)

    def test_baseline_note(self) -> None:
        ranking = rank_results([make_result("Fast", 1000.0), make_result("Slow", 250.0)])
        self.assertIn("* fastest: Fast", format_ranking(ranking))

    def test_timed_out_marker(self) -> None:
        ranking = rank_results(
            [make_result("ok", 10.0, runs=4), make_result("slow", 5.0, exceeded_max_time=True)]
        )
        output = format_ranking(ranking)
        self.assertIn("3!", output)
        self.assertIn("stopped at the time ceiling", output)

    def test_no_timeout_note_when_all_converged(self) -> None:
        ranking = rank_results([make_result("a", 10.0), make_result("b", 5.0)])
        self.assertNotIn("time ceiling", format_ranking(ranking))


class TestFormatHistory(unittest.TestCase):
    def test_header_and_rows(self) -> None:
        result = make_result("hist", 100.0, runs=3)
        output = format_history(result)
        lines = output.splitlines()
        self.assertEqual(lines[0], "hist: 3 batches of 100 (converged, 1.23s)")
        self.assertIn("Batch", lines[1])
        # Header plus one line per batch, no rule.
        self.assertEqual(len(lines), 5)
        self.assertTrue(lines[-1].lstrip().startswith("3"))
        self.assertIn("100.000", lines[-1])

    def test_no_runs(self) -> None:
        result = make_result("hist", 100.0, runs=1)
        result.runs.clear()
        lines = format_history(result).splitlines()
        self.assertEqual(len(lines), 2)


if __name__ == "__main__":
    unittest.main()
