"""Tests for ratebench.cli: the Click command-line interface."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

import click
import yaml
from click.testing import CliRunner

from ratebench.cli import main, parse_target, resolve_target

# Small budgets so real runs finish in well under a second.
FAST_OPTIONS = ["--initial-batch-time", "5", "--max-time", "50", "--no-gc", "-q"]


class TestHelp(unittest.TestCase):
    """Tests for the group and subcommand help."""

    def test_group_help(self) -> None:
        result = CliRunner().invoke(main, ["--help"])
        self.assertEqual(result.exit_code, 0)
        for command in ("run", "show", "export", "settings"):
            self.assertIn(command, result.output)

    def test_run_help(self) -> None:
        result = CliRunner().invoke(main, ["run", "--help"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("--profile", result.output)
        self.assertIn("--max-error", result.output)
        self.assertIn("--window", result.output)

    def test_export_help(self) -> None:
        result = CliRunner().invoke(main, ["export", "--help"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("--format", result.output)

    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("0.1.0", result.output)


# ---------------------------------------------------------------------------
# Target parsing
# ---------------------------------------------------------------------------


class TestTargets(unittest.TestCase):
    def test_parse_plain_target(self) -> None:
        self.assertEqual(parse_target("os:getpid"), (None, "os:getpid"))

    def test_parse_labelled_target(self) -> None:
        self.assertEqual(parse_target("pid = os:getpid"), ("pid", "os:getpid"))

    def test_parse_empty_label(self) -> None:
        self.assertEqual(parse_target("=os:getpid"), (None, "os:getpid"))

    def test_parse_rejects_missing_colon(self) -> None:
        with self.assertRaises(click.BadParameter):
            parse_target("os.getpid")

    def test_parse_rejects_empty_attr(self) -> None:
        with self.assertRaises(click.BadParameter):
            parse_target("os:")

    def test_resolve_function(self) -> None:
        import os

        self.assertIs(resolve_target("os:getpid"), os.getpid)

    def test_resolve_dotted_attribute(self) -> None:
        self.assertIs(resolve_target("os:path.basename"), __import__("os").path.basename)

    def test_resolve_missing_module(self) -> None:
        with self.assertRaises(click.BadParameter):
            resolve_target("no_such_module_for_ratebench:f")

    def test_resolve_missing_attribute(self) -> None:
        with self.assertRaises(click.BadParameter):
            resolve_target("os:no_such_function")

    def test_resolve_not_callable(self) -> None:
        with self.assertRaises(click.BadParameter):
            resolve_target("os:sep")


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


class TestRun(unittest.TestCase):
    """Tests for ratebench run."""

    def test_single_target(self) -> None:
        result = CliRunner().invoke(main, ["run", *FAST_OPTIONS, "os:getpid"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("* os:getpid", result.output)
        self.assertIn("fastest: os:getpid", result.output)

    def test_labelled_targets(self) -> None:
        result = CliRunner().invoke(
            main, ["run", *FAST_OPTIONS, "pid=os:getpid", "clock=time:perf_counter"]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("pid", result.output)
        self.assertIn("clock", result.output)
        self.assertIn("Times slower", result.output)

    def test_history(self) -> None:
        result = CliRunner().invoke(main, ["run", *FAST_OPTIONS, "--history", "os:getpid"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Batch", result.output)

    def test_no_targets(self) -> None:
        result = CliRunner().invoke(main, ["run", *FAST_OPTIONS])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("no callables", result.output)

    def test_bad_target(self) -> None:
        result = CliRunner().invoke(main, ["run", *FAST_OPTIONS, "getpid"])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("module:attr", result.output)

    def test_window_out_of_range(self) -> None:
        result = CliRunner().invoke(main, ["run", *FAST_OPTIONS, "--window", "31", "os:getpid"])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("at most 30", result.output)

    def test_zero_calibration_budget(self) -> None:
        result = CliRunner().invoke(
            main, ["run", "--initial-batch-time", "0", "--no-gc", "-q", "os:getpid"]
        )
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("batch size", result.output.lower())

    def test_import_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            Path(tmpdir, "ratebench_cli_sample.py").write_text(
                "def work():\n    return sum(range(10))\n"
            )
            result = CliRunner().invoke(
                main,
                [
                    "run",
                    *FAST_OPTIONS,
                    "--import-path",
                    tmpdir,
                    "sample=ratebench_cli_sample:work",
                ],
            )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("* sample", result.output)

    def test_profile_benchmarks(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            profile = Path(tmpdir) / "bench.yaml"
            profile.write_text(
                yaml.safe_dump(
                    {
                        "initial_batch_time": 5,
                        "max_time": 50,
                        "collect_garbage": False,
                        "benchmarks": {"pid": "os:getpid"},
                    }
                )
            )
            result = CliRunner().invoke(
                main, ["run", "-q", "--profile", str(profile), "clock=time:perf_counter"]
            )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("pid", result.output)
        self.assertIn("clock", result.output)

    def test_profile_value_of_wrong_type(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            profile = Path(tmpdir) / "bench.yaml"
            profile.write_text("max_time: fast\n")
            result = CliRunner().invoke(
                main, ["run", "-q", "--profile", str(profile), "os:getpid"]
            )
        self.assertEqual(result.exit_code, 1)
        self.assertNotIsInstance(result.exception, TypeError)
        self.assertIn("max_time must be an integer", result.output)

    def test_profile_window_out_of_range(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            profile = Path(tmpdir) / "bench.yaml"
            profile.write_text("batches_to_work_across: 31\n")
            result = CliRunner().invoke(
                main, ["run", "-q", "--profile", str(profile), "os:getpid"]
            )
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("batches_to_work_across", result.output)


# ---------------------------------------------------------------------------
# show / export round trip
# ---------------------------------------------------------------------------


class TestSavedResults(unittest.TestCase):
    """Tests for run --output followed by show and export."""

    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)
        self.result_file = Path(self._tmpdir.name) / "results.json"
        result = CliRunner().invoke(
            main,
            [
                "run",
                *FAST_OPTIONS,
                "--output",
                str(self.result_file),
                "pid=os:getpid",
                "clock=time:perf_counter",
            ],
        )
        self.assertEqual(result.exit_code, 0, result.output)

    def test_output_file(self) -> None:
        data = json.loads(self.result_file.read_text())
        self.assertEqual([r["label"] for r in data["results"]], ["pid", "clock"])
        self.assertEqual(data["settings"]["max_time"], 50)
        self.assertFalse(data["settings"]["collect_garbage"])

    def test_show(self) -> None:
        result = CliRunner().invoke(main, ["show", str(self.result_file)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("pid", result.output)
        self.assertIn("fastest:", result.output)

    def test_show_history(self) -> None:
        result = CliRunner().invoke(main, ["show", "--history", str(self.result_file)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("batches of", result.output)

    def test_export_csv(self) -> None:
        result = CliRunner().invoke(main, ["export", "--format", "csv", str(self.result_file)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(result.output.startswith("label,batch,batch_size"))

    def test_export_markdown(self) -> None:
        result = CliRunner().invoke(main, ["export", str(self.result_file)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("| Rank |", result.output)
        self.assertIn("**", result.output)

    def test_export_to_file(self) -> None:
        out = Path(self._tmpdir.name) / "summary.md"
        result = CliRunner().invoke(
            main, ["export", "--output", str(out), str(self.result_file)]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(out.exists())
        self.assertIn("| Rank |", out.read_text())

    def test_show_missing_file(self) -> None:
        result = CliRunner().invoke(main, ["show", "/nonexistent/results.json"])
        self.assertNotEqual(result.exit_code, 0)

    def test_show_result_without_runs(self) -> None:
        data = json.loads(self.result_file.read_text())
        data["results"][0]["runs"] = []
        broken = Path(self._tmpdir.name) / "broken.json"
        broken.write_text(json.dumps(data))
        result = CliRunner().invoke(main, ["show", str(broken)])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("has no runs", result.output)

    def test_export_result_without_label(self) -> None:
        data = json.loads(self.result_file.read_text())
        del data["results"][1]["label"]
        broken = Path(self._tmpdir.name) / "broken.json"
        broken.write_text(json.dumps(data))
        result = CliRunner().invoke(main, ["export", str(broken)])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Not a ratebench result file", result.output)

    def test_show_not_a_result_file(self) -> None:
        other = Path(self._tmpdir.name) / "other.json"
        other.write_text("{}")
        result = CliRunner().invoke(main, ["show", str(other)])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("Not a ratebench result file", result.output)


# ---------------------------------------------------------------------------
# settings
# ---------------------------------------------------------------------------


class TestSettingsCommand(unittest.TestCase):
    def test_defaults(self) -> None:
        result = CliRunner().invoke(main, ["settings"])
        self.assertEqual(result.exit_code, 0, result.output)
        data = yaml.safe_load(result.output)
        self.assertEqual(data["initial_batch_time"], 500)
        self.assertEqual(data["batches_to_work_across"], 10)

    def test_profile(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            profile = Path(tmpdir) / "bench.yaml"
            profile.write_text("max_time: 1234\n")
            result = CliRunner().invoke(main, ["settings", "--profile", str(profile)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(yaml.safe_load(result.output)["max_time"], 1234)

    def test_invalid_profile(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            profile = Path(tmpdir) / "bench.yaml"
            profile.write_text("batches_to_work_across: 31\n")
            result = CliRunner().invoke(main, ["settings", "--profile", str(profile)])
        self.assertNotEqual(result.exit_code, 0)

    def test_profile_value_of_wrong_type(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            profile = Path(tmpdir) / "bench.yaml"
            profile.write_text("max_time: fast\n")
            result = CliRunner().invoke(main, ["settings", "--profile", str(profile)])
        self.assertEqual(result.exit_code, 1)
        self.assertIsInstance(result.exception, SystemExit)
        self.assertIn("max_time must be an integer", result.output)


if __name__ == "__main__":
    unittest.main()
