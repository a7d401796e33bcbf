"""Command-line interface for ratebench.

Subcommands:
    ratebench run        Benchmark importable zero-argument callables
    ratebench show       Display a saved result file
    ratebench export     Export a saved result file to CSV/Markdown
    ratebench settings   Print the effective settings
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import Any

import click

from ratebench import __version__
from ratebench.bench.config import (
    BenchSettings,
    benchmarks_from_profile,
    default_settings,
    load_profile,
    settings_from_profile,
)
from ratebench.bench.results import BenchmarkSpec
from ratebench.errors import RateBenchError
from ratebench.logging import get_logger, setup_logging

log = get_logger("cli")


# ---------------------------------------------------------------------------
# Target resolution
# ---------------------------------------------------------------------------


def parse_target(text: str) -> tuple[str | None, str]:
    """Split ``label=module:attr`` into (label, target); label is optional."""
    label: str | None = None
    target = text
    if "=" in text:
        label, target = text.split("=", 1)
        label = label.strip() or None
    target = target.strip()
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise click.BadParameter(f"Expected 'module:attr' or 'label=module:attr', got '{text}'")
    return label, target


def resolve_target(target: str) -> Any:
    """Import ``module:attr`` (attr may be dotted) and return the object."""
    module_name, _, attr_path = target.partition(":")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(f"Cannot import module '{module_name}': {exc}") from exc
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise click.BadParameter(f"'{target}' has no attribute '{part}'") from exc
    if not callable(obj):
        raise click.BadParameter(f"'{target}' is not callable")
    return obj


def _load_settings(
    profile_path: Path | None,
    cli_overrides: dict[str, Any],
) -> tuple[BenchSettings, dict[str, Any]]:
    profile = load_profile(profile_path) if profile_path else {}
    return settings_from_profile(profile, cli_overrides=cli_overrides), profile


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """ratebench: measure and rank the throughput of Python callables."""


@main.command()
@click.argument("targets", nargs=-1)
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML profile with settings and/or benchmark targets.",
)
@click.option("--initial-batch-time", type=int, default=None, help="Calibration budget in ms.")
@click.option("--max-error", type=float, default=None, help="Relative error (%) to stop at.")
@click.option("--window", type=int, default=None, help="Batches used for statistics.")
@click.option("--max-time", type=int, default=None, help="Time ceiling per callable in ms.")
@click.option("--no-gc", is_flag=True, default=False, help="Skip gc before each batch.")
@click.option(
    "--import-path",
    "import_paths",
    type=click.Path(exists=True, file_okay=False),
    multiple=True,
    help="Directory to prepend to sys.path before importing targets (repeatable).",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Save results as JSON to this file.",
)
@click.option("--history", is_flag=True, default=False, help="Also print per-batch statistics.")
@click.option("-v", "--verbose", is_flag=True, help="Show per-batch diagnostics.")
@click.option("-q", "--quiet", is_flag=True, help="Only show errors.")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), default=None)
def run(  # noqa: PLR0913
    targets: tuple[str, ...],
    profile_path: Path | None,
    initial_batch_time: int | None,
    max_error: float | None,
    window: int | None,
    max_time: int | None,
    no_gc: bool,
    import_paths: tuple[str, ...],
    output: Path | None,
    history: bool,
    verbose: bool,
    quiet: bool,
    log_file: Path | None,
) -> None:
    """Benchmark zero-argument callables given as module:attr.

    \b
    Examples:
        ratebench run json:dumps_sample pickle=mybench:pickle_sample
        ratebench run --profile bench.yaml --max-time 2000
    """
    from ratebench.bench.display import format_history
    from ratebench.bench.results import save_suite
    from ratebench.bench.runner import BenchRunner

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    for path in reversed(import_paths):
        sys.path.insert(0, path)

    try:
        settings, profile = _load_settings(
            profile_path,
            {
                "initial_batch_time": initial_batch_time,
                "minimum_error_to_accept": max_error,
                "batches_to_work_across": window,
                "max_time": max_time,
                "verbose": True if verbose else None,
                "collect_garbage": False if no_gc else None,
            },
        )
        pairs: list[tuple[str | None, str]] = list(benchmarks_from_profile(profile))
    except (RateBenchError, FileNotFoundError) as exc:
        raise click.ClickException(str(exc)) from exc
    pairs.extend(parse_target(t) for t in targets)

    specs = [
        BenchmarkSpec.create(resolve_target(target), label or target, position)
        for position, (label, target) in enumerate(pairs, start=1)
    ]

    log.info("Benchmarking %d callable(s)", len(specs))
    try:
        suite = BenchRunner(settings).run(specs)
    except RateBenchError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(suite.summary())
    if history:
        for result in suite:
            click.echo("")
            click.echo(format_history(result))

    if output is not None:
        save_suite(output, suite, settings)
        log.info("Results written to %s", output)


@main.command()
@click.argument("result_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--history", is_flag=True, default=False, help="Also print per-batch statistics.")
def show(result_file: Path, history: bool) -> None:
    """Display the ranking stored in RESULT_FILE."""
    from ratebench.bench.display import format_history
    from ratebench.bench.results import load_suite

    try:
        suite, _settings = load_suite(result_file)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(suite.summary())
    if history:
        for result in suite:
            click.echo("")
            click.echo(format_history(result))


@main.command()
@click.argument("result_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "markdown"]),
    default="markdown",
    show_default=True,
)
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), default=None)
def export(result_file: Path, fmt: str, output: Path | None) -> None:
    """Export RESULT_FILE as CSV (per batch) or Markdown (ranking)."""
    from ratebench.bench.export import export_csv, export_markdown
    from ratebench.bench.results import load_suite

    try:
        suite, _settings = load_suite(result_file)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc

    text = export_csv(suite) if fmt == "csv" else export_markdown(suite)
    if output is not None:
        output.write_text(text)
        click.echo(f"Wrote {fmt} export to {output}")
    else:
        click.echo(text, nl=False)


@main.command()
@click.option(
    "--profile",
    "profile_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML profile to merge over the defaults.",
)
def settings(profile_path: Path | None) -> None:
    """Print the effective settings as YAML."""
    import yaml

    try:
        resolved = (
            settings_from_profile(load_profile(profile_path))
            if profile_path
            else default_settings()
        )
    except RateBenchError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(yaml.safe_dump(resolved.to_dict(), sort_keys=False), nl=False)


if __name__ == "__main__":
    main()
