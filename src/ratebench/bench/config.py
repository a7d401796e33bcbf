"""Benchmark settings and YAML profile loading.

Handles:
- The immutable BenchSettings value and its validation.
- Loading settings (and optionally benchmark targets) from YAML profiles.
- Merging CLI options with profile values.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ratebench.bench.stats import MAX_WINDOW
from ratebench.errors import ConfigurationError

log = logging.getLogger("ratebench")


# ---------------------------------------------------------------------------
# BenchSettings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BenchSettings:
    """Settings that control calibration and convergence.

    Values are validated on construction; use :meth:`with_overrides` or
    :func:`dataclasses.replace` to derive a modified copy.
    """

    initial_batch_time: int = 500  # ms spent calibrating the batch size
    minimum_error_to_accept: float = 1.0  # relative error (%) to stop at
    batches_to_work_across: int = 10  # trailing window for statistics
    max_time: int = 5000  # ms ceiling for the measurement loop
    verbose: bool = False
    collect_garbage: bool = True  # run gc before every batch

    def __post_init__(self) -> None:
        errors = validate_settings(self)
        if errors:
            raise ConfigurationError("; ".join(errors))

    def with_overrides(self, **overrides: Any) -> BenchSettings:
        """Return a copy with the non-None *overrides* applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(changes) - SETTING_NAMES
        if unknown:
            raise ConfigurationError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON/YAML-compatible dict."""
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BenchSettings:
        """Deserialize from a dict, ignoring unknown fields."""
        filtered = {k: v for k, v in data.items() if k in SETTING_NAMES}
        return cls(**filtered)


SETTING_NAMES = frozenset(f.name for f in dataclasses.fields(BenchSettings))


def default_settings() -> BenchSettings:
    """Return a fresh settings value with every default."""
    return BenchSettings()


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


_INT_SETTINGS = ("initial_batch_time", "batches_to_work_across", "max_time")
_BOOL_SETTINGS = ("verbose", "collect_garbage")


def _type_errors(settings: BenchSettings) -> dict[str, str]:
    """Map each setting holding a value of the wrong type to its message."""
    errors: dict[str, str] = {}
    for name in _INT_SETTINGS:
        value = getattr(settings, name)
        # bool is an int subclass.
        if isinstance(value, bool) or not isinstance(value, int):
            errors[name] = f"{name} must be an integer (got {value!r})"

    value = settings.minimum_error_to_accept
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        errors["minimum_error_to_accept"] = (
            f"minimum_error_to_accept must be a number (got {value!r})"
        )

    for name in _BOOL_SETTINGS:
        value = getattr(settings, name)
        if not isinstance(value, bool):
            errors[name] = f"{name} must be true or false (got {value!r})"
    return errors


def validate_settings(settings: BenchSettings) -> list[str]:
    """Validate a settings value.

    Type errors are reported first; range checks only run on values of
    the right type.

    Returns a list of error messages.  Empty list means valid.
    """
    type_errors = _type_errors(settings)
    errors = list(type_errors.values())

    window = settings.batches_to_work_across
    if "batches_to_work_across" not in type_errors:
        if window > MAX_WINDOW:
            errors.append(
                f"batches_to_work_across can be at most {MAX_WINDOW}, the number of "
                f"stored t-distribution values (got {window})"
            )
        elif window < 1:
            errors.append(f"batches_to_work_across must be at least 1 (got {window})")

    for name in ("initial_batch_time", "max_time", "minimum_error_to_accept"):
        value = getattr(settings, name)
        if name not in type_errors and value < 0:
            errors.append(f"{name} cannot be negative (got {value})")

    return errors


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a benchmark profile from a YAML file.

    Profile format::

        initial_batch_time: 250
        minimum_error_to_accept: 0.5
        batches_to_work_across: 10
        max_time: 3000
        verbose: false
        collect_garbage: true

        benchmarks:
          dumps: "json:dumps_sample"
          pickle: "mybench.cases:pickle_sample"

    Returns:
        The parsed YAML as a dict.
    """
    import yaml

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    data = yaml.safe_load(profile_path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    return data


def settings_from_profile(
    profile_data: dict[str, Any],
    *,
    cli_overrides: dict[str, Any] | None = None,
    base: BenchSettings | None = None,
) -> BenchSettings:
    """Build BenchSettings from a parsed profile.

    CLI overrides take precedence over profile values; ``None`` values in
    *cli_overrides* mean "not given".

    Raises:
        ConfigurationError: On unknown keys or invalid values.
    """
    values = {k: v for k, v in profile_data.items() if k != "benchmarks"}
    unknown = set(values) - SETTING_NAMES
    if unknown:
        raise ConfigurationError(f"Unknown profile key(s): {', '.join(sorted(unknown))}")

    for key, value in (cli_overrides or {}).items():
        if value is not None:
            values[key] = value

    settings = (base or default_settings()).with_overrides(**values)
    log.debug("Resolved settings: %s", settings)
    return settings


def benchmarks_from_profile(profile_data: dict[str, Any]) -> list[tuple[str, str]]:
    """Return ``(label, target)`` pairs from a profile's ``benchmarks`` mapping."""
    section = profile_data.get("benchmarks") or {}
    if not isinstance(section, dict):
        raise ConfigurationError("Profile 'benchmarks' must be a mapping of label -> module:attr")

    pairs: list[tuple[str, str]] = []
    for label, target in section.items():
        if not isinstance(target, str) or ":" not in target:
            raise ConfigurationError(
                f"Benchmark '{label}' must name a target as 'module:attr', got {target!r}"
            )
        pairs.append((str(label), target))
    return pairs
