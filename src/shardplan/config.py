"""Configuration parsing from ``.shardplan.yml``."""

from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".shardplan.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")
_TRUTHY = {"1", "true", "yes", "on"}

DEFAULT_TEST_SUITES_PATH = "tests/**/*.spec.js"
DEFAULT_THREAD_COUNT = 2
DEFAULT_WEIGHTS_JSON = "shardplan-weights.json"
DEFAULT_WEIGHT = 1.0


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


@dataclass(frozen=True)
class PlanConfig:
    """Settings for one planning run.

    Instances are immutable.  The locator produces an adjusted copy through
    :meth:`with_suite_count`; nothing else changes the thread count.
    """

    test_suites_path: str = DEFAULT_TEST_SUITES_PATH
    """Glob pattern (or, deprecated, a directory root) locating the suites."""

    thread_count: int = DEFAULT_THREAD_COUNT
    """Number of parallel workers to plan for."""

    weights_json: str = DEFAULT_WEIGHTS_JSON
    """Path to the JSON weight table."""

    default_weight: float = DEFAULT_WEIGHT
    """Weight of a suite that matches no weight table entry."""

    verbose: bool = False
    """Log the full list of discovered suites."""

    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
    """Raw parsed YAML for extension/debugging."""

    def with_suite_count(self, suite_count: int) -> PlanConfig:
        """Return the config to use once *suite_count* suites are known.

        The thread count is lowered to *suite_count* when fewer suites than
        threads were found; otherwise ``self`` is returned unchanged.
        """
        if suite_count < self.thread_count:
            return replace(self, thread_count=suite_count)
        return self

    def with_overrides(self, **overrides: Any) -> PlanConfig:
        """Return a copy with every non-``None`` override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        return replace(self, **changes)


def _parse_plan_config(raw: dict[str, Any]) -> PlanConfig:
    """Parse the ``plan`` section, falling back to ``SHARDPLAN_*`` env vars."""
    plan_raw = raw.get("plan", {})
    if not isinstance(plan_raw, dict):
        plan_raw = {}

    return PlanConfig(
        test_suites_path=str(
            plan_raw.get(
                "test_suites_path",
                os.environ.get("SHARDPLAN_TEST_SUITES_PATH", DEFAULT_TEST_SUITES_PATH),
            )
        ),
        thread_count=int(
            plan_raw.get(
                "thread_count", os.environ.get("SHARDPLAN_THREAD_COUNT", DEFAULT_THREAD_COUNT)
            )
        ),
        weights_json=str(
            plan_raw.get(
                "weights_json", os.environ.get("SHARDPLAN_WEIGHTS_JSON", DEFAULT_WEIGHTS_JSON)
            )
        ),
        default_weight=float(
            plan_raw.get(
                "default_weight", os.environ.get("SHARDPLAN_DEFAULT_WEIGHT", DEFAULT_WEIGHT)
            )
        ),
        verbose=_as_bool(plan_raw.get("verbose", os.environ.get("SHARDPLAN_VERBOSE", False))),
        raw=raw,
    )


def load_config(root: str | Path) -> PlanConfig:
    """Load and parse ``.shardplan.yml`` from *root*.

    Falls back to defaults and environment variables when the YAML file is
    missing or incomplete.
    """
    config_file = Path(root).resolve() / CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_file.is_file():
        text = config_file.read_text(encoding="utf-8")
        parsed = yaml.safe_load(text)
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)
        else:
            logger.debug("Ignoring %s: top level is not a mapping", config_file)

    return _parse_plan_config(raw)


def validate_config(config: PlanConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []

    if not config.test_suites_path.strip():
        errors.append("plan.test_suites_path is required")

    if config.thread_count < 1:
        errors.append(f"plan.thread_count must be at least 1 (got: {config.thread_count})")

    if not math.isfinite(config.default_weight) or config.default_weight <= 0:
        errors.append(
            f"plan.default_weight must be positive and finite (got: {config.default_weight})"
        )

    return errors
