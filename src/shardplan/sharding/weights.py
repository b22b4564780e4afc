"""Suite weight table.

The weight table is a JSON object keyed by path suffix::

    {"checkout.spec.js": {"weight": 8}, "admin/users.spec.js": {"weight": 3}}

A suite takes the weight of the longest key its path ends with, or the
configured default weight when no key matches.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)


class WeightTableUnavailable(Exception):
    """The weight table file is missing or unreadable.

    Never fatal: :func:`load_weight_table` logs it and falls back to an
    empty table.
    """


@dataclass(frozen=True)
class WeightedSuite:
    """A suite path paired with its resolved weight."""

    path: str
    weight: float


@dataclass(frozen=True)
class WeightTable:
    """Suffix pattern -> weight overrides."""

    entries: Mapping[str, float] = field(default_factory=dict)
    """Validated weights keyed by path suffix."""

    source: str | None = None
    """File the table was read from, ``None`` for an empty fallback table."""

    def __len__(self) -> int:
        return len(self.entries)

    def match(self, path: str) -> str | None:
        """Return the longest key that *path* ends with, if any."""
        normalized = PurePath(path).as_posix()
        best: str | None = None
        for suffix in self.entries:
            if (path.endswith(suffix) or normalized.endswith(suffix)) and (
                best is None or len(suffix) > len(best)
            ):
                best = suffix
        return best

    def weight_for(self, path: str, default: float) -> float:
        """Resolve the weight of *path*, using *default* when nothing matches."""
        suffix = self.match(path)
        if suffix is None:
            return default
        return self.entries[suffix]


def _parse_entry(key: str, value: Any) -> float | None:
    """Return the weight of one table entry, or None if it is unusable."""
    if not isinstance(value, dict):
        logger.warning("Ignoring weight entry %r: expected an object, got %r", key, value)
        return None
    weight = value.get("weight")
    if isinstance(weight, bool) or not isinstance(weight, int | float):
        logger.warning("Ignoring weight entry %r: 'weight' must be a number", key)
        return None
    if not math.isfinite(weight) or weight <= 0:
        logger.warning(
            "Ignoring weight entry %r: weight must be a positive finite number (got %s)",
            key,
            weight,
        )
        return None
    return float(weight)


def parse_weight_table(data: Any, source: str | None = None) -> WeightTable:
    """Build a :class:`WeightTable` from decoded JSON.

    Raises:
        WeightTableUnavailable: If *data* is not a JSON object.
    """
    if not isinstance(data, dict):
        msg = f"Weight file {source} must contain a JSON object"
        raise WeightTableUnavailable(msg)

    entries: dict[str, float] = {}
    for key, value in data.items():
        weight = _parse_entry(str(key), value)
        if weight is not None:
            entries[str(key)] = weight
    return WeightTable(entries=entries, source=source)


def read_weight_table(path: str | Path) -> WeightTable:
    """Read the weight table at *path*.

    Raises:
        WeightTableUnavailable: If the file is missing, unreadable, or not a
            JSON object.
    """
    source = str(path)
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Weight file not found in path: {source}"
        raise WeightTableUnavailable(msg) from exc
    except UnicodeDecodeError as exc:
        msg = f"Weight file {source} could not be parsed: {exc}"
        raise WeightTableUnavailable(msg) from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        msg = f"Weight file {source} could not be parsed: {exc}"
        raise WeightTableUnavailable(msg) from exc

    return parse_weight_table(data, source)


def load_weight_table(path: str | Path) -> WeightTable:
    """Read the weight table, degrading to an empty table on any failure."""
    try:
        table = read_weight_table(path)
    except WeightTableUnavailable as exc:
        logger.info("%s", exc)
        return WeightTable()
    logger.debug("Loaded %d weight entries from %s", len(table), path)
    return table


def resolve_weights(
    paths: Iterable[str],
    table: WeightTable,
    default_weight: float,
) -> list[WeightedSuite]:
    """Pair every path with its weight, preserving input order."""
    return [WeightedSuite(path=p, weight=table.weight_for(p, default_weight)) for p in paths]
