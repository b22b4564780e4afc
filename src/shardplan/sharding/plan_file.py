"""Plan serialization for handing the split to a worker launcher."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from shardplan.sharding.partitioner import Assignment, Bin
from shardplan.sharding.weights import WeightedSuite

if TYPE_CHECKING:
    from pathlib import Path

    from shardplan.sharding.planner import SuitePlan


def write_plan(plan: SuitePlan, output_path: Path) -> None:
    """Serialize and write a plan to a JSON file."""
    data = _serialize_plan(plan)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def read_plan(path: Path) -> Assignment:
    """Read the assignment back from a plan file.

    Raises:
        ValueError: If the file is not a plan document.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not isinstance(data.get("threads"), list):
        msg = f"{path} is not a plan file: missing 'threads' list"
        raise ValueError(msg)

    bins: list[Bin] = []
    for position, thread in enumerate(data["threads"]):
        try:
            suites = [
                WeightedSuite(path=str(entry["path"]), weight=float(entry["weight"]))
                for entry in thread["list"]
            ]
            index = int(thread.get("index", position))
        except (KeyError, TypeError, ValueError) as exc:
            msg = f"{path}: malformed thread entry #{position}: {exc}"
            raise ValueError(msg) from exc
        bins.append(Bin(index=index, suites=suites))

    return Assignment(bins=tuple(bins))


def _serialize_plan(plan: SuitePlan) -> dict[str, Any]:
    """Convert a plan to a JSON-serializable dict."""
    payload: dict[str, Any] = {
        "test_suites_path": plan.config.test_suites_path,
        "thread_count": plan.config.thread_count,
        "default_weight": plan.config.default_weight,
        "weights_source": plan.weights.source,
        "suite_count": plan.assignment.suite_count,
        "makespan": plan.assignment.makespan,
    }
    payload.update(plan.assignment.to_dict())
    return payload
