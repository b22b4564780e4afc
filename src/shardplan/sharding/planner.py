"""End-to-end planning: discover suites, weigh them, split them."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from shardplan.config import PlanConfig
from shardplan.sharding.locator import Discovery, locate_suites
from shardplan.sharding.partitioner import Assignment, distribute_suites_by_weight
from shardplan.sharding.weights import WeightTable, load_weight_table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SuitePlan:
    """Everything a worker launcher needs to start the threads."""

    config: PlanConfig
    """Effective configuration (thread count already adjusted)."""

    discovery: Discovery
    """Suites found and how they were found."""

    weights: WeightTable
    """Weight table used for the split (possibly empty)."""

    assignment: Assignment
    """Suites per thread."""


def _build_plan(discovery: Discovery) -> SuitePlan:
    config = discovery.config
    weights = load_weight_table(config.weights_json)
    assignment = distribute_suites_by_weight(
        discovery.suites,
        weights,
        config.default_weight,
        config.thread_count,
    )
    logger.info(
        "Planned %d suite(s) across %d thread(s), heaviest thread weight %s",
        assignment.suite_count,
        len(assignment),
        assignment.makespan,
    )
    return SuitePlan(config=config, discovery=discovery, weights=weights, assignment=assignment)


def plan_suites(config: PlanConfig) -> SuitePlan:
    """Discover the suites for *config* and split them across its threads.

    Raises:
        DiscoveryError: If the suites cannot be discovered.
    """
    return _build_plan(locate_suites(config))


async def plan_suites_async(config: PlanConfig) -> SuitePlan:
    """Like :func:`plan_suites`, running discovery off the event loop."""
    discovery = await asyncio.to_thread(locate_suites, config)
    return _build_plan(discovery)
