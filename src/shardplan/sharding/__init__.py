"""Suite discovery and weighted partitioning for parallel test execution."""

from shardplan.sharding.locator import (
    Discovery,
    DiscoveryError,
    GlobStrategy,
    TreeWalkStrategy,
    is_glob_pattern,
    locate_suites,
)
from shardplan.sharding.partitioner import (
    Assignment,
    Bin,
    distribute_suites_by_weight,
    partition,
)
from shardplan.sharding.plan_file import read_plan, write_plan
from shardplan.sharding.planner import SuitePlan, plan_suites, plan_suites_async
from shardplan.sharding.weights import (
    WeightedSuite,
    WeightTable,
    WeightTableUnavailable,
    load_weight_table,
    read_weight_table,
    resolve_weights,
)

__all__ = [
    "Assignment",
    "Bin",
    "Discovery",
    "DiscoveryError",
    "GlobStrategy",
    "SuitePlan",
    "TreeWalkStrategy",
    "WeightTable",
    "WeightTableUnavailable",
    "WeightedSuite",
    "distribute_suites_by_weight",
    "is_glob_pattern",
    "load_weight_table",
    "locate_suites",
    "partition",
    "plan_suites",
    "plan_suites_async",
    "read_plan",
    "read_weight_table",
    "resolve_weights",
    "write_plan",
]
