"""Tests for shardplan.sharding.partitioner."""

from __future__ import annotations

import itertools
import random

import pytest

from shardplan.sharding.partitioner import (
    Assignment,
    Bin,
    distribute_suites_by_weight,
    partition,
    sort_by_weight,
)
from shardplan.sharding.weights import WeightedSuite, WeightTable


def _suites(**weights: float) -> list[WeightedSuite]:
    return [WeightedSuite(path=name, weight=w) for name, w in weights.items()]


def _random_suites(rng: random.Random, count: int) -> list[WeightedSuite]:
    return [WeightedSuite(path=f"suite_{i}.spec.js", weight=rng.randint(1, 20)) for i in range(count)]


def _optimal_makespan(weights: list[float], bin_count: int) -> float:
    best = float("inf")
    for choice in itertools.product(range(bin_count), repeat=len(weights)):
        loads = [0.0] * bin_count
        for w, b in zip(weights, choice, strict=True):
            loads[b] += w
        best = min(best, max(loads))
    return best


class TestSortByWeight:
    def test_descending(self) -> None:
        result = sort_by_weight(_suites(a=1, b=3, c=2))
        assert [s.path for s in result] == ["b", "c", "a"]

    def test_ties_keep_input_order(self) -> None:
        result = sort_by_weight(_suites(x=2, y=5, z=2, w=2))
        assert [s.path for s in result] == ["y", "x", "z", "w"]


class TestPartition:
    def test_worked_example(self) -> None:
        assignment = partition(_suites(a=5, b=1, c=4, d=3), 2)

        assert assignment[0].paths == ["a", "b"]
        assert assignment[1].paths == ["c", "d"]
        assert assignment[0].weight == 6
        assert assignment[1].weight == 7
        assert assignment.makespan == 7

    def test_single_bin_gets_everything_sorted(self) -> None:
        assignment = partition(_suites(a=1, b=3, c=2, d=3), 1)

        assert len(assignment) == 1
        assert assignment[0].paths == ["b", "d", "c", "a"]

    def test_equal_loads_prefer_lowest_index(self) -> None:
        assignment = partition(_suites(a=1, b=1, c=1, d=1, e=1), 3)

        assert [b.paths for b in assignment] == [["a", "d"], ["b", "e"], ["c"]]

    def test_more_bins_than_suites_leaves_trailing_bins_empty(self) -> None:
        assignment = partition(_suites(a=2, b=1), 4)

        assert [b.paths for b in assignment] == [["a"], ["b"], [], []]

    def test_zero_bins_no_suites(self) -> None:
        assignment = partition([], 0)

        assert len(assignment) == 0
        assert assignment.makespan == 0
        assert assignment.lower_bound == 0

    def test_zero_bins_with_suites_raises(self) -> None:
        with pytest.raises(ValueError, match="into 0 bins"):
            partition(_suites(a=1), 0)

    def test_negative_bin_count_raises(self) -> None:
        with pytest.raises(ValueError, match="bin_count must be >= 0"):
            partition([], -1)

    def test_one_bin_no_suites(self) -> None:
        assignment = partition([], 1)

        assert len(assignment) == 1
        assert assignment[0].suites == []
        assert assignment[0].weight == 0

    def test_bins_are_in_index_order(self) -> None:
        assignment = partition(_suites(a=9, b=8, c=7, d=1), 3)
        assert [b.index for b in assignment] == [0, 1, 2]

    def test_fractional_weights(self) -> None:
        assignment = partition(_suites(a=0.5, b=2.25, c=1.75), 2)

        assert assignment[0].paths == ["b"]
        assert assignment[1].paths == ["c", "a"]
        assert assignment.total_weight == pytest.approx(4.5)


class TestPartitionProperties:
    @pytest.mark.parametrize("seed", range(20))
    def test_conservation(self, seed: int) -> None:
        rng = random.Random(seed)
        suites = _random_suites(rng, rng.randint(1, 40))
        bin_count = rng.randint(1, 8)

        assignment = partition(suites, bin_count)

        assert len(assignment) == bin_count
        placed = [p for b in assignment for p in b.paths]
        assert sorted(placed) == sorted(s.path for s in suites)
        assert len(placed) == len(set(placed))
        assert assignment.total_weight == sum(s.weight for s in suites)

    @pytest.mark.parametrize("seed", range(20))
    def test_makespan_not_below_pigeonhole_bound(self, seed: int) -> None:
        rng = random.Random(seed)
        suites = _random_suites(rng, rng.randint(1, 40))
        bin_count = rng.randint(1, 8)

        assignment = partition(suites, bin_count)

        assert assignment.makespan >= assignment.lower_bound
        assert assignment.makespan >= max(s.weight for s in suites)

    @pytest.mark.parametrize("seed", range(15))
    def test_within_lpt_bound_of_optimum(self, seed: int) -> None:
        rng = random.Random(seed)
        suites = _random_suites(rng, rng.randint(2, 7))
        bin_count = rng.randint(2, 3)

        assignment = partition(suites, bin_count)
        optimum = _optimal_makespan([s.weight for s in suites], bin_count)

        assert optimum <= assignment.makespan
        assert assignment.makespan <= (4 / 3 - 1 / (3 * bin_count)) * optimum + 1e-9

    def test_deterministic(self) -> None:
        rng = random.Random(7)
        suites = [WeightedSuite(path=f"s{i}", weight=rng.choice([1, 2, 3])) for i in range(50)]

        first = partition(suites, 4)
        second = partition(list(suites), 4)

        assert [b.paths for b in first] == [b.paths for b in second]


class TestAssignment:
    def test_to_dict(self) -> None:
        assignment = Assignment(
            bins=(
                Bin(index=0, suites=[WeightedSuite("a", 2.0)]),
                Bin(index=1, suites=[]),
            )
        )

        assert assignment.to_dict() == {
            "threads": [
                {"index": 0, "weight": 2.0, "list": [{"path": "a", "weight": 2.0}]},
                {"index": 1, "weight": 0, "list": []},
            ]
        }

    def test_lower_bound_and_counts(self) -> None:
        assignment = partition(_suites(a=3, b=3, c=2), 2)

        assert assignment.suite_count == 3
        assert assignment.total_weight == 8
        assert assignment.lower_bound == 4


class TestDistributeSuitesByWeight:
    def test_uses_table_and_default(self) -> None:
        table = WeightTable(entries={"checkout.spec.js": 8.0})
        paths = ["e2e/login.spec.js", "e2e/shop/checkout.spec.js", "e2e/home.spec.js"]

        assignment = distribute_suites_by_weight(paths, table, 1.0, 2)

        assert assignment[0].paths == ["e2e/shop/checkout.spec.js"]
        assert assignment[1].paths == ["e2e/login.spec.js", "e2e/home.spec.js"]
        assert assignment[0].suites[0].weight == 8.0

    def test_empty_table_keeps_input_order(self) -> None:
        paths = ["a", "b", "c", "d"]

        assignment = distribute_suites_by_weight(paths, WeightTable(), 1.0, 2)

        assert [b.paths for b in assignment] == [["a", "c"], ["b", "d"]]
