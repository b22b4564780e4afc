"""Test suite discovery.

Resolves the configured ``test_suites_path`` into the list of suite files to
plan for.  A value containing a glob wildcard is expanded with :mod:`glob`;
any other value is treated as a directory root and walked recursively.  The
directory walk is deprecated and kept only for existing configurations.
"""

from __future__ import annotations

import glob
import logging
import os
import re
import warnings
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from shardplan.config import PlanConfig

logger = logging.getLogger(__name__)

_GLOB_CHARS = frozenset("*?[")

TREE_WALK_DEPRECATION = (
    "DEPRECATED: using a directory path is deprecated and will be removed, "
    "switch to a glob pattern"
)


class DiscoveryError(Exception):
    """Raised when the suite list cannot be produced."""


class SuiteLocatorStrategy(Protocol):
    """One way of turning a path specification into suite paths."""

    name: str

    def find(self, spec: str) -> list[str]:
        """Return the suite paths for *spec*."""
        ...


class GlobStrategy:
    """Expand a glob pattern (``**`` matches across directories)."""

    name = "glob"

    def find(self, spec: str) -> list[str]:
        try:
            return glob.glob(spec, recursive=True)
        except (OSError, ValueError, re.error) as exc:
            msg = f"Failed to expand pattern {spec!r}: {exc}"
            raise DiscoveryError(msg) from exc


class TreeWalkStrategy:
    """Recursively list every regular file under a directory (deprecated)."""

    name = "tree-walk"

    def find(self, spec: str) -> list[str]:
        warnings.warn(TREE_WALK_DEPRECATION, DeprecationWarning, stacklevel=2)
        logger.warning(TREE_WALK_DEPRECATION)
        try:
            return _walk(spec)
        except OSError as exc:
            msg = f"Failed to read test suites directory {spec!r}: {exc}"
            raise DiscoveryError(msg) from exc


def _walk(directory: str) -> list[str]:
    """Depth-first listing in directory-read order."""
    files: list[str] = []
    with os.scandir(directory) as entries:
        children = list(entries)
    for entry in children:
        name = os.path.join(directory, entry.name)
        if entry.is_dir():
            files.extend(_walk(name))
        else:
            files.append(name)
    return files


@dataclass(frozen=True)
class Discovery:
    """Result of suite discovery."""

    suites: tuple[str, ...]
    """Discovered suite paths, in enumeration order."""

    strategy: str
    """Name of the strategy that produced ``suites``."""

    config: PlanConfig
    """Configuration with the thread count adjusted to the suite count."""


def is_glob_pattern(spec: str) -> bool:
    """Return True when *spec* contains a glob wildcard character."""
    return any(ch in _GLOB_CHARS for ch in spec)


def select_strategy(spec: str) -> SuiteLocatorStrategy:
    """Pick the discovery strategy for a path specification."""
    if is_glob_pattern(spec):
        return GlobStrategy()
    return TreeWalkStrategy()


def locate_suites(config: PlanConfig) -> Discovery:
    """Discover test suites and settle the effective thread count.

    Raises:
        DiscoveryError: If the pattern cannot be expanded or the directory
            cannot be read.  No partial result is returned.
    """
    spec = config.test_suites_path
    strategy = select_strategy(spec)
    if strategy.name == GlobStrategy.name:
        logger.info("Using pattern %s to find test suites", spec)
    else:
        logger.info("Walking directory %s to find test suites", spec)

    suites = tuple(strategy.find(spec))

    logger.info("%d test suite(s) found.", len(suites))
    logger.log(
        logging.INFO if config.verbose else logging.DEBUG,
        "Paths to found suites:\n%s",
        "\n".join(suites),
    )

    effective = config.with_suite_count(len(suites))
    if effective.thread_count != config.thread_count:
        logger.info(
            "Thread setting is %d, but only %d test suite(s) were found. "
            "Adjusting configuration accordingly.",
            config.thread_count,
            len(suites),
        )

    return Discovery(suites=suites, strategy=strategy.name, config=effective)
