"""Reporters for presenting discovery and planning results."""

from __future__ import annotations

from shardplan.reporters.terminal import reporter

__all__ = [
    "reporter",
]
