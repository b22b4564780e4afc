"""Weighted test-suite partitioning for parallel test runners."""

__version__ = "0.1.0"
