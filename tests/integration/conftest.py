"""Shared fixtures for integration tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

# ── Marker registration ──────────────────────────────────────────


def pytest_configure(config: pytest.Config) -> None:
    """Register the ``integration`` marker."""
    config.addinivalue_line("markers", "integration: integration tests")


# ── File creation helpers ────────────────────────────────────────


def make_files(root: Path, rel_paths: list[str]) -> None:
    """Create empty files (with parent directories) under *root*."""
    for rel in rel_paths:
        f = root / rel
        f.parent.mkdir(parents=True, exist_ok=True)
        f.touch()


def write_json(root: Path, rel: str, data: dict[str, Any]) -> None:
    """Write a JSON file under *root*."""
    f = root / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ── Project scaffolding fixtures ─────────────────────────────────

_CYPRESS_SUITES = {
    "cypress/e2e/auth/login.cy.js": 3,
    "cypress/e2e/auth/signup.cy.js": 2,
    "cypress/e2e/shop/checkout.cy.js": 8,
    "cypress/e2e/shop/cart.cy.js": 5,
    "cypress/e2e/shop/search.cy.js": 4,
    "cypress/e2e/admin/users.cy.js": 6,
    "cypress/e2e/admin/reports.cy.js": 7,
    "cypress/e2e/home.cy.js": None,
    "cypress/e2e/about.cy.js": None,
}


@pytest.fixture()
def cypress_suites() -> dict[str, int | None]:
    """Relative suite paths and the weight recorded for each (None = unlisted)."""
    return dict(_CYPRESS_SUITES)


@pytest.fixture()
def cypress_project(tmp_path: Path, cypress_suites: dict[str, int | None]) -> Path:
    """Create a Cypress-style project with a weight table keyed by file suffix."""
    make_files(tmp_path, list(cypress_suites))
    make_files(tmp_path, ["cypress/support/commands.js", "cypress/fixtures/user.json"])
    write_json(
        tmp_path,
        "cypress-weights.json",
        {
            # Suffix keys: directory depth in the discovered path does not matter.
            path.split("cypress/e2e/", 1)[1]: {"weight": weight}
            for path, weight in cypress_suites.items()
            if weight is not None
        },
    )
    return tmp_path
