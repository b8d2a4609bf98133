"""Pytest configuration for local package imports and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict

import pytest


def pytest_configure() -> None:
    """Ensure the repository root is on sys.path for imports."""

    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


DEMO_ID = "f887d5f0-4690-1e07-8efc-d16ea7711bfb"


@pytest.fixture
def descriptor() -> Dict[str, Any]:
    """Return a minimal valid project descriptor.

    Returns:
        Descriptor dictionary.
    """

    return {
        "name": "demo_app",
        "version": "0.9.0",
        "description": "Outer description",
        "maintainer": "Outer Maintainer",
        "inno_bundle": {
            "id": DEMO_ID,
            "name": "Demo App",
            "version": "1.0.0",
            "publisher": "Acme",
            "description": "Demo",
        },
    }
