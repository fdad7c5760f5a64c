"""Shared pytest configuration for tmpldeps examples.

Provides the ``example_app`` fixture that runs the ``app.py`` next to the
test file in a fresh module namespace, so every test starts from the
module-level state the example builds.
"""

import importlib.util
from pathlib import Path

import pytest


@pytest.fixture
def example_app(request: pytest.FixtureRequest):
    """Execute the sibling app.py and return it as a module."""
    app_path = Path(request.path).parent / "app.py"
    spec = importlib.util.spec_from_file_location(f"example_{app_path.parent.name}", app_path)
    assert spec is not None
    assert spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module
