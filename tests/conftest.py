"""Pytest configuration and fixtures for tmpldeps tests."""

import pytest

from tmpldeps import BuildVariant, Environment


@pytest.fixture
def env():
    """Environment with the default accessor vocabulary."""
    return Environment()


@pytest.fixture
def env_utility():
    """Environment with the rich utility vocabulary."""
    return Environment(variant=BuildVariant.UTILITY)


@pytest.fixture
def env_none():
    """Environment with no functions beyond the builtins."""
    return Environment(variant=BuildVariant.NONE)


@pytest.fixture
def extractor(env_utility):
    """VariableExtractor over the utility vocabulary."""
    return env_utility.extractor


def assert_names(env: Environment, source: str, expected: list[str]) -> None:
    """Assert ``source`` extracts exactly ``expected``, in order.

    Args:
        env: Environment to extract with.
        source: Template source.
        expected: Names in traversal order, duplicates included.
    """
    actual = env.extract_names(source)
    assert actual == expected, (
        f"Extraction mismatch for {source!r}:\n"
        f"  Actual: {actual!r}\n"
        f"  Expected: {expected!r}"
    )
