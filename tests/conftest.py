"""
Shared fixtures.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from graph_bench_driver import Configuration, reset_configuration


@pytest.fixture(autouse=True)
def fresh_process_configuration():
    """Every test starts without a process-wide configuration."""
    reset_configuration()
    yield
    reset_configuration()


@pytest.fixture
def cfg():
    """A configuration with the default values, closed after the test."""
    instance = Configuration()
    yield instance
    instance.close()
