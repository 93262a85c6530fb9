# tests/conftest.py

import pytest

from Rollmark import metrics
from Rollmark.rules.dice import ScriptedRandomSource


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset_counters()
    yield
    metrics.reset_counters()


@pytest.fixture
def scripted():
    """Factory for random sources that replay the given draws in order."""

    def _make(*values: int) -> ScriptedRandomSource:
        return ScriptedRandomSource(values)

    return _make
