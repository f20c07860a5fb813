"""
Shared pytest fixtures for trigger-dispatch tests.

This module provides:
- Cleanup fixtures for kill switches, handler registry, settings and log context
- A recording handler stub that counts invocations per callback
- Sample account records
"""

from pathlib import Path

import pytest

from tests._support.handlers import Account, RecordingHandler
from trigger_dispatch.core.kill_switch import KillSwitches
from trigger_dispatch.core.settings import reset_settings
from trigger_dispatch.framework.logging import clear_context
from trigger_dispatch.framework.registry import clear_registry


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests as unit unless they opted into integration."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if "integration" not in markers:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_global_state(monkeypatch, tmp_path: Path):
    """Reset every process-wide registry before and after each test."""
    # Keep a developer's .env out of the settings under test
    monkeypatch.chdir(tmp_path)
    reset_settings()
    KillSwitches._clear_for_testing()
    clear_registry()
    clear_context()
    yield
    reset_settings()
    KillSwitches._clear_for_testing()
    clear_registry()
    clear_context()


# =============================================================================
# Records and handlers
# =============================================================================


@pytest.fixture
def recording_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def accounts() -> list[Account]:
    return [
        Account(id="001A", name="Acme", billing_city="Paris"),
        Account(id="001B", name="Globex", billing_city="Lyon"),
    ]
