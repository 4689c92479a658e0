"""Shared pytest configuration and fixtures for the capture console test suite."""

import sys
from pathlib import Path

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tests.infrastructure.mocks.capture_mocks import (  # noqa: E402
    FakeCaptureService,
    ManualScheduler,
    RecordingView,
)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "hardware: mark test as requiring real elevation or an installed capture driver"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that need an elevated process and the capture driver",
    )


def pytest_collection_modifyitems(config, items):
    """Skip hardware tests unless --run-hardware is specified."""
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def fake_service() -> FakeCaptureService:
    """Capture service double; capable host, idle session."""
    return FakeCaptureService()


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Scheduler whose ticks are fired by the test."""
    return ManualScheduler()


@pytest.fixture
def view() -> RecordingView:
    """View that records every render model and error."""
    return RecordingView()
