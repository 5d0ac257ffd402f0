"""
Pytest configuration and shared fixtures for task2earn tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_payout_entries = _common.make_payout_entries
make_payout_tree = _common.make_payout_tree
make_campaign_state = _common.make_campaign_state
make_ended_campaign = _common.make_ended_campaign


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def payout_entries():
    """Provide the default A/B/C payout entries."""
    return make_payout_entries()


@pytest.fixture
def payout_tree(payout_entries):
    """Provide a PayoutTree over the default entries for campaign "c1"."""
    return make_payout_tree(payout_entries)


@pytest.fixture
def active_campaign():
    """Provide an Active campaign with a 100_000_000 pool."""
    return make_campaign_state()


@pytest.fixture
def ended_campaign(payout_tree):
    """Provide an Ended campaign committed to payout_tree."""
    return make_ended_campaign(payout_tree)


@pytest.fixture
def machine():
    """Provide a state machine with default configuration."""
    from task2earn.campaign import CampaignStateMachine
    return CampaignStateMachine()


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_rejected():
    """Helper to assert a TransitionResult was rejected with a code and left state untouched."""
    def _assert(result, code: str, prior):
        assert not result.ok, f"Expected rejection with {code}, operation was accepted"
        assert result.error is not None
        assert result.error.code == code, f"Expected {code}, got {result.error.code}: {result.error.message}"
        assert result.state == prior
    return _assert
