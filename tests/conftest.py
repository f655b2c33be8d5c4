"""
conftest.py - Shared pytest fixtures for propshare tests

Provides common fixtures used across unit, functional and conformance tests:
- Collaborators (administrators, in-memory transfers, manual clock, sink)
- Ledgers (empty, with one registered property, with holders)
"""

import pytest
from datetime import datetime, timezone

from propshare import (
    PropertyLedger,
    StaticAdministrators,
    InMemoryTransfer,
    ManualClock,
    CollectingSink,
    LedgerConfig,
)


ADMIN = "admin"
START = datetime(2025, 1, 1, tzinfo=timezone.utc)


# =============================================================================
# COLLABORATOR FIXTURES
# =============================================================================

@pytest.fixture
def admins():
    """Single administrator identity."""
    return StaticAdministrators({ADMIN})


@pytest.fixture
def payments():
    """Transfer collaborator that records every payout."""
    return InMemoryTransfer()


@pytest.fixture
def clock():
    """Logical clock starting 2025-01-01 UTC."""
    return ManualClock(START)


@pytest.fixture
def sink():
    return CollectingSink()


# =============================================================================
# LEDGER FIXTURES
# =============================================================================

@pytest.fixture
def ledger(admins, payments, clock, sink):
    """Empty ledger with default configuration."""
    return PropertyLedger(
        admin=admins,
        transfers=payments,
        clock=clock,
        sink=sink,
        config=LedgerConfig(name="test"),
    )


@pytest.fixture
def listed_ledger(ledger):
    """Ledger with property 0: 100 shares, rent 10 per share, valued 1000."""
    pid = ledger.register_property(ADMIN, 100, 10, 1000)
    assert pid == 0
    return ledger


@pytest.fixture
def held_ledger(listed_ledger):
    """Property 0 with alice holding 20 shares and bob holding 30."""
    listed_ledger.purchase_shares("alice", 0, 20, 200)
    listed_ledger.purchase_shares("bob", 0, 30, 300)
    return listed_ledger
