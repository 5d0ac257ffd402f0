"""
Test fixtures package.

This package provides factory functions for creating test objects.

Usage:
    from fixtures import make_payout_tree, make_ended_campaign

    def test_something():
        tree = make_payout_tree()
        state = make_ended_campaign(tree)
"""

from .common import (
    ADDR_A,
    ADDR_B,
    ADDR_C,
    CAMPAIGN_ID,
    FEE_WALLET,
    OWNER,
    make_campaign_state,
    make_ended_campaign,
    make_payout_entries,
    make_payout_tree,
)

__all__ = [
    "ADDR_A",
    "ADDR_B",
    "ADDR_C",
    "CAMPAIGN_ID",
    "FEE_WALLET",
    "OWNER",
    "make_campaign_state",
    "make_ended_campaign",
    "make_payout_entries",
    "make_payout_tree",
]
