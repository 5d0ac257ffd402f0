"""
Common test fixtures shared by all modules.

Provides factory functions for core data structures:
- PayoutEntry lists
- PayoutTree
- CampaignState in each lifecycle status
"""

from typing import Optional

from task2earn.merkle import PayoutTree
from task2earn.schemas.campaign import CampaignState, CampaignStatus, CancelPolicy
from task2earn.schemas.payout import PayoutEntry


CAMPAIGN_ID = "c1"
OWNER = "addr_test1owner"
FEE_WALLET = "addr_test1feewallet"

ADDR_A = "addr_test1qzalice"
ADDR_B = "addr_test1qzbob"
ADDR_C = "addr_test1qzcharlie"


# =============================================================================
# Payout Factories
# =============================================================================

def make_payout_entries(count: Optional[int] = None) -> list[PayoutEntry]:
    """
    Create payout entries for testing.

    With no count, returns the three-participant set
    A:50_000_000, B:30_000_000, C:20_000_000.
    Otherwise returns `count` generated participants.
    """
    if count is None:
        return [
            PayoutEntry(address=ADDR_A, amount=50_000_000),
            PayoutEntry(address=ADDR_B, amount=30_000_000),
            PayoutEntry(address=ADDR_C, amount=20_000_000),
        ]
    return [
        PayoutEntry(address=f"addr_test1p{i:03d}", amount=(i + 1) * 1_000_000)
        for i in range(count)
    ]


def make_payout_tree(
    entries: Optional[list[PayoutEntry]] = None,
    campaign_id: str = CAMPAIGN_ID,
) -> PayoutTree:
    """Create a PayoutTree over the default entries."""
    return PayoutTree(entries if entries is not None else make_payout_entries(), campaign_id)


# =============================================================================
# CampaignState Factories
# =============================================================================

def make_campaign_state(
    status: CampaignStatus = CampaignStatus.ACTIVE,
    pool_amount: int = 100_000_000,
    commitment_root: Optional[bytes] = None,
    claimed: Optional[dict[str, int]] = None,
    cancel_policy: Optional[CancelPolicy] = None,
    credit_balance: int = 0,
    credit_used: int = 0,
    campaign_id: str = CAMPAIGN_ID,
) -> CampaignState:
    """
    Create a CampaignState for testing.

    Args:
        claimed: address -> amount already paid out; drives total_claimed,
                 claims_count and claimed_addresses together.
    """
    claimed = claimed or {}
    return CampaignState(
        campaign_id=campaign_id,
        owner=OWNER,
        status=status,
        commitment_root=commitment_root,
        pool_amount=pool_amount,
        total_claimed=sum(claimed.values()),
        claims_count=len(claimed),
        claimed_addresses=frozenset(claimed),
        cancel_policy=cancel_policy or CancelPolicy(),
        credit_balance=credit_balance,
        credit_used=credit_used,
        fee_wallet=FEE_WALLET,
    )


def make_ended_campaign(
    tree: Optional[PayoutTree] = None,
    pool_amount: int = 100_000_000,
    claimed: Optional[dict[str, int]] = None,
) -> CampaignState:
    """Create an Ended campaign committed to the given (or default) tree."""
    tree = tree or make_payout_tree()
    return make_campaign_state(
        status=CampaignStatus.ENDED,
        pool_amount=pool_amount,
        commitment_root=tree.root,
        claimed=claimed,
        campaign_id=tree.campaign_id,
    )
