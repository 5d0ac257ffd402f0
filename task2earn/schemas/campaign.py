"""
Schemas & Canonicalization
File: campaign.py

Purpose: Campaign state record consumed and produced by the lifecycle
state machine. States are immutable values; every accepted operation
produces a new one.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_serializer,
    model_validator,
)

from task2earn.crypto.hashing import from_hex

# Denominator of every fee/penalty rate
BASIS_POINTS: int = 10_000


def _coerce_hex(value: Any) -> Any:
    """Accept hex strings wherever raw bytes are expected."""
    if isinstance(value, str):
        return from_hex(value)
    return value


# Raw bytes in Python, hex string in JSON
HexBytes = Annotated[
    bytes,
    BeforeValidator(_coerce_hex),
    PlainSerializer(lambda b: b.hex(), return_type=str, when_used="json"),
]


class CampaignStatus(IntEnum):
    """Lifecycle status. Numeric values are the serialized status codes."""

    ACTIVE = 0
    PAUSED = 1
    ENDED = 2
    CANCELLED = 3

    @property
    def is_terminal(self) -> bool:
        return self in (CampaignStatus.ENDED, CampaignStatus.CANCELLED)


# Every valid status transition; terminal states have none
ALLOWED_TRANSITIONS: dict[CampaignStatus, frozenset[CampaignStatus]] = {
    CampaignStatus.ACTIVE: frozenset(
        {CampaignStatus.PAUSED, CampaignStatus.ENDED, CampaignStatus.CANCELLED}
    ),
    CampaignStatus.PAUSED: frozenset({CampaignStatus.ACTIVE}),
    CampaignStatus.ENDED: frozenset(),
    CampaignStatus.CANCELLED: frozenset(),
}


def is_valid_transition(source: CampaignStatus, target: CampaignStatus) -> bool:
    """Check a status change against the lifecycle graph (self-loops allowed)."""
    return source == target or target in ALLOWED_TRANSITIONS[source]


class CancelPolicy(BaseModel):
    """When the owner may cancel, and the penalty charged for it."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    allowed_before_claims: bool = True
    allowed_after_claims: bool = False
    penalty_bps: int = Field(default=500, ge=0, le=BASIS_POINTS)


class AssetClass(BaseModel):
    """Asset held in the pool. Empty identifiers mean the native currency."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    policy_id: str = ""
    asset_name: str = ""

    @property
    def is_native(self) -> bool:
        return not self.policy_id and not self.asset_name


class CampaignState(BaseModel):
    """
    State of one reward campaign.

    Invariants (checked on construction):
    - total_claimed <= pool_amount
    - claims_count == len(claimed_addresses)
    - credit_used <= credit_balance
    - a commitment root is only present once the campaign has Ended
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    campaign_id: str = Field(..., min_length=1)
    owner: str = Field(..., min_length=1, description="Owner identity")
    status: CampaignStatus = CampaignStatus.ACTIVE
    commitment_root: HexBytes | None = Field(
        default=None,
        description="Merkle root of the payout set, absent until SetRoot",
    )
    pool_amount: int = Field(..., ge=0)
    total_claimed: int = Field(default=0, ge=0)
    claims_count: int = Field(default=0, ge=0)
    claimed_addresses: frozenset[str] = Field(default_factory=frozenset)
    cancel_policy: CancelPolicy = Field(default_factory=CancelPolicy)
    credit_balance: int = Field(default=0, ge=0)
    credit_used: int = Field(default=0, ge=0)
    fee_wallet: str = Field(..., min_length=1, description="Recipient of penalties and credit purchases")
    asset: AssetClass = Field(default_factory=AssetClass)

    @model_validator(mode="after")
    def _check_invariants(self) -> "CampaignState":
        if self.total_claimed > self.pool_amount:
            raise ValueError(
                f"total_claimed ({self.total_claimed}) exceeds pool_amount ({self.pool_amount})"
            )
        if self.claims_count != len(self.claimed_addresses):
            raise ValueError(
                f"claims_count ({self.claims_count}) does not match "
                f"{len(self.claimed_addresses)} claimed addresses"
            )
        if self.credit_used > self.credit_balance:
            raise ValueError(
                f"credit_used ({self.credit_used}) exceeds credit_balance ({self.credit_balance})"
            )
        if self.commitment_root is not None and self.status != CampaignStatus.ENDED:
            raise ValueError("commitment_root may only be present on an Ended campaign")
        return self

    @field_serializer("claimed_addresses")
    def _serialize_claimed(self, value: frozenset[str]) -> list[str]:
        return sorted(value)

    @property
    def remaining_pool(self) -> int:
        """Funds still in custody."""
        return self.pool_amount - self.total_claimed

    @property
    def remaining_credit(self) -> int:
        return self.credit_balance - self.credit_used

    @property
    def has_root(self) -> bool:
        return self.commitment_root is not None

    def has_claimed(self, address: str) -> bool:
        return address in self.claimed_addresses
