"""
Schemas & Canonicalization
File: operations.py

Purpose: The closed set of campaign operations, the fund movements an
accepted operation implies, and the result of applying an operation.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .campaign import AssetClass, CampaignState, CancelPolicy, HexBytes
from .errors import CampaignError, Task2EarnException


class _Operation(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class Deposit(_Operation):
    """Create a campaign and lock its reward pool."""

    kind: Literal["deposit"] = "deposit"
    campaign_id: str = Field(..., min_length=1)
    owner: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0, description="Pool amount deposited")
    cancel_policy: CancelPolicy = Field(default_factory=CancelPolicy)
    fee_wallet: str = Field(..., min_length=1)
    asset: AssetClass = Field(default_factory=AssetClass)


class SetRoot(_Operation):
    """Commit the payout root and seal the campaign."""

    kind: Literal["set_root"] = "set_root"
    caller: str
    root: HexBytes


class Claim(_Operation):
    """Claim one participant's payout with an inclusion proof."""

    kind: Literal["claim"] = "claim"
    address: str
    amount: int = Field(..., ge=0)
    proof: list[HexBytes] = Field(default_factory=list)


class Pause(_Operation):
    kind: Literal["pause"] = "pause"
    caller: str


class Resume(_Operation):
    kind: Literal["resume"] = "resume"
    caller: str


class Cancel(_Operation):
    """Cancel the campaign, paying the penalty and refunding the owner."""

    kind: Literal["cancel"] = "cancel"
    caller: str


class UpdateCredit(_Operation):
    """Buy additional verification credit."""

    kind: Literal["update_credit"] = "update_credit"
    caller: str
    amount: int


class VerifyTask(_Operation):
    """Spend credit on verifying one participant task."""

    kind: Literal["verify_task"] = "verify_task"
    task_id: str = Field(..., min_length=1)
    credit_cost: int = Field(..., ge=0)


Operation = Annotated[
    Union[Deposit, SetRoot, Claim, Pause, Resume, Cancel, UpdateCredit, VerifyTask],
    Field(discriminator="kind"),
]

_OPERATION_ADAPTER: TypeAdapter[Operation] = TypeAdapter(Operation)


def parse_operation(data: Any) -> Operation:
    """Validate a dict (or JSON-decoded payload) into an operation."""
    return _OPERATION_ADAPTER.validate_python(data)


class MovementRole(str, Enum):
    """Why funds move."""

    DEPOSIT = "deposit"
    PAYOUT = "payout"
    CUSTODY = "custody"
    PENALTY = "penalty"
    REFUND = "refund"
    CREDIT_PURCHASE = "credit_purchase"


class FundMovement(BaseModel):
    """One required transfer: recipient receives amount."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    recipient: str
    amount: int = Field(..., ge=0)
    role: MovementRole


class TransitionResult(BaseModel):
    """
    Outcome of applying one operation.

    On rejection, state is the input state object, unchanged, and error
    carries the reason. state is None only when a Deposit is rejected
    (there was no prior state).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    ok: bool
    state: CampaignState | None = None
    error: CampaignError | None = None

    @classmethod
    def accepted(cls, state: CampaignState) -> "TransitionResult":
        return cls(ok=True, state=state)

    @classmethod
    def rejected(cls, state: CampaignState | None, error: CampaignError) -> "TransitionResult":
        return cls(ok=False, state=state, error=error)

    @property
    def code(self) -> str | None:
        return None if self.error is None else self.error.code

    def unwrap(self) -> CampaignState:
        """
        Return the new state, raising the matching exception on rejection.

        Raises:
            Task2EarnException: Subclass matching the rejection code
        """
        if not self.ok:
            if self.error is None:
                raise Task2EarnException("Rejected transition carries no error")
            raise self.error.to_exception()
        if self.state is None:
            raise Task2EarnException("Accepted transition carries no state")
        return self.state
