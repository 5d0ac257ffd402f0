"""
Effect Projector

Computes what must move after an accepted operation: who receives what.
How the funds move (inputs, fees, signatures) is left to the transaction
assembler. No validation happens here; it already happened in the state
machine.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, assert_never

from task2earn.campaign.fees import cancel_settlement
from task2earn.campaign.lifecycle import CampaignStateMachine
from task2earn.schemas.campaign import CampaignState
from task2earn.schemas.operations import (
    Cancel,
    Claim,
    Deposit,
    FundMovement,
    MovementRole,
    Operation,
    Pause,
    Resume,
    SetRoot,
    TransitionResult,
    UpdateCredit,
    VerifyTask,
)


def project_effects(
    prior: CampaignState | None,
    operation: Operation,
    new_state: CampaignState,
) -> list[FundMovement]:
    """
    Fund movements implied by an accepted operation.

    Custody movements use the campaign id as recipient: the funds stay
    locked under the campaign.

    Args:
        prior: State before the operation (None for a Deposit)
        operation: The accepted operation
        new_state: State after the operation

    Returns:
        Ordered list of movements, empty when no funds move
    """
    match operation:
        case Deposit():
            return [
                FundMovement(
                    recipient=new_state.campaign_id,
                    amount=new_state.pool_amount,
                    role=MovementRole.DEPOSIT,
                )
            ]
        case Claim():
            return [
                FundMovement(
                    recipient=operation.address,
                    amount=operation.amount,
                    role=MovementRole.PAYOUT,
                ),
                FundMovement(
                    recipient=new_state.campaign_id,
                    amount=new_state.remaining_pool,
                    role=MovementRole.CUSTODY,
                ),
            ]
        case Cancel():
            penalty, refund = cancel_settlement(prior if prior is not None else new_state)
            return [
                FundMovement(recipient=new_state.fee_wallet, amount=penalty, role=MovementRole.PENALTY),
                FundMovement(recipient=new_state.owner, amount=refund, role=MovementRole.REFUND),
            ]
        case UpdateCredit():
            return [
                FundMovement(
                    recipient=new_state.fee_wallet,
                    amount=operation.amount,
                    role=MovementRole.CREDIT_PURCHASE,
                )
            ]
        case SetRoot() | Pause() | Resume() | VerifyTask():
            return []
        case _:
            assert_never(operation)


@dataclass(frozen=True)
class Settlement:
    """A transition result with the movements it requires."""

    result: TransitionResult
    movements: list[FundMovement] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.result.ok


def settle(
    state: CampaignState | None,
    operation: Operation,
    machine: Optional[CampaignStateMachine] = None,
) -> Settlement:
    """Apply an operation and, if accepted, project its fund movements."""
    machine = machine or CampaignStateMachine()
    result = machine.apply(state, operation)
    if not result.ok or result.state is None:
        return Settlement(result=result)
    return Settlement(result=result, movements=project_effects(state, operation, result.state))


__all__ = [
    "project_effects",
    "Settlement",
    "settle",
]
