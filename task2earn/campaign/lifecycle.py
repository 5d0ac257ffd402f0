"""
Campaign Lifecycle State Machine

Computes the next campaign state for a requested operation, or rejects it.

States: Active -> {Paused, Ended, Cancelled}, Paused -> {Active};
Ended and Cancelled are terminal. A new campaign starts Active with no
commitment root.

Every operation is a pure function of (state, operation): the input state
is never mutated and a rejection returns it unchanged together with the
reason. Operations on one campaign must still be serialized by the caller;
two claims evaluated against the same snapshot can both pass.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, assert_never

from task2earn.config.runtime import RuntimeConfig
from task2earn.crypto.hashing import HASH_SIZE, to_hex
from task2earn.merkle.merkle_tree import verify_payout
from task2earn.campaign.fees import verify_pool_sufficiency
from task2earn.schemas.campaign import (
    AssetClass,
    CampaignState,
    CampaignStatus,
    CancelPolicy,
    is_valid_transition,
)
from task2earn.schemas.errors import CampaignError, ErrorCodes
from task2earn.schemas.operations import (
    Cancel,
    Claim,
    Deposit,
    Operation,
    Pause,
    Resume,
    SetRoot,
    TransitionResult,
    UpdateCredit,
    VerifyTask,
)

logger = logging.getLogger(__name__)


def _reject(code: str, message: str, **details: Any) -> CampaignError:
    return CampaignError(code=code, message=message, details=details)


def _wrong_status(state: CampaignState, operation: str, *expected: CampaignStatus) -> CampaignError:
    names = " or ".join(s.name for s in expected)
    return _reject(
        ErrorCodes.WRONG_STATUS,
        f"{operation} requires status {names}, campaign is {state.status.name}",
        status=state.status.name,
        expected=[s.name for s in expected],
    )


def _require_owner(state: CampaignState, caller: str, operation: str) -> Optional[CampaignError]:
    if caller != state.owner:
        return _reject(
            ErrorCodes.UNAUTHORIZED,
            f"{operation} may only be performed by the campaign owner",
            caller=caller,
        )
    return None


def _transition(state: CampaignState, **updates: Any) -> CampaignState:
    """Build the successor state, re-validating every state invariant."""
    target = updates.get("status", state.status)
    if not is_valid_transition(state.status, target):
        raise RuntimeError(f"Illegal status transition {state.status.name} -> {target.name}")
    return CampaignState(**{**dict(state), **updates})


class CampaignStateMachine:
    """
    Applies operations to campaign states.

    Holds only immutable configuration, so one instance may be shared
    across threads and campaigns.
    """

    def __init__(self, config: Optional[RuntimeConfig] = None) -> None:
        self.config = config or RuntimeConfig()

    def apply(self, state: CampaignState | None, operation: Operation) -> TransitionResult:
        """
        Apply one operation.

        Args:
            state: Current campaign state, or None before the Deposit
            operation: The requested operation

        Returns:
            TransitionResult with the new state, or the unchanged input
            state plus the rejection reason
        """
        if state is None:
            if isinstance(operation, Deposit):
                outcome = self._deposit(operation)
            else:
                outcome = _reject(
                    ErrorCodes.NOT_FOUND,
                    f"Campaign does not exist; {operation.kind} requires a prior Deposit",
                )
        else:
            outcome = self._dispatch(state, operation)

        if isinstance(outcome, CampaignError):
            campaign_id = state.campaign_id if state is not None else getattr(operation, "campaign_id", None)
            logger.warning(
                f"Rejected {operation.kind} on campaign {campaign_id!r}: "
                f"{outcome.code}: {outcome.message}"
            )
            return TransitionResult.rejected(state, outcome)

        logger.info(
            f"Accepted {operation.kind} on campaign {outcome.campaign_id!r}: "
            f"status={outcome.status.name} claimed={outcome.total_claimed}/{outcome.pool_amount}"
        )
        return TransitionResult.accepted(outcome)

    def _dispatch(self, state: CampaignState, operation: Operation) -> CampaignState | CampaignError:
        match operation:
            case Deposit():
                return _reject(
                    ErrorCodes.WRONG_STATUS,
                    f"Campaign {state.campaign_id!r} already exists",
                    status=state.status.name,
                )
            case SetRoot():
                return self._set_root(state, operation)
            case Claim():
                return self._claim(state, operation)
            case Pause():
                return self._pause(state, operation)
            case Resume():
                return self._resume(state, operation)
            case Cancel():
                return self._cancel(state, operation)
            case UpdateCredit():
                return self._update_credit(state, operation)
            case VerifyTask():
                return self._verify_task(state, operation)
            case _:
                assert_never(operation)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def _deposit(self, op: Deposit) -> CampaignState | CampaignError:
        minimum = self.config.campaign.min_pool_amount
        if op.amount < minimum:
            return _reject(
                ErrorCodes.INSUFFICIENT_POOL,
                f"Deposit of {op.amount} is below the minimum pool of {minimum}",
                amount=op.amount,
                minimum=minimum,
            )
        return CampaignState(
            campaign_id=op.campaign_id,
            owner=op.owner,
            status=CampaignStatus.ACTIVE,
            pool_amount=op.amount,
            cancel_policy=op.cancel_policy,
            fee_wallet=op.fee_wallet,
            asset=op.asset,
        )

    def _set_root(self, state: CampaignState, op: SetRoot) -> CampaignState | CampaignError:
        if state.commitment_root is not None:
            return _reject(
                ErrorCodes.ROOT_ALREADY_SET,
                "A commitment root has already been set for this campaign",
                root=to_hex(state.commitment_root),
            )
        if state.status != CampaignStatus.ACTIVE:
            return _wrong_status(state, "SetRoot", CampaignStatus.ACTIVE)
        if error := _require_owner(state, op.caller, "SetRoot"):
            return error
        if len(op.root) != HASH_SIZE:
            return _reject(
                ErrorCodes.INVALID_ARGUMENT,
                f"Root must be {HASH_SIZE} bytes, got {len(op.root)}",
            )
        return _transition(state, commitment_root=op.root, status=CampaignStatus.ENDED)

    def _claim(self, state: CampaignState, op: Claim) -> CampaignState | CampaignError:
        if state.status != CampaignStatus.ENDED:
            return _wrong_status(state, "Claim", CampaignStatus.ENDED)
        if state.commitment_root is None or not verify_payout(
            op.address, op.amount, state.campaign_id, op.proof, state.commitment_root
        ):
            return _reject(
                ErrorCodes.INVALID_PROOF,
                f"Proof does not commit {op.address!r} -> {op.amount} to the campaign root",
                address=op.address,
                amount=op.amount,
            )
        if state.has_claimed(op.address):
            return _reject(
                ErrorCodes.DOUBLE_CLAIM,
                f"{op.address!r} has already claimed",
                address=op.address,
            )
        if not verify_pool_sufficiency(state.pool_amount, state.total_claimed, op.amount):
            return _reject(
                ErrorCodes.INSUFFICIENT_POOL,
                f"Insufficient pool. Available: {state.remaining_pool}, requested: {op.amount}",
                available=state.remaining_pool,
                requested=op.amount,
            )
        return _transition(
            state,
            total_claimed=state.total_claimed + op.amount,
            claims_count=state.claims_count + 1,
            claimed_addresses=state.claimed_addresses | {op.address},
        )

    def _pause(self, state: CampaignState, op: Pause) -> CampaignState | CampaignError:
        if state.status != CampaignStatus.ACTIVE:
            return _wrong_status(state, "Pause", CampaignStatus.ACTIVE)
        if error := _require_owner(state, op.caller, "Pause"):
            return error
        return _transition(state, status=CampaignStatus.PAUSED)

    def _resume(self, state: CampaignState, op: Resume) -> CampaignState | CampaignError:
        if state.status != CampaignStatus.PAUSED:
            return _wrong_status(state, "Resume", CampaignStatus.PAUSED)
        if error := _require_owner(state, op.caller, "Resume"):
            return error
        return _transition(state, status=CampaignStatus.ACTIVE)

    def _cancel(self, state: CampaignState, op: Cancel) -> CampaignState | CampaignError:
        if state.status != CampaignStatus.ACTIVE:
            return _wrong_status(state, "Cancel", CampaignStatus.ACTIVE)
        if error := _require_owner(state, op.caller, "Cancel"):
            return error
        policy = state.cancel_policy
        if not (policy.allowed_before_claims or (policy.allowed_after_claims and state.claims_count > 0)):
            return _reject(
                ErrorCodes.CANCEL_NOT_ALLOWED,
                "Cancel policy does not allow cancellation at this point",
                claims_count=state.claims_count,
                allowed_before_claims=policy.allowed_before_claims,
                allowed_after_claims=policy.allowed_after_claims,
            )
        return _transition(state, status=CampaignStatus.CANCELLED)

    def _update_credit(self, state: CampaignState, op: UpdateCredit) -> CampaignState | CampaignError:
        if error := _require_owner(state, op.caller, "UpdateCredit"):
            return error
        if op.amount <= 0:
            return _reject(
                ErrorCodes.INVALID_ARGUMENT,
                f"Credit top-up must be positive, got {op.amount}",
                amount=op.amount,
            )
        return _transition(state, credit_balance=state.credit_balance + op.amount)

    def _verify_task(self, state: CampaignState, op: VerifyTask) -> CampaignState | CampaignError:
        if state.status != CampaignStatus.ACTIVE:
            return _wrong_status(state, "VerifyTask", CampaignStatus.ACTIVE)
        if state.remaining_credit < op.credit_cost:
            return _reject(
                ErrorCodes.INSUFFICIENT_CREDIT,
                f"Insufficient credit. Available: {state.remaining_credit}, required: {op.credit_cost}",
                task_id=op.task_id,
                available=state.remaining_credit,
                required=op.credit_cost,
            )
        return _transition(state, credit_used=state.credit_used + op.credit_cost)


def apply_operation(
    state: CampaignState | None,
    operation: Operation,
    config: Optional[RuntimeConfig] = None,
) -> TransitionResult:
    """Apply one operation with a throwaway state machine."""
    return CampaignStateMachine(config).apply(state, operation)


def new_campaign(
    campaign_id: str,
    owner: str,
    amount: int,
    config: Optional[RuntimeConfig] = None,
    *,
    fee_wallet: Optional[str] = None,
    cancel_policy: Optional[CancelPolicy] = None,
    asset: Optional[AssetClass] = None,
) -> Deposit:
    """
    Build a Deposit from the configured campaign defaults.

    Defaults allow cancellation before any claim but not after, with a
    500 bps penalty, unless the config says otherwise.
    """
    defaults = (config or RuntimeConfig()).campaign
    return Deposit(
        campaign_id=campaign_id,
        owner=owner,
        amount=amount,
        fee_wallet=fee_wallet if fee_wallet is not None else defaults.fee_wallet,
        cancel_policy=cancel_policy
        or CancelPolicy(
            allowed_before_claims=defaults.allowed_before_claims,
            allowed_after_claims=defaults.allowed_after_claims,
            penalty_bps=defaults.penalty_bps,
        ),
        asset=asset or AssetClass(),
    )


__all__ = [
    "CampaignStateMachine",
    "apply_operation",
    "new_campaign",
]
