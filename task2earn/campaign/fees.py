"""
Basis-point arithmetic for settlement amounts.

All rates use a fixed denominator of 10000 and integer division, so no
fractional currency is ever produced. These values affect settlement and
must match exactly across implementations.
"""
from __future__ import annotations

from task2earn.schemas.campaign import BASIS_POINTS, CampaignState


def apply_basis_points(value: int, bps: int) -> int:
    """
    Compute value * bps / 10000, truncated toward zero.

    Raises:
        ValueError: If value is negative or bps is outside [0, 10000]
    """
    if value < 0:
        raise ValueError(f"value must be non-negative, got {value}")
    if not 0 <= bps <= BASIS_POINTS:
        raise ValueError(f"bps must be within [0, {BASIS_POINTS}], got {bps}")
    return value * bps // BASIS_POINTS


def calculate_penalty(pool_amount: int, penalty_bps: int) -> int:
    """Cancellation penalty on a pool."""
    return apply_basis_points(pool_amount, penalty_bps)


def verify_pool_sufficiency(pool_amount: int, total_claimed: int, claim_amount: int) -> bool:
    """Check the unclaimed part of the pool covers a claim."""
    return pool_amount - total_claimed >= claim_amount


def cancel_settlement(state: CampaignState) -> tuple[int, int]:
    """
    Split the funds in custody on cancellation.

    The penalty is computed on the full pool and capped at what is still in
    custody; the owner is refunded the rest.

    Returns:
        (penalty, refund)
    """
    remaining = state.remaining_pool
    penalty = min(calculate_penalty(state.pool_amount, state.cancel_policy.penalty_bps), remaining)
    return penalty, remaining - penalty


__all__ = [
    "apply_basis_points",
    "calculate_penalty",
    "verify_pool_sufficiency",
    "cancel_settlement",
]
