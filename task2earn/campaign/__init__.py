"""
Campaign Lifecycle

This module provides:
- CampaignStateMachine: Validates operations and computes successor states
- project_effects / settle: Fund movements implied by accepted operations
- Basis-point arithmetic for penalties
- Collaborator contracts (query, transaction assembly, validator compiler)

Usage:
    from task2earn.campaign import CampaignStateMachine, new_campaign
    from task2earn.schemas import SetRoot

    machine = CampaignStateMachine()
    state = machine.apply(None, new_campaign("c1", "owner", 100, fee_wallet="fees")).unwrap()
    state = machine.apply(state, SetRoot(caller="owner", root=tree.root)).unwrap()
"""
from .fees import (
    apply_basis_points,
    calculate_penalty,
    cancel_settlement,
    verify_pool_sufficiency,
)
from .lifecycle import (
    CampaignStateMachine,
    apply_operation,
    new_campaign,
)
from .effects import (
    Settlement,
    project_effects,
    settle,
)
from .collaborators import (
    CampaignQueryService,
    CampaignService,
    CompiledValidator,
    TransactionAssembler,
    ValidatorCompiler,
)

__all__ = [
    "apply_basis_points",
    "calculate_penalty",
    "cancel_settlement",
    "verify_pool_sufficiency",
    "CampaignStateMachine",
    "apply_operation",
    "new_campaign",
    "Settlement",
    "project_effects",
    "settle",
    "CampaignQueryService",
    "CampaignService",
    "CompiledValidator",
    "TransactionAssembler",
    "ValidatorCompiler",
]
