"""
External Collaborators

Contracts for the services around the core:
- a query service resolving campaign state from the ledger
- a transaction assembler turning (operation, state, movements) into a
  submittable transaction
- a compiler producing the on-chain validator script

None of them is implemented here. CampaignService wires the first two to
the state machine and the effect projector.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from task2earn.campaign.effects import Settlement, settle
from task2earn.campaign.lifecycle import CampaignStateMachine
from task2earn.schemas.campaign import CampaignState
from task2earn.schemas.operations import Deposit, FundMovement, Operation

logger = logging.getLogger(__name__)


@runtime_checkable
class CampaignQueryService(Protocol):
    """Resolves the current on-ledger state of a campaign."""

    def get_campaign(self, campaign_id: str) -> Optional[CampaignState]:
        """Return the current state, or None if the campaign is not found."""
        ...


@runtime_checkable
class TransactionAssembler(Protocol):
    """Builds a submittable transaction for an accepted operation."""

    def assemble(
        self,
        operation: Operation,
        state: CampaignState,
        movements: list[FundMovement],
    ) -> Any:
        ...


class CompiledValidator(BaseModel):
    """Compiled validator script as produced by a ValidatorCompiler."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    script_type: str = Field(..., description="Target script language version, e.g. PlutusScriptV2")
    description: str = ""
    cbor_hex: str = Field(..., description="Serialized script bytes, hex encoded")


@runtime_checkable
class ValidatorCompiler(Protocol):
    """Compiles the claim validation predicate to target-VM bytecode."""

    def compile(self) -> CompiledValidator:
        ...


class CampaignService:
    """
    Resolves state, applies an operation and hands the result to the
    transaction assembler.

    The service does not serialize operations; the ledger's single-owner
    record semantics (or the caller) must.
    """

    def __init__(
        self,
        query: CampaignQueryService,
        assembler: TransactionAssembler,
        machine: Optional[CampaignStateMachine] = None,
    ) -> None:
        self.query = query
        self.assembler = assembler
        self.machine = machine or CampaignStateMachine()

    def prepare(self, campaign_id: str, operation: Operation) -> Settlement:
        """Compute the settlement of an operation against the current state."""
        state = self.query.get_campaign(campaign_id)
        if state is None and not isinstance(operation, Deposit):
            logger.debug(f"Campaign {campaign_id!r} not found by query service")
        return settle(state, operation, self.machine)

    def submit(self, campaign_id: str, operation: Operation) -> Any:
        """
        Settle an operation and assemble its transaction.

        Raises:
            Task2EarnException: Subclass matching the rejection reason
        """
        settlement = self.prepare(campaign_id, operation)
        new_state = settlement.result.unwrap()
        logger.info(
            f"Assembling {operation.kind} for campaign {campaign_id!r} "
            f"with {len(settlement.movements)} movement(s)"
        )
        return self.assembler.assemble(operation, new_state, settlement.movements)


__all__ = [
    "CampaignQueryService",
    "TransactionAssembler",
    "CompiledValidator",
    "ValidatorCompiler",
    "CampaignService",
]
