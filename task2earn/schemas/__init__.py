"""
Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    loads_canonical,
)

# Error models and exceptions
from .errors import (
    CampaignError,
    CanonicalizationException,
    CancelNotAllowedException,
    DoubleClaimException,
    EmptySetException,
    ErrorCodes,
    InsufficientCreditException,
    InsufficientPoolException,
    InvalidArgumentException,
    InvalidProofException,
    MerkleVerificationException,
    NotFoundException,
    RootAlreadySetException,
    Task2EarnException,
    UnauthorizedException,
    WrongStatusException,
)

# Payout and tree export schemas
from .payout import (
    MAX_AMOUNT,
    Leaf,
    LeafExport,
    PayoutEntry,
    TreeExport,
)

# Campaign state schemas
from .campaign import (
    ALLOWED_TRANSITIONS,
    BASIS_POINTS,
    AssetClass,
    CampaignState,
    CampaignStatus,
    CancelPolicy,
    HexBytes,
    is_valid_transition,
)

# Operation schemas
from .operations import (
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
    parse_operation,
)

__all__ = [
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonical_equals",
    "canonicalize_value",
    "dumps_canonical",
    "loads_canonical",
    # Errors
    "CampaignError",
    "CanonicalizationException",
    "CancelNotAllowedException",
    "DoubleClaimException",
    "EmptySetException",
    "ErrorCodes",
    "InsufficientCreditException",
    "InsufficientPoolException",
    "InvalidArgumentException",
    "InvalidProofException",
    "MerkleVerificationException",
    "NotFoundException",
    "RootAlreadySetException",
    "Task2EarnException",
    "UnauthorizedException",
    "WrongStatusException",
    # Payouts
    "MAX_AMOUNT",
    "Leaf",
    "LeafExport",
    "PayoutEntry",
    "TreeExport",
    # Campaign
    "ALLOWED_TRANSITIONS",
    "BASIS_POINTS",
    "AssetClass",
    "CampaignState",
    "CampaignStatus",
    "CancelPolicy",
    "HexBytes",
    "is_valid_transition",
    # Operations
    "Cancel",
    "Claim",
    "Deposit",
    "FundMovement",
    "MovementRole",
    "Operation",
    "Pause",
    "Resume",
    "SetRoot",
    "TransitionResult",
    "UpdateCredit",
    "VerifyTask",
    "parse_operation",
]
