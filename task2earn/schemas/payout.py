"""
Schemas & Canonicalization
File: payout.py

Purpose: Payout entries, committed leaves and the tree export format used
to hand a built distribution to a proof-serving collaborator.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Amounts are framed as 8-byte big-endian integers
MAX_AMOUNT: int = 2**64 - 1

# 32-byte hash as bare lowercase hex (64 chars)
HEX_HASH_PATTERN = re.compile(r"^[0-9a-f]{64}$")

DECIMAL_PATTERN = re.compile(r"^(0|[1-9][0-9]*)$")


def validate_hex_hash(value: str, field_name: str) -> str:
    """Validate that a value is a 32-byte hash encoded as bare hex."""
    normalized = value.lower()
    if normalized.startswith("0x"):
        normalized = normalized[2:]
    if not HEX_HASH_PATTERN.match(normalized):
        shown = f"{value[:20]}..." if len(value) > 20 else value
        raise ValueError(
            f"{field_name} must be a 32-byte hex string (64 hex chars), got: {shown}"
        )
    return normalized


class PayoutEntry(BaseModel):
    """One participant's allotted share. Input to tree construction."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    address: str = Field(
        ...,
        description="Participant address identifier",
        min_length=1,
    )
    amount: int = Field(
        ...,
        description="Payout in atomic currency units",
        ge=0,
        le=MAX_AMOUNT,
    )


class Leaf(BaseModel):
    """
    A hashed payout entry at a fixed position of the sorted leaf sequence.

    Created once during tree construction and never mutated.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    address: str
    amount: int = Field(..., ge=0, le=MAX_AMOUNT)
    hash: bytes = Field(..., min_length=32, max_length=32)
    index: int = Field(..., ge=0)


class LeafExport(BaseModel):
    """Serialized leaf: amount as a decimal string, hash as hex."""

    model_config = ConfigDict(extra="forbid")

    address: str = Field(..., min_length=1)
    amount: str = Field(..., description="Payout amount as a decimal string")
    hash: str
    index: int = Field(..., ge=0)

    @field_validator("amount")
    @classmethod
    def _validate_amount(cls, v: str) -> str:
        if not DECIMAL_PATTERN.match(v):
            raise ValueError(f"amount must be a non-negative decimal string, got: {v!r}")
        if int(v) > MAX_AMOUNT:
            raise ValueError(f"amount {v} does not fit in 8 bytes")
        return v

    @field_validator("hash")
    @classmethod
    def _validate_hash(cls, v: str) -> str:
        return validate_hex_hash(v, "hash")


class TreeExport(BaseModel):
    """
    Persisted/distributed form of a payout tree.

    Layer 0 holds the leaf hashes; the last layer holds only the root.
    """

    model_config = ConfigDict(extra="forbid")

    root: str
    leaves: list[LeafExport] = Field(..., min_length=1)
    layers: list[list[str]] = Field(..., min_length=1)

    @field_validator("root")
    @classmethod
    def _validate_root(cls, v: str) -> str:
        return validate_hex_hash(v, "root")

    @field_validator("layers")
    @classmethod
    def _validate_layers(cls, v: list[list[str]]) -> list[list[str]]:
        checked: list[list[str]] = []
        for level, layer in enumerate(v):
            if not layer:
                raise ValueError(f"layer {level} is empty")
            checked.append([validate_hex_hash(h, f"layers[{level}]") for h in layer])
        return checked

    @model_validator(mode="after")
    def _validate_shape(self) -> "TreeExport":
        if len(self.layers[-1]) != 1:
            raise ValueError("last layer must contain exactly one hash (the root)")
        if self.layers[-1][0] != self.root:
            raise ValueError("root does not match the last layer")
        if len(self.layers[0]) != len(self.leaves):
            raise ValueError(
                f"layer 0 has {len(self.layers[0])} hashes for {len(self.leaves)} leaves"
            )
        return self
