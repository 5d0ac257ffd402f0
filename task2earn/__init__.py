"""
Task2Earn reward campaigns.

Commits a campaign's payout set to a single Merkle root, proves individual
payouts against it, and gates fund release through the campaign lifecycle.

Subpackages:
- crypto: Hash primitive and hex helpers
- merkle: Payout trees, proofs and verification
- schemas: Pydantic models, canonical JSON and the error taxonomy
- campaign: Lifecycle state machine and fund-movement projection
- config: Runtime configuration
"""

__version__ = "1.0.0"
