"""
Runtime Configuration Module

Provides configuration loading and management for campaign processing.
"""

from .runtime import (
    CampaignDefaults,
    LoggingConfig,
    RuntimeConfig,
    configure_logging,
)

__all__ = [
    "CampaignDefaults",
    "LoggingConfig",
    "RuntimeConfig",
    "configure_logging",
]
