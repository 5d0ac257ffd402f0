"""
Runtime Configuration

Central configuration for campaign defaults and logging.
"""

from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


DEFAULT_PENALTY_BPS = 500  # 5%


@dataclass
class CampaignDefaults:
    """Defaults applied to new campaigns and lifecycle checks."""
    penalty_bps: int = DEFAULT_PENALTY_BPS
    allowed_before_claims: bool = True
    allowed_after_claims: bool = False
    min_pool_amount: int = 0
    fee_wallet: str = ""

    def __post_init__(self):
        if not 0 <= self.penalty_bps <= 10_000:
            raise ValueError(f"penalty_bps must be within [0, 10000], got {self.penalty_bps}")
        if self.min_pool_amount < 0:
            raise ValueError(f"min_pool_amount must be non-negative, got {self.min_pool_amount}")


@dataclass
class LoggingConfig:
    """Configuration for the standard library logging setup."""
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    campaign: CampaignDefaults = field(default_factory=CampaignDefaults)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - T2E_PENALTY_BPS: Default cancel penalty in basis points
        - T2E_MIN_POOL_AMOUNT: Smallest accepted deposit
        - T2E_FEE_WALLET: Default fee recipient
        - T2E_LOG_LEVEL: Logging level name
        """
        overrides: dict[str, Any] = {}

        if os.getenv("T2E_PENALTY_BPS"):
            overrides.setdefault("campaign", {})["penalty_bps"] = int(os.getenv("T2E_PENALTY_BPS"))
        if os.getenv("T2E_MIN_POOL_AMOUNT"):
            overrides.setdefault("campaign", {})["min_pool_amount"] = int(
                os.getenv("T2E_MIN_POOL_AMOUNT")
            )
        if os.getenv("T2E_FEE_WALLET"):
            overrides.setdefault("campaign", {})["fee_wallet"] = os.getenv("T2E_FEE_WALLET")

        if os.getenv("T2E_LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv("T2E_LOG_LEVEL", "INFO").upper()

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        campaign_data = data.get("campaign", {})
        logging_data = data.get("logging", {})

        campaign = CampaignDefaults(**campaign_data) if campaign_data else CampaignDefaults()
        log_config = LoggingConfig(**logging_data) if logging_data else LoggingConfig()

        return cls(
            campaign=campaign,
            logging=log_config,
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)

        if "campaign" in overrides:
            for key, value in overrides["campaign"].items():
                setattr(new_config.campaign, key, value)
            # Re-run range checks on the merged values
            new_config.campaign.__post_init__()

        if "logging" in overrides:
            for key, value in overrides["logging"].items():
                setattr(new_config.logging, key, value)

        return new_config

    def to_dict(self) -> dict[str, Any]:
        return {
            "campaign": {
                "penalty_bps": self.campaign.penalty_bps,
                "allowed_before_claims": self.campaign.allowed_before_claims,
                "allowed_after_claims": self.campaign.allowed_after_claims,
                "min_pool_amount": self.campaign.min_pool_amount,
                "fee_wallet": self.campaign.fee_wallet,
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
            },
            "extra": dict(self.extra),
        }


def configure_logging(config: Optional[RuntimeConfig] = None) -> None:
    """Apply the logging section of a config to the root logger."""
    config = config or RuntimeConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
        format=config.logging.format,
    )
