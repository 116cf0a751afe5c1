"""Engine configuration.

EngineCFG holds the protocol constants the engine applies as policy: harvest
threshold, yield split, slippage buffer, contribution minimum and so on. The
defaults match the deployed protocol; a YAML file can override any of them.

Example YAML:
    harvest_threshold: 1000000000000000   # 0.001 units
    slippage_buffer_bps: 200              # +2% on treasury purchases
"""

from pathlib import Path
from typing import Union
from pydantic import Field
import yaml

from .base import DomainModel, Wei


class EngineCFG(DomainModel):
    """Configuration for the pledge economics engine.

    Example:
        cfg = EngineCFG()                                  # protocol defaults
        cfg = EngineCFG(slippage_buffer_bps=50)            # +0.5% buffer
        cfg = EngineCFG.from_yaml("config/engine.yaml")    # file overrides
    """

    harvest_threshold: Wei = Field(
        default=10**15,
        ge=0,
        description="Minimum accrued yield (0.001 units) for the harvest action to be offered"
    )

    holder_yield_pct: int = Field(
        default=80,
        ge=0,
        le=100,
        description="Percent of harvested yield credited to holders (remainder to protocol)"
    )

    slippage_buffer_bps: int = Field(
        default=100,
        ge=0,
        le=10_000,
        description="Upward buffer callers add to treasury purchase cost (100 bps = +1%)"
    )

    min_contribution: Wei = Field(
        default=10**14,
        ge=0,
        description="Smallest contribution accepted by the contribution preview (0.0001 units)"
    )

    listing_fee: Wei = Field(
        default=10**16,
        ge=0,
        description="Fee paid to create a pledge (0.01 units)"
    )

    min_funding_goal: Wei = Field(
        default=10**15,
        ge=0,
        description="Smallest funding goal accepted at creation (0.001 units)"
    )

    simulated_yield_rate: Wei = Field(
        default=10**10,
        ge=0,
        description="Per-second increment for the cosmetic yield ticker"
    )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "EngineCFG":
        """Load configuration overrides from a YAML file.

        Missing keys keep their defaults. An empty file yields the defaults.

        Raises:
            FileNotFoundError: If path does not exist
            pydantic.ValidationError: If a value is out of range
        """
        with open(path) as f:
            overrides = yaml.safe_load(f) or {}
        return cls(**overrides)
