"""Pledge domain schemas.

This package contains all Pydantic models for the pledge domain layer:
- Base types and conventions
- Pledge snapshots, phases and creation requests
- Holder balances, positions and portfolio aggregates
- Yield and dividend accounting records
- Action previews and typed rejections
- Engine configuration

Usage:
    from pledge_domain.schemas import (
        PledgeSnapshot, PledgePhase, HolderBalance, DividendDeposit, EngineCFG
    )
"""

# Base types
from .base import (
    DomainModel,
    FrozenDomainModel,
    Wei,
    BasisPoints,
    Timestamp,
    Address,
    normalize_address,
)

# Pledge
from .pledge import (
    TOTAL_SUPPLY,
    PledgePhase,
    PledgeSnapshot,
    PledgeCreationRequest,
)

# Positions
from .positions import (
    HolderBalance,
    HolderPosition,
    PortfolioAggregate,
    FounderShareTrend,
)

# Accounting events
from .events import (
    HarvestSplit,
    HarvestEvent,
    DividendDeposit,
    SimulatedYield,
)

# Previews
from .previews import (
    RejectionReason,
    PreviewRejection,
    RedemptionPreview,
    ContributionPreview,
    TreasuryPurchasePreview,
    CreationPreview,
)

# Configuration
from .config import EngineCFG

__all__ = [
    # Base types
    "DomainModel",
    "FrozenDomainModel",
    "Wei",
    "BasisPoints",
    "Timestamp",
    "Address",
    "normalize_address",
    # Pledge
    "TOTAL_SUPPLY",
    "PledgePhase",
    "PledgeSnapshot",
    "PledgeCreationRequest",
    # Positions
    "HolderBalance",
    "HolderPosition",
    "PortfolioAggregate",
    "FounderShareTrend",
    # Accounting events
    "HarvestSplit",
    "HarvestEvent",
    "DividendDeposit",
    "SimulatedYield",
    # Previews
    "RejectionReason",
    "PreviewRejection",
    "RedemptionPreview",
    "ContributionPreview",
    "TreasuryPurchasePreview",
    "CreationPreview",
    # Configuration
    "EngineCFG",
]
