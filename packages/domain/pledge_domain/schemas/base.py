"""Base classes and type system for pledge domain models.

This module provides the foundational model classes and annotated types used
throughout the pledge schema system.
"""

from typing import Annotated
from pydantic import BaseModel, Field, ConfigDict

# =============================================================================
# Base Models
# =============================================================================

class DomainModel(BaseModel):
    """Base class for mutable domain models (configuration, creation requests).

    - Validation on assignment for runtime safety
    - Enum value serialization
    """

    model_config = ConfigDict(
        validate_assignment=True,
        use_enum_values=True,
        arbitrary_types_allowed=True,
    )


class FrozenDomainModel(BaseModel):
    """Base class for immutable domain records (snapshots, positions, previews).

    Ledger snapshots and everything derived from them are point-in-time values.
    They are never mutated; a "changed" record is a new instance.
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
    )


# =============================================================================
# Type Aliases - Numeric
# =============================================================================
#
# Amount fields are plain ints scaled by WAD. Sign checks are NOT expressed as
# Field(ge=0): a negative amount from the ledger is an invariant violation and
# is raised as InvariantViolationError by the model validators instead of a
# generic pydantic ValidationError.

Wei = Annotated[
    int,
    Field(description="Fixed-point amount scaled by 10**18 (shares or currency)")
]

BasisPoints = Annotated[
    int,
    Field(description="Basis points (1/100 of a percent, 10000 = 100%)")
]

Timestamp = Annotated[
    int,
    Field(description="Unix timestamp in seconds")
]


# =============================================================================
# ID Conventions
# =============================================================================

Address = Annotated[
    str,
    Field(
        pattern=r'^0x[0-9a-fA-F]{40}$',
        description="0x-prefixed 20-byte hex address (pledge, holder, creator, token)"
    )
]


def normalize_address(address: str) -> str:
    """Lower-case an address so comparisons ignore checksum casing."""
    return address.lower()


# =============================================================================
# ID Examples and Conventions
# =============================================================================
#
# Addresses:
#   - Pledge contract: "0x5fbdb2315678afecb367f032d93f642f64180aa3"
#   - Holder wallet:   "0x70997970C51812dc3A010C7d01b50e0d17dc79C8" (checksum casing allowed)
#
# Amounts:
#   - 1 share          = 10**18
#   - 0.001 currency   = 10**15  (harvest threshold)
#   - total supply     = 1_000_000 * 10**18
#
# =============================================================================
