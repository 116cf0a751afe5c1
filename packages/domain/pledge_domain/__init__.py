"""Pledge Domain Engine - economics of fixed-supply pledge crowdfunding.

This package projects snapshots of an external pledge ledger into derived
metrics:
- Fixed-point share arithmetic (18-decimal integers)
- Phase state machine (Funding / Active / Failed) with pending transitions
- ICO and floor prices, holder valuation and action previews
- Yield harvest split and dividend distribution
- Platform leaderboards and portfolio aggregation

The domain layer is designed to be:
- Side-effect free (no ledger reads, no clock, no shared state)
- Deterministic (same snapshot in, same numbers out)
- Testable (pure Python with Pydantic validation)
"""

from .schemas import *  # noqa: F403, F401

__version__ = "0.1.0"
