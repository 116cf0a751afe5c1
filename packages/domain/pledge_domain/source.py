"""Snapshot source interface.

The engine never reads the ledger itself. Callers hand it fresh snapshots,
typically fetched through an object implementing SnapshotSource (an RPC
client, an indexer client, or an in-memory fixture in tests).
"""

from typing import Iterable, List, Protocol, Sequence, Tuple

from .errors import InvariantViolationError
from .schemas import HolderBalance, PledgeSnapshot, normalize_address


class SnapshotSource(Protocol):
    """Provides fresh ledger reads on request."""

    def fetch_snapshots(self, addresses: Sequence[str]) -> List[PledgeSnapshot]:
        """Current snapshot of each pledge address."""
        ...

    def fetch_holder_balances(self, holder: str, addresses: Sequence[str]) -> List[HolderBalance]:
        """The holder's balances in each pledge address."""
        ...


def pair_holdings(
    snapshots: Iterable[PledgeSnapshot],
    balances: Iterable[HolderBalance],
) -> List[Tuple[PledgeSnapshot, HolderBalance]]:
    """Match each balance with the snapshot of its pledge, in balance order.

    Raises:
        InvariantViolationError: If a balance refers to a pledge with no snapshot
    """
    by_address = {normalize_address(s.address): s for s in snapshots}
    holdings = []
    for balance in balances:
        snapshot = by_address.get(normalize_address(balance.pledge))
        if snapshot is None:
            raise InvariantViolationError(
                f"No snapshot for pledge {balance.pledge} held by {balance.holder}",
                field="pledge",
                value=balance.pledge,
            )
        holdings.append((snapshot, balance))
    return holdings


def load_holdings(
    source: SnapshotSource,
    holder: str,
    addresses: Sequence[str],
) -> List[Tuple[PledgeSnapshot, HolderBalance]]:
    """Fetch snapshots and the holder's balances once each, then pair them."""
    snapshots = source.fetch_snapshots(addresses)
    balances = source.fetch_holder_balances(holder, addresses)
    return pair_holdings(snapshots, balances)
