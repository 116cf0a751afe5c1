"""Base classes for pledge computation blocks.

Blocks turn engine results into pandas DataFrames for tabular consumers
(dashboards, exports, notebooks):
- Block: declares the context keys it reads and writes
- BlockContext: key/value store passed through a run
- BlockExecutor: orders blocks by their data dependencies and runs them
"""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, List, Optional

import pandas as pd

from ..logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Block Context
# =============================================================================

@dataclass
class BlockContext:
    """Values shared between blocks during one run.

    Example:
        context = BlockContext()
        context.set("pledge_snapshots", snapshots)
        context.set("as_of", 1_750_000_000)

        PledgeMetricsBlock().execute(context)
        metrics_df = context.get("pledge_metrics")
    """

    _data: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str) -> Any:
        """Value stored under key.

        Raises:
            KeyError: If nothing was stored under key
        """
        if key not in self._data:
            raise KeyError(f"Key '{key}' not found in context. Available keys: {sorted(self._data)}")
        return self._data[key]

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def has(self, key: str) -> bool:
        return key in self._data

    def keys(self) -> List[str]:
        return list(self._data.keys())


# =============================================================================
# Frames
# =============================================================================

def exact_frame(rows: List[dict], columns: List[str], exact_columns: Iterable[str]) -> pd.DataFrame:
    """Build a DataFrame keeping fixed-point columns as exact Python ints.

    Share and currency amounts overflow int64 (total supply is 10**24), and
    pandas would otherwise infer uint64, float or object per column depending
    on the values present.
    """
    df = pd.DataFrame(rows, columns=columns)
    return df.astype({column: object for column in exact_columns})


# =============================================================================
# Block Base Class
# =============================================================================

class Block(ABC):
    """A computation step with declared inputs and outputs.

    Subclass example:
        class FloorPriceBlock(Block):
            def inputs(self) -> List[str]:
                return ["pledge_snapshots"]

            def outputs(self) -> List[str]:
                return ["floor_prices"]

            def execute(self, context: BlockContext) -> None:
                snapshots = context.get("pledge_snapshots")
                context.set("floor_prices", pd.DataFrame(
                    {"address": s.address, "floor_price": floor_price(s)} for s in snapshots
                ))
    """

    @abstractmethod
    def inputs(self) -> List[str]:
        """Context keys this block reads."""

    @abstractmethod
    def outputs(self) -> List[str]:
        """Context keys this block writes."""

    @abstractmethod
    def execute(self, context: BlockContext) -> None:
        """Read inputs from context, compute, and write every declared output."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(inputs={self.inputs()}, outputs={self.outputs()})"


# =============================================================================
# Dependency Resolution
# =============================================================================

class CircularDependencyError(Exception):
    """Raised when blocks depend on each other's outputs in a cycle."""


def topological_sort(blocks: List[Block]) -> List[Block]:
    """Order blocks so every producer runs before its consumers (Kahn's algorithm).

    Blocks with no dependency between them keep their relative input order.
    Inputs no block produces are expected in the initial context.

    Raises:
        ValueError: If two blocks declare the same output
        CircularDependencyError: If the dependency graph has a cycle
    """
    producers: Dict[str, Block] = {}
    for block in blocks:
        for key in block.outputs():
            if key in producers:
                raise ValueError(f"Multiple blocks produce '{key}': {producers[key]} and {block}")
            producers[key] = block

    pending: Dict[Block, int] = {block: 0 for block in blocks}
    consumers: Dict[Block, List[Block]] = {block: [] for block in blocks}
    for block in blocks:
        for key in block.inputs():
            producer = producers.get(key)
            if producer is not None:
                consumers[producer].append(block)
                pending[block] += 1

    ready: Deque[Block] = deque(block for block in blocks if pending[block] == 0)
    ordered: List[Block] = []
    while ready:
        current = ready.popleft()
        ordered.append(current)
        for consumer in consumers[current]:
            pending[consumer] -= 1
            if pending[consumer] == 0:
                ready.append(consumer)

    if len(ordered) != len(blocks):
        stuck = [block for block in blocks if pending[block] > 0]
        raise CircularDependencyError(f"Circular dependency detected among blocks: {stuck}")
    return ordered


# =============================================================================
# Block Executor
# =============================================================================

class BlockExecutor:
    """Runs blocks in dependency order against a context.

    Example:
        executor = BlockExecutor([LeaderboardBlock(), PledgeMetricsBlock()])
        context = BlockContext()
        context.set("pledge_snapshots", snapshots)
        context.set("as_of", now)
        executor.execute(context)

        context.get("leaderboard_by_vault")
    """

    def __init__(self, blocks: List[Block]):
        self.blocks = blocks
        self._ordered: Optional[List[Block]] = None

    def execute(self, context: BlockContext) -> BlockContext:
        """Run every block and return the context holding their outputs.

        Raises:
            CircularDependencyError: If blocks depend on each other in a cycle
            KeyError: If a block's input is neither in the context nor produced
            ValueError: If a block does not write one of its declared outputs
        """
        if self._ordered is None:
            self._ordered = topological_sort(self.blocks)

        for block in self._ordered:
            missing = [key for key in block.inputs() if not context.has(key)]
            if missing:
                raise KeyError(
                    f"Block {block} requires inputs {missing} which are not in context. "
                    f"Available keys: {context.keys()}"
                )

            logger.debug("block_started", block=block.__class__.__name__)
            block.execute(context)

            unwritten = [key for key in block.outputs() if not context.has(key)]
            if unwritten:
                raise ValueError(f"Block {block} declared outputs {unwritten} but did not write them")
            logger.debug("block_finished", block=block.__class__.__name__, outputs=block.outputs())

        return context
