"""
GASP Game Engine - Deadline Policy & Clocks

A challenge submitted at tick T is active for ticks [T, T + TIME_FRAME)
and expired from T + TIME_FRAME on. The boundary tick is expired.

Ticks come from a Clock. Clocks are logical: a block height or a manually
mined counter, never wall-clock time.
"""

import logging
from abc import ABC, abstractmethod

from .rpc_client import RPCClient

log = logging.getLogger(__name__)

# Ticks a challenge stays solvable
TIME_FRAME = 10


# ═══════════════════════════════════════════════════════════════════════════════
# POLICY
# ═══════════════════════════════════════════════════════════════════════════════

def deadline_tick(submission_tick: int, time_frame: int = TIME_FRAME) -> int:
    """First tick at which the challenge is expired."""
    return submission_tick + time_frame


def is_active(submission_tick: int, now: int, time_frame: int = TIME_FRAME) -> bool:
    return now < deadline_tick(submission_tick, time_frame)


def is_expired(submission_tick: int, now: int, time_frame: int = TIME_FRAME) -> bool:
    return now >= deadline_tick(submission_tick, time_frame)


# ═══════════════════════════════════════════════════════════════════════════════
# CLOCKS
# ═══════════════════════════════════════════════════════════════════════════════

class Clock(ABC):
    """Source of the current tick."""

    @abstractmethod
    def now(self) -> int:
        """Current tick (monotonically nondecreasing)."""


class ManualClock(Clock):
    """
    Clock advanced by hand, one tick per mined block.

    Usage:
        clock = ManualClock()
        clock.mine(10)
        clock.now()   # 10
    """

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError(f"Start tick must be >= 0, got {start}")
        self._tick = start

    def now(self) -> int:
        return self._tick

    def mine(self, blocks: int = 1) -> int:
        """Advance the clock. Returns the new tick."""
        if blocks < 0:
            raise ValueError("Clock cannot go backwards")
        self._tick += blocks
        return self._tick


class Web3BlockClock(Clock):
    """Tick = latest block number of a web3 provider."""

    def __init__(self, w3):
        self.w3 = w3
        self._last = 0

    def now(self) -> int:
        height = int(self.w3.eth.block_number)
        if height < self._last:
            # reorg to a shorter chain; ticks must not go backwards
            log.warning(f"Block height went back from {self._last} to {height}")
            return self._last
        self._last = height
        return height


class NodeBlockClock(Clock):
    """Tick = block count reported by a JSON-RPC node."""

    def __init__(self, rpc: RPCClient):
        self.rpc = rpc
        self._last = 0

    def now(self) -> int:
        height = int(self.rpc.getblockcount())
        if height < self._last:
            log.warning(f"Block count went back from {self._last} to {height}")
            return self._last
        self._last = height
        return height
