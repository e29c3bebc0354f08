"""Shared constants and helpers for tests."""

import itertools

from gasp import ManualClock, TokenLedger, TransferPending
from gasp.rpc_client import RPCError

CUSTODY = "gasp-engine"
TOKEN = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
OTHER_TOKEN = "0xdAC17F958D2ee523a2206206994597C13D831ec7"
REWARD = 100 * 10 ** 18
SUPPLY = 10_000 * 10 ** 18

DEPLOYER = "deployer"
CHALLENGER = "challenger"
SOLVER = "solver"


def expire(clock, frame: int = 10):
    """Mine enough ticks for a challenge submitted now to expire."""
    return clock.mine(frame)


class StallingLedger(TokenLedger):
    """
    TokenLedger whose movements can be left unconfirmed.

    With `stall_next` set, the next movement is queued under a fresh hash
    and TransferPending is raised; `mine(tx_hash)` later applies (or drops)
    it, after which transfer_status reports the outcome.
    """

    def __init__(self, token, custody):
        super().__init__(token, custody)
        self.stall_next = False
        self.queued = {}
        self.mined = {}
        self._hashes = itertools.count(1)

    def transfer_in(self, sender, amount):
        return self._move(super().transfer_in, sender, amount)

    def transfer_out(self, recipient, amount):
        return self._move(super().transfer_out, recipient, amount)

    def mine(self, tx_hash, success=True):
        move = self.queued.pop(tx_hash)
        if success:
            move()
        self.mined[tx_hash] = success

    def transfer_status(self, tx_ref):
        return self.mined.get(tx_ref)

    def _move(self, move, account, amount):
        if not self.stall_next:
            return move(account, amount)
        self.stall_next = False
        tx_hash = f"0x{next(self._hashes):064x}"
        self.queued[tx_hash] = lambda: move(account, amount)
        raise TransferPending(self.asset_kind, tx_hash)


class FailingClock(ManualClock):
    """ManualClock that raises the node error once `down` is set."""

    def __init__(self, start=0):
        super().__init__(start)
        self.down = False

    def now(self):
        if self.down:
            raise RPCError(-1, "Connection failed: node unreachable")
        return super().now()
