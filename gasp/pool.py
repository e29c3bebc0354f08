"""
GASP Game Engine - Pool Ledger

One accumulator per asset kind. Solves credit the pool share of the
reward; each claim takes half of whatever is there (rounded down), so a
pool never drains in a single claim.

Asset kinds never mix: every method is keyed by asset kind.
"""

from typing import Dict


class PoolLedger:
    """
    Per-asset-kind reward pool.

    Usage:
        pools = PoolLedger()
        pools.credit("0xToken", 50)
        bonus = pools.take_half("0xToken")   # 25, pool now 25
    """

    def __init__(self, balances: Dict[str, int] = None):
        self._balances: Dict[str, int] = dict(balances or {})
        for kind, amount in self._balances.items():
            if amount < 0:
                raise ValueError(f"Negative pool balance for {kind}: {amount}")

    def balance(self, asset_kind: str) -> int:
        """Current pool balance (0 for kinds never credited)."""
        return self._balances.get(asset_kind, 0)

    def credit(self, asset_kind: str, amount: int):
        if amount < 0:
            raise ValueError(f"Cannot credit a negative amount: {amount}")
        self._balances[asset_kind] = self._balances.get(asset_kind, 0) + amount

    def half(self, asset_kind: str) -> int:
        """Bonus the next claim on this asset kind would receive."""
        return self.balance(asset_kind) // 2

    def take_half(self, asset_kind: str) -> int:
        """Debit floor(balance / 2) and return it."""
        bonus = self.half(asset_kind)
        if asset_kind in self._balances:
            self._balances[asset_kind] -= bonus
        return bonus

    def asset_kinds(self):
        return sorted(self._balances)

    def to_dict(self) -> Dict[str, int]:
        return dict(self._balances)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PoolLedger):
            return NotImplemented
        return self._balances == other._balances

    def __repr__(self) -> str:
        return f"PoolLedger({self._balances!r})"
