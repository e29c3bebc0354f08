"""Tests for the per-asset reward pool."""

import pytest

from gasp.pool import PoolLedger


def test_unknown_kind_is_zero():
    assert PoolLedger().balance("0xToken") == 0


def test_credit_accumulates():
    pools = PoolLedger()
    pools.credit("0xToken", 50)
    pools.credit("0xToken", 51)
    assert pools.balance("0xToken") == 101


def test_take_half_rounds_down():
    pools = PoolLedger({"0xToken": 101})
    assert pools.take_half("0xToken") == 50
    assert pools.balance("0xToken") == 51


def test_take_half_decays():
    """Repeated claims halve the pool but never drain more than half at once."""
    pools = PoolLedger({"0xToken": 100})
    taken = [pools.take_half("0xToken") for _ in range(4)]
    assert taken == [50, 25, 12, 6]
    assert pools.balance("0xToken") == 7


def test_single_unit_stays():
    pools = PoolLedger({"0xToken": 1})
    assert pools.take_half("0xToken") == 0
    assert pools.balance("0xToken") == 1


def test_take_half_on_empty_kind():
    pools = PoolLedger()
    assert pools.take_half("0xNew") == 0
    assert pools.asset_kinds() == []


def test_kinds_are_isolated():
    pools = PoolLedger()
    pools.credit("0xA", 80)
    pools.credit("0xB", 10)
    pools.take_half("0xA")
    assert pools.balance("0xA") == 40
    assert pools.balance("0xB") == 10
    assert pools.to_dict() == {"0xA": 40, "0xB": 10}


def test_rejects_negative():
    with pytest.raises(ValueError):
        PoolLedger().credit("0xA", -1)
    with pytest.raises(ValueError):
        PoolLedger({"0xA": -5})
