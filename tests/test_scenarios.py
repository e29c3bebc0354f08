"""End-to-end reward flows with small, hand-checkable amounts."""

import pytest

from gasp import (
    ChallengeRewardClaimed,
    ChallengeSolved,
    ChallengeStatus,
    InvalidChallengeProof,
    ZeroNumber,
)
from tests.helpers import CHALLENGER, CUSTODY, SOLVER, TOKEN, expire


@pytest.fixture
def small(token):
    """Challenger funded with exactly 200 base units."""
    token.balances[CHALLENGER] = 200
    return token


def test_solve_feeds_pool(game, small):
    cid = game.submit(21, TOKEN, 100, issuer=CHALLENGER)
    assert cid == 1

    assert game.solve(cid, 3, solver=SOLVER) == (50, 50)
    assert small.balance_of(SOLVER) == 50
    assert game.pool_balance(TOKEN) == 50
    assert game.events[-1].args == (1, TOKEN, 50, 50)


def test_unsolved_claim_with_empty_pool(game, clock, small):
    cid = game.submit(21, TOKEN, 100, issuer=CHALLENGER)
    expire(clock)

    assert game.claim(cid, caller=CHALLENGER) == 100
    assert small.balance_of(CHALLENGER) == 200
    assert game.pool_balance(TOKEN) == 0


def test_claim_takes_half_of_pool(game, clock, small):
    first = game.submit(21, TOKEN, 100, issuer=CHALLENGER)
    game.solve(first, 3, solver=SOLVER)

    second = game.submit(42, TOKEN, 100, issuer=CHALLENGER)
    assert second == 2
    expire(clock)

    assert game.claim(second, caller=CHALLENGER) == 125
    assert game.pool_balance(TOKEN) == 25
    assert game.events[-1] == ChallengeRewardClaimed(2, TOKEN, 125)
    # 200 deposited = 50 solver + 125 issuer + 25 pool
    assert small.balance_of(SOLVER) + small.balance_of(CHALLENGER) + small.balance_of(CUSTODY) == 200
    assert small.balance_of(CUSTODY) == 25


def test_zero_number_leaves_no_trace(game, small):
    with pytest.raises(ZeroNumber):
        game.submit(0, TOKEN, 100, issuer=CHALLENGER)
    assert game.current_challenge_id() == 0
    assert small.balance_of(CHALLENGER) == 200


@pytest.mark.parametrize("proof", [1, 21])
def test_degenerate_proof_then_claim(game, clock, small, proof):
    cid = game.submit(21, TOKEN, 100, issuer=CHALLENGER)
    with pytest.raises(InvalidChallengeProof):
        game.solve(cid, proof, solver=SOLVER)
    assert game.challenge_status(cid) is ChallengeStatus.UNSETTLED

    expire(clock)
    assert game.claim(cid, caller=CHALLENGER) == 100


def test_first_proof_wins(game, small):
    """Both factors are valid; arrival order decides."""
    cid = game.submit(21, TOKEN, 100, issuer=CHALLENGER)
    game.solve(cid, 7, solver="fast")
    assert game.get_challenge(cid).solver == "fast"
    assert small.balance_of("fast") == 50
    assert [e for e in game.events if isinstance(e, ChallengeSolved)] == [
        ChallengeSolved(cid, TOKEN, 50, 50)
    ]


def test_pool_decays_across_claims(game, clock, small):
    small.balances[CHALLENGER] = 1000
    small.approve(CHALLENGER, CUSTODY, 1000)

    seed = game.submit(21, TOKEN, 200, issuer=CHALLENGER)
    game.solve(seed, 3, solver=SOLVER)          # pool 100
    ids = [game.submit(42, TOKEN, 10, issuer=CHALLENGER) for _ in range(3)]
    expire(clock)

    payouts = [game.claim(cid, caller=CHALLENGER) for cid in ids]
    assert payouts == [60, 35, 22]
    assert game.pool_balance(TOKEN) == 13
