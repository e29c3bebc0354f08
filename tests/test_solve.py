"""Tests for solving challenges."""

import pytest

from gasp import (
    AssetTransferFailed,
    ChallengeAlreadyExpired,
    ChallengeAlreadySolved,
    ChallengeNotFound,
    ChallengeSolved,
    ChallengeStatus,
    InvalidChallengeProof,
    InvalidUint,
)
from tests.helpers import CHALLENGER, CUSTODY, REWARD, SOLVER, TOKEN


class TestSolveNegative:

    def test_no_challenge_submitted(self, game):
        cid = game.current_challenge_id()
        with pytest.raises(ChallengeNotFound) as exc:
            game.solve(cid, 3, solver=SOLVER)
        assert exc.value.args == (cid,)

    def test_unknown_id(self, game, submitted):
        with pytest.raises(ChallengeNotFound):
            game.solve(submitted + 1, 3, solver=SOLVER)

    def test_solving_twice(self, game, submitted, token):
        game.solve(submitted, 3, solver=SOLVER)
        with pytest.raises(ChallengeAlreadySolved) as exc:
            game.solve(submitted, 7, solver=SOLVER)
        assert exc.value.args == (submitted,)
        assert token.balance_of(SOLVER) == REWARD // 2

    def test_expired(self, game, submitted, clock):
        clock.mine(10)
        with pytest.raises(ChallengeAlreadyExpired) as exc:
            game.solve(submitted, 3, solver=SOLVER)
        assert exc.value.args == (submitted, 10)

    def test_expired_checked_before_proof(self, game, submitted, clock):
        clock.mine(50)
        with pytest.raises(ChallengeAlreadyExpired):
            game.solve(submitted, 1, solver=SOLVER)

    @pytest.mark.parametrize("proof", [1, 21, 5, 0])
    def test_invalid_proof(self, game, submitted, token, proof):
        """Degenerate and wrong proofs leave the challenge open and funds in place."""
        with pytest.raises(InvalidChallengeProof) as exc:
            game.solve(submitted, proof, solver=SOLVER)
        assert exc.value.args == (submitted, proof)
        assert game.challenge_status(submitted) is ChallengeStatus.UNSETTLED
        assert token.balance_of(SOLVER) == 0
        assert token.balance_of(CUSTODY) == REWARD
        assert game.pool_balance(TOKEN) == 0

    def test_negative_proof(self, game, submitted):
        with pytest.raises(InvalidUint):
            game.solve(submitted, -3, solver=SOLVER)

    def test_claimed_challenge_cannot_be_solved(self, game, submitted, clock):
        clock.mine(10)
        game.claim(submitted, caller=CHALLENGER)
        with pytest.raises(ChallengeNotFound):
            game.solve(submitted, 3, solver=SOLVER)

    def test_payout_failure_is_atomic(self, game, submitted, token):
        """If custody cannot pay, nothing changes."""
        token.balances[CUSTODY] = 0
        with pytest.raises(AssetTransferFailed):
            game.solve(submitted, 3, solver=SOLVER)
        assert game.challenge_status(submitted) is ChallengeStatus.UNSETTLED
        assert game.pool_balance(TOKEN) == 0
        assert [e.name for e in game.events] == ["ChallengeSubmitted"]


class TestSolvePositive:

    @pytest.mark.parametrize("proof", [3, 7])
    def test_emits_event_for_each_acceptable_proof(self, game, submitted, proof):
        game.solve(submitted, proof, solver=SOLVER)
        assert game.events[-1] == ChallengeSolved(submitted, TOKEN, REWARD // 2, REWARD // 2)

    @pytest.mark.parametrize("proof", [2, 6, 7, 21])
    def test_all_proofs_of_42(self, game, proof):
        cid = game.submit(42, TOKEN, REWARD, issuer=CHALLENGER)
        assert game.solve(cid, proof, solver=SOLVER) == (REWARD // 2, REWARD // 2)

    def test_last_active_tick(self, game, submitted, clock):
        clock.mine(9)
        game.solve(submitted, 3, solver=SOLVER)
        assert game.challenge_status(submitted) is ChallengeStatus.SOLVED

    def test_token_balances(self, game, submitted, token):
        game.solve(submitted, 3, solver=SOLVER)
        assert token.balance_of(CHALLENGER) == REWARD
        assert token.balance_of(SOLVER) == REWARD // 2
        assert token.balance_of(CUSTODY) == REWARD // 2

    def test_pool_reward(self, game, submitted):
        game.solve(submitted, 3, solver=SOLVER)
        assert game.pool_balance(TOKEN) == REWARD // 2

    def test_record_kept_as_solved(self, game, submitted):
        game.solve(submitted, 7, solver=SOLVER)
        challenge = game.get_challenge(submitted)
        assert challenge.solved
        assert challenge.solver == SOLVER

    def test_odd_amount_remainder_goes_to_pool(self, game, token):
        cid = game.submit(21, TOKEN, 101, issuer=CHALLENGER)
        assert game.solve(cid, 3, solver=SOLVER) == (50, 51)
        assert token.balance_of(SOLVER) == 50
        assert game.pool_balance(TOKEN) == 51

    def test_amount_of_one(self, game, token):
        """Solver share rounds to zero; the single unit feeds the pool."""
        cid = game.submit(21, TOKEN, 1, issuer=CHALLENGER)
        assert game.solve(cid, 3, solver=SOLVER) == (0, 1)
        assert token.balance_of(SOLVER) == 0
        assert game.pool_balance(TOKEN) == 1
