"""Shared pytest fixtures and configuration.

Every test gets a fresh in-memory token, a manual clock starting at tick 0
and an engine behind a proxy, deployed and initialized by `deployer`.
`challenger` holds 2 x REWARD tokens and has approved the engine for them.
"""

import os

import pytest
from hypothesis import HealthCheck, settings

from gasp import (
    ERC20Token,
    GameProxy,
    GaspGame,
    LedgerDirectory,
    ManualClock,
    TokenLedger,
)
from tests.helpers import CHALLENGER, CUSTODY, DEPLOYER, OTHER_TOKEN, REWARD, SUPPLY, TOKEN

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=50,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)

settings.register_profile(
    "dev",
    max_examples=25,
    deadline=500,
)

settings.register_profile(
    "thorough",
    max_examples=1000,
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def token():
    t = ERC20Token(TOKEN, supply=SUPPLY, owner=DEPLOYER)
    t.transfer(DEPLOYER, CHALLENGER, REWARD * 2)
    t.approve(CHALLENGER, CUSTODY, REWARD * 2)
    return t


@pytest.fixture
def other_token():
    t = ERC20Token(OTHER_TOKEN, supply=SUPPLY, owner=DEPLOYER)
    t.transfer(DEPLOYER, CHALLENGER, REWARD * 2)
    t.approve(CHALLENGER, CUSTODY, REWARD * 2)
    return t


@pytest.fixture
def ledgers(token, other_token):
    return LedgerDirectory(
        TokenLedger(token, custody=CUSTODY),
        TokenLedger(other_token, custody=CUSTODY),
    )


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def game(ledgers, clock):
    return GameProxy.deploy(GaspGame, ledgers, clock, admin=DEPLOYER)


@pytest.fixture
def submitted(game):
    """Challenge on 21 (proofs 3 and 7) funded with REWARD; returns its id."""
    return game.submit(21, TOKEN, REWARD, issuer=CHALLENGER)
