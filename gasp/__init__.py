"""
GASP Game Engine

Escrowed number-factoring challenges with a halving reward pool.

Architecture:
  - Issuers escrow tokens against a number (submit)
  - Solvers race to name a proper divisor before the deadline (solve);
    half the reward goes to the solver, half feeds the asset's pool
  - Unsolved challenges return to the issuer after the deadline with
    half of the pool on top (claim)
  - Balances live on external ledgers (ERC20); the engine only moves
    custody and keeps the books

Usage:
    from gasp import GaspGame, GameProxy, LedgerDirectory, ManualClock
    from gasp import ERC20Token, TokenLedger

    token = ERC20Token("0xToken", supply=10_000, owner="alice")
    ledgers = LedgerDirectory(TokenLedger(token, custody="gasp"))
    clock = ManualClock()

    game = GameProxy.deploy(GaspGame, ledgers, clock, admin="deployer")
    token.approve("alice", "gasp", 100)
    cid = game.submit(21, "0xToken", 100, issuer="alice")
    game.solve(cid, 7, solver="bob")   # (50, 50)
"""

from .deadline import TIME_FRAME, Clock, ManualClock, NodeBlockClock, Web3BlockClock
from .dispatch import GameDispatcher
from .engine import GaspGame
from .errors import (
    AccessControlUnauthorizedAccount,
    AssetTransferFailed,
    BareRejection,
    ChallengeAlreadyExpired,
    ChallengeAlreadySolved,
    ChallengeNotFound,
    ChallengeStillActive,
    GameError,
    InvalidAssetKind,
    InvalidChallengeProof,
    InvalidInitialization,
    InvalidUint,
    SettlementPending,
    TransferPending,
    UnauthorizedClaimer,
    ZeroNumber,
    ZeroReward,
)
from .game_types import (
    Challenge,
    ChallengeRewardClaimed,
    ChallengeSolved,
    ChallengeStatus,
    ChallengeSubmitted,
    PendingSettlement,
)
from .ledgers import AssetLedger, ERC20Token, LedgerDirectory, TokenLedger, Web3TokenLedger
from .pool import PoolLedger
from .proof import acceptable_proofs, is_acceptable_proof
from .proxy import DEFAULT_ADMIN_ROLE, GameProxy
from .storage import GameStorage, StorageFile
from .units import format_units, parse_units

__version__ = "1.0.0"
__all__ = [
    # Engine
    "GaspGame", "GameProxy", "GameDispatcher", "DEFAULT_ADMIN_ROLE",
    # State
    "GameStorage", "StorageFile", "PoolLedger",
    "Challenge", "ChallengeStatus", "PendingSettlement",
    "ChallengeSubmitted", "ChallengeSolved", "ChallengeRewardClaimed",
    # Policy
    "TIME_FRAME", "is_acceptable_proof", "acceptable_proofs",
    # Collaborators
    "Clock", "ManualClock", "Web3BlockClock", "NodeBlockClock",
    "AssetLedger", "ERC20Token", "TokenLedger", "Web3TokenLedger", "LedgerDirectory",
    # Units
    "parse_units", "format_units",
    # Errors
    "GameError", "ZeroNumber", "ZeroReward", "InvalidUint", "InvalidAssetKind",
    "InvalidChallengeProof", "ChallengeNotFound", "ChallengeAlreadySolved",
    "ChallengeAlreadyExpired", "ChallengeStillActive", "InvalidInitialization",
    "AssetTransferFailed", "TransferPending", "SettlementPending",
    "UnauthorizedClaimer", "AccessControlUnauthorizedAccount",
    "BareRejection",
]
