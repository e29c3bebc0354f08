"""
GASP Game Engine - Challenge Registry

Issuers escrow tokens against a number. Anyone may solve it by naming a
proper nontrivial divisor before the deadline:

  - solve:  solver gets floor(amount / 2), the rest feeds the asset's pool
  - claim:  after the deadline an unsolved challenge returns its amount to
            the issuer plus floor(pool / 2); the record is then deleted

Lifecycle per id:

    ABSENT --submit--> UNSETTLED --solve--> SOLVED      (terminal)
                           |
                           +------claim---> ABSENT      (id never reused)

Every operation validates first, then makes its single ledger call, and
only then touches storage. A failure at any step leaves no trace.

A transfer that was broadcast but never confirmed (TransferPending) is
parked in storage; its challenge is frozen until settle_pending() learns
the outcome from the ledger.
"""

import logging
import threading
from dataclasses import replace
from typing import Callable, List, Optional, Tuple

from .deadline import TIME_FRAME, Clock, deadline_tick, is_active
from .errors import (
    AssetTransferFailed,
    ChallengeAlreadyExpired,
    ChallengeAlreadySolved,
    ChallengeNotFound,
    ChallengeStillActive,
    GameError,
    InvalidAssetKind,
    InvalidChallengeProof,
    InvalidInitialization,
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
    require_uint,
)
from .ledgers import AssetLedger, LedgerDirectory
from .proof import is_acceptable_proof
from .storage import GameStorage

log = logging.getLogger(__name__)


class GaspGame:
    """
    Challenge registry and reward pools.

    Usage:
        game = GaspGame(GameStorage(), LedgerDirectory(ledger), ManualClock())
        game.initialize(admin="deployer")

        cid = game.submit(21, token.address, 100, issuer="alice")
        game.solve(cid, 3, solver="bob")          # (50, 50)

        # or, 10 ticks later and unsolved:
        game.claim(cid, caller="alice")           # 100 + pool // 2
    """

    VERSION = "1.0.0"

    def __init__(self, storage: GameStorage, ledgers: LedgerDirectory,
                 clock: Clock, time_frame: int = TIME_FRAME):
        if time_frame <= 0:
            raise ValueError(f"Time frame must be positive, got {time_frame}")
        self.storage = storage
        self.ledgers = ledgers
        self.clock = clock
        self.time_frame = time_frame

        self.events: List[object] = []
        self._listeners: List[Callable] = []
        self._lock = threading.RLock()

    # ═══════════════════════════════════════════════════════════════════════
    # LIFECYCLE / QUERIES
    # ═══════════════════════════════════════════════════════════════════════

    def initialize(self, admin: str):
        """One-time setup of fresh storage."""
        with self._lock:
            if self.storage.initialized:
                raise self._reject(InvalidInitialization())
            self.storage.initialized = True
            self.storage.admin = admin
            log.info(f"Engine initialized, admin={admin}")

    def version(self) -> str:
        return self.VERSION

    def challenge_time_frame(self) -> int:
        return self.time_frame

    def current_challenge_id(self) -> int:
        """Last id issued (0 before the first submit)."""
        return self.storage.current_challenge_id

    def pool_balance(self, asset_kind: str) -> int:
        """Pool for `asset_kind` (0 for kinds never credited or not a string)."""
        if not isinstance(asset_kind, str):
            return 0
        ledger = self.ledgers.resolve(asset_kind)
        key = ledger.asset_kind if ledger else asset_kind
        return self.storage.pools.balance(key)

    def get_challenge(self, challenge_id: int) -> Challenge:
        """Copy of the record; ChallengeNotFound if absent."""
        return replace(self._require_challenge(challenge_id))

    def challenge_status(self, challenge_id: int) -> ChallengeStatus:
        challenge = self.storage.challenges.get(challenge_id)
        if challenge is None:
            return ChallengeStatus.ABSENT
        return challenge.status

    def deadline_of(self, challenge_id: int) -> int:
        challenge = self._require_challenge(challenge_id)
        return deadline_tick(challenge.submission_tick, self.time_frame)

    def subscribe(self, callback: Callable):
        """Call `callback(event)` for every notification emitted."""
        self._listeners.append(callback)

    # ═══════════════════════════════════════════════════════════════════════
    # OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════

    def submit(self, number: int, asset_kind: str, amount: int, issuer: str) -> int:
        """
        Escrow `amount` of `asset_kind` from `issuer` against `number`.

        Returns:
            New challenge id

        Raises:
            ZeroNumber, ZeroReward, InvalidAssetKind, AssetTransferFailed,
            TransferPending (no id yet; see settle_pending)
        """
        with self._lock:
            require_uint("number", number)
            require_uint("amount", amount)
            if number == 0:
                raise self._reject(ZeroNumber())
            if amount == 0:
                raise self._reject(ZeroReward())

            ledger = self.ledgers.resolve(asset_kind)
            if ledger is None:
                raise self._reject(InvalidAssetKind(asset_kind))
            tick = self.clock.now()

            try:
                self._transfer(ledger.transfer_in, issuer, amount)
            except TransferPending as e:
                self._hold(PendingSettlement(e.tx_hash, "submit", ledger.asset_kind,
                                             issuer, amount, details={"number": number}))
                raise

            return self._record_submission(issuer, number, ledger.asset_kind, amount, tick)

    def solve(self, challenge_id: int, proof: int, solver: str) -> Tuple[int, int]:
        """
        Settle a challenge with a divisor of its number.

        Returns:
            (solver_share, pool_share)

        Raises:
            ChallengeNotFound, SettlementPending, ChallengeAlreadySolved,
            ChallengeAlreadyExpired, InvalidChallengeProof, AssetTransferFailed,
            TransferPending
        """
        with self._lock:
            require_uint("proof", proof)
            challenge = self._require_challenge(challenge_id)
            self._require_not_pending(challenge_id)
            if challenge.solved:
                raise self._reject(ChallengeAlreadySolved(challenge_id))

            deadline = deadline_tick(challenge.submission_tick, self.time_frame)
            if not is_active(challenge.submission_tick, self.clock.now(), self.time_frame):
                raise self._reject(ChallengeAlreadyExpired(challenge_id, deadline))

            if not is_acceptable_proof(challenge.number, proof):
                raise self._reject(InvalidChallengeProof(challenge_id, proof))

            solver_share = challenge.amount // 2
            pool_share = challenge.amount - solver_share

            ledger = self._custody_ledger(challenge)
            if solver_share > 0:
                try:
                    self._transfer(ledger.transfer_out, solver, solver_share)
                except TransferPending as e:
                    self._hold(PendingSettlement(e.tx_hash, "solve", challenge.asset_kind,
                                                 solver, solver_share, challenge_id,
                                                 {"pool_share": pool_share, "proof": proof}))
                    raise

            self._record_solve(challenge, solver, solver_share, pool_share)
            return solver_share, pool_share

    def claim(self, challenge_id: int, caller: str) -> int:
        """
        Return an expired, unsolved challenge to its issuer with a pool bonus.

        Returns:
            Total payout (amount + floor(pool / 2))

        Raises:
            ChallengeNotFound, SettlementPending, ChallengeAlreadySolved,
            ChallengeStillActive, UnauthorizedClaimer, AssetTransferFailed,
            TransferPending
        """
        with self._lock:
            challenge = self._require_challenge(challenge_id)
            self._require_not_pending(challenge_id)
            if challenge.solved:
                raise self._reject(ChallengeAlreadySolved(challenge_id))

            deadline = deadline_tick(challenge.submission_tick, self.time_frame)
            if is_active(challenge.submission_tick, self.clock.now(), self.time_frame):
                raise self._reject(ChallengeStillActive(challenge_id, deadline))

            if caller != challenge.issuer:
                raise self._reject(UnauthorizedClaimer(challenge_id, caller))

            pools = self.storage.pools
            bonus = pools.half(challenge.asset_kind)
            total = challenge.amount + bonus

            ledger = self._custody_ledger(challenge)
            try:
                self._transfer(ledger.transfer_out, challenge.issuer, total)
            except TransferPending as e:
                # bonus stays reserved while the payout is in flight
                pools.take_half(challenge.asset_kind)
                self._hold(PendingSettlement(e.tx_hash, "claim", challenge.asset_kind,
                                             challenge.issuer, total, challenge_id,
                                             {"bonus": bonus}))
                raise

            pools.take_half(challenge.asset_kind)
            self._record_claim(challenge, total)
            return total

    # ═══════════════════════════════════════════════════════════════════════
    # PENDING TRANSFERS
    # ═══════════════════════════════════════════════════════════════════════

    def pending_transfers(self) -> List[PendingSettlement]:
        """Broadcast movements still waiting for their outcome."""
        return [replace(p) for _, p in sorted(self.storage.pending.items())]

    def settle_pending(self, tx_hash: str) -> Optional[bool]:
        """
        Finish the operation behind a pending transfer once its outcome is known.

        A landed transfer completes the submit, solve or claim exactly as if
        the ledger had answered in time. A failed one releases the challenge
        (and, for a claim, returns the reserved bonus to the pool).

        Returns:
            True if completed, False if dropped, None if still unknown

        Raises:
            KeyError: If nothing is pending under `tx_hash`
        """
        with self._lock:
            pending = self.storage.pending.get(tx_hash)
            if pending is None:
                raise KeyError(f"No pending transfer {tx_hash}")

            ledger = self.ledgers.resolve(pending.asset_kind)
            if ledger is None:
                log.warning(f"Pending {pending.operation} {tx_hash}: ledger unavailable")
                return None
            landed = ledger.transfer_status(tx_hash)
            if landed is None:
                log.info(f"Pending {pending.operation} {tx_hash} still unconfirmed")
                return None

            if not landed:
                if pending.operation == "claim":
                    self.storage.pools.credit(pending.asset_kind, pending.details["bonus"])
                del self.storage.pending[tx_hash]
                log.warning(f"Pending {pending.operation} {tx_hash} failed on ledger, released")
                return False

            if pending.operation == "submit":
                tick = self.clock.now()
                del self.storage.pending[tx_hash]
                self._record_submission(pending.account, pending.details["number"],
                                        pending.asset_kind, pending.amount, tick)
            elif pending.operation == "solve":
                challenge = self.storage.challenges[pending.challenge_id]
                del self.storage.pending[tx_hash]
                self._record_solve(challenge, pending.account, pending.amount,
                                   pending.details["pool_share"])
            else:
                challenge = self.storage.challenges[pending.challenge_id]
                del self.storage.pending[tx_hash]
                self._record_claim(challenge, pending.amount)
            return True

    # ═══════════════════════════════════════════════════════════════════════
    # INTERNALS
    # ═══════════════════════════════════════════════════════════════════════

    def _record_submission(self, issuer: str, number: int, asset_kind: str,
                           amount: int, tick: int) -> int:
        challenge_id = self.storage.current_challenge_id + 1
        self.storage.challenges[challenge_id] = Challenge(
            challenge_id=challenge_id,
            issuer=issuer,
            number=number,
            asset_kind=asset_kind,
            amount=amount,
            submission_tick=tick,
        )
        self.storage.current_challenge_id = challenge_id

        log.info(f"Challenge {challenge_id} submitted by {issuer}: "
                 f"number={number} amount={amount} asset={asset_kind} tick={tick}")
        self._emit(ChallengeSubmitted(challenge_id, issuer, number, asset_kind, amount, tick))
        return challenge_id

    def _record_solve(self, challenge: Challenge, solver: str,
                      solver_share: int, pool_share: int):
        self.storage.pools.credit(challenge.asset_kind, pool_share)
        challenge.solved = True
        challenge.solver = solver

        log.info(f"Challenge {challenge.challenge_id} solved by {solver}: "
                 f"solver={solver_share} pool+={pool_share}")
        self._emit(ChallengeSolved(challenge.challenge_id, challenge.asset_kind,
                                   solver_share, pool_share))

    def _record_claim(self, challenge: Challenge, total: int):
        del self.storage.challenges[challenge.challenge_id]

        log.info(f"Challenge {challenge.challenge_id} claimed by {challenge.issuer}: "
                 f"amount={challenge.amount} bonus={total - challenge.amount} "
                 f"pool={self.storage.pools.balance(challenge.asset_kind)}")
        self._emit(ChallengeRewardClaimed(challenge.challenge_id, challenge.asset_kind, total))

    def _require_not_pending(self, challenge_id: int):
        for pending in self.storage.pending.values():
            if pending.challenge_id == challenge_id:
                raise self._reject(SettlementPending(challenge_id, pending.tx_hash))

    def _hold(self, pending: PendingSettlement):
        self.storage.pending[pending.tx_hash] = pending
        log.warning(f"{pending.operation} waiting on {pending.tx_hash} "
                    f"({pending.amount} of {pending.asset_kind} for {pending.account})")

    def _require_challenge(self, challenge_id: int) -> Challenge:
        require_uint("challengeId", challenge_id)
        challenge = self.storage.challenges.get(challenge_id)
        if challenge is None:
            raise self._reject(ChallengeNotFound(challenge_id))
        return challenge

    def _custody_ledger(self, challenge: Challenge) -> AssetLedger:
        ledger = self.ledgers.resolve(challenge.asset_kind)
        if ledger is None:
            raise self._reject(AssetTransferFailed(challenge.asset_kind, "ledger unavailable"))
        return ledger

    def _transfer(self, move: Callable, account: str, amount: int):
        try:
            move(account, amount)
        except AssetTransferFailed as e:
            self._reject(e)
            raise

    def _reject(self, error: GameError) -> GameError:
        log.warning(f"Rejected: {error}")
        return error

    def _emit(self, event: object):
        self.events.append(event)
        for callback in self._listeners:
            try:
                callback(event)
            except Exception:
                log.exception(f"Listener failed on {event.name}")

    def __repr__(self) -> str:
        return (f"GaspGame(v{self.VERSION}, current_id={self.current_challenge_id()}, "
                f"open={len(self.storage.challenges)})")
