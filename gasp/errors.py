"""
GASP Game Engine - Errors

Every failure aborts the operation that raised it. Errors carry the
offending values as args and render like custom errors:

    ChallengeAlreadyExpired(1, 11)
"""

from typing import Any


class GameError(Exception):
    """Base class for engine errors."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        return f"{self.name}({', '.join(repr(a) for a in self.args)})"


# ═══════════════════════════════════════════════════════════════════════════════
# CATEGORIES
# ═══════════════════════════════════════════════════════════════════════════════

class ValidationError(GameError):
    """Malformed or semantically invalid input."""


class StateError(GameError):
    """Challenge (or engine) is in the wrong lifecycle stage."""


class CustodyError(GameError):
    """The asset ledger refused a movement."""


class AuthorizationError(GameError):
    """Caller is not allowed to perform the operation."""


# ═══════════════════════════════════════════════════════════════════════════════
# VALIDATION
# ═══════════════════════════════════════════════════════════════════════════════

class ZeroNumber(ValidationError):
    pass


class ZeroReward(ValidationError):
    pass


class InvalidUint(ValidationError):
    """Value is not an unsigned 256-bit integer."""

    def __init__(self, field: str, value: Any):
        super().__init__(field, value)
        self.field = field
        self.value = value


class InvalidAssetKind(ValidationError):
    def __init__(self, asset_kind: str):
        super().__init__(asset_kind)
        self.asset_kind = asset_kind


class InvalidChallengeProof(ValidationError):
    def __init__(self, challenge_id: int, proof: int):
        super().__init__(challenge_id, proof)
        self.challenge_id = challenge_id
        self.proof = proof


# ═══════════════════════════════════════════════════════════════════════════════
# STATE
# ═══════════════════════════════════════════════════════════════════════════════

class ChallengeNotFound(StateError):
    def __init__(self, challenge_id: int):
        super().__init__(challenge_id)
        self.challenge_id = challenge_id


class ChallengeAlreadySolved(StateError):
    def __init__(self, challenge_id: int):
        super().__init__(challenge_id)
        self.challenge_id = challenge_id


class ChallengeAlreadyExpired(StateError):
    def __init__(self, challenge_id: int, deadline_tick: int):
        super().__init__(challenge_id, deadline_tick)
        self.challenge_id = challenge_id
        self.deadline_tick = deadline_tick


class ChallengeStillActive(StateError):
    def __init__(self, challenge_id: int, deadline_tick: int):
        super().__init__(challenge_id, deadline_tick)
        self.challenge_id = challenge_id
        self.deadline_tick = deadline_tick


class InvalidInitialization(StateError):
    pass


# ═══════════════════════════════════════════════════════════════════════════════
# CUSTODY / AUTHORIZATION
# ═══════════════════════════════════════════════════════════════════════════════

class AssetTransferFailed(CustodyError):
    def __init__(self, asset_kind: str, reason: str):
        super().__init__(asset_kind, reason)
        self.asset_kind = asset_kind
        self.reason = reason


class TransferPending(CustodyError):
    """
    Transfer was broadcast but its outcome is not known yet.

    Not an AssetTransferFailed: the movement may still land on the ledger.
    """

    def __init__(self, asset_kind: str, tx_hash: str):
        super().__init__(asset_kind, tx_hash)
        self.asset_kind = asset_kind
        self.tx_hash = tx_hash


class SettlementPending(StateError):
    """Challenge is waiting on a broadcast transfer and cannot be touched."""

    def __init__(self, challenge_id: int, tx_hash: str):
        super().__init__(challenge_id, tx_hash)
        self.challenge_id = challenge_id
        self.tx_hash = tx_hash


class UnauthorizedClaimer(AuthorizationError):
    def __init__(self, challenge_id: int, caller: str):
        super().__init__(challenge_id, caller)
        self.challenge_id = challenge_id
        self.caller = caller


class AccessControlUnauthorizedAccount(AuthorizationError):
    def __init__(self, account: str, role: str):
        super().__init__(account, role)
        self.account = account
        self.role = role


class BareRejection(GameError):
    """Rejected without a reason."""

    def __init__(self):
        super().__init__()

    def __str__(self) -> str:
        return ""
