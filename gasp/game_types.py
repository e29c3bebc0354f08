"""
GASP Game Engine - Data Types

Challenge records and the notifications emitted by the engine.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
import json

from .errors import InvalidUint


UINT256_MAX = 2 ** 256 - 1


def require_uint(field_name: str, value: Any) -> int:
    """Reject anything that is not an unsigned 256-bit integer."""
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidUint(field_name, value)
    if value < 0 or value > UINT256_MAX:
        raise InvalidUint(field_name, value)
    return value


class ChallengeStatus(Enum):
    """
    Lifecycle stage of a challenge id.

    ABSENT covers both ids never issued and ids removed by a claim.
    """
    UNSETTLED = "unsettled"
    SOLVED = "solved"
    ABSENT = "absent"


@dataclass
class Challenge:
    """
    Challenge - an escrowed puzzle.

    While UNSETTLED, `amount` units of `asset_kind` are held in engine
    custody. Once SOLVED the amount has been paid out and the record
    only marks the solve.
    """
    challenge_id: int
    issuer: str
    number: int
    asset_kind: str
    amount: int
    submission_tick: int

    solved: bool = False
    solver: Optional[str] = None

    @property
    def status(self) -> ChallengeStatus:
        return ChallengeStatus.SOLVED if self.solved else ChallengeStatus.UNSETTLED

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "challenge_id": self.challenge_id,
            "issuer": self.issuer,
            "number": self.number,
            "asset_kind": self.asset_kind,
            "amount": self.amount,
            "submission_tick": self.submission_tick,
            "solved": self.solved,
            "solver": self.solver,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Challenge":
        """Create Challenge from dictionary."""
        return cls(
            challenge_id=int(data["challenge_id"]),
            issuer=data["issuer"],
            number=int(data["number"]),
            asset_kind=data["asset_kind"],
            amount=int(data["amount"]),
            submission_tick=int(data["submission_tick"]),
            solved=bool(data.get("solved", False)),
            solver=data.get("solver"),
        )


@dataclass
class PendingSettlement:
    """
    A ledger movement that was broadcast but not yet confirmed.

    `operation` names the step waiting on it ("submit", "solve" or
    "claim"). Storage is only updated once the ledger reports the
    outcome; until then the challenge is frozen.

    details:
        submit: {"number": n}
        solve:  {"pool_share": p, "proof": d}
        claim:  {"bonus": b}  (already reserved from the pool)
    """
    tx_hash: str
    operation: str
    asset_kind: str
    account: str
    amount: int
    challenge_id: int = 0
    details: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "tx_hash": self.tx_hash,
            "operation": self.operation,
            "asset_kind": self.asset_kind,
            "account": self.account,
            "amount": self.amount,
            "challenge_id": self.challenge_id,
            "details": dict(self.details),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PendingSettlement":
        return cls(
            tx_hash=data["tx_hash"],
            operation=data["operation"],
            asset_kind=data["asset_kind"],
            account=data["account"],
            amount=int(data["amount"]),
            challenge_id=int(data.get("challenge_id", 0)),
            details={k: int(v) for k, v in data.get("details", {}).items()},
        )


# ═══════════════════════════════════════════════════════════════════════════════
# NOTIFICATIONS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ChallengeSubmitted:
    challenge_id: int
    issuer: str
    number: int
    asset_kind: str
    amount: int
    tick: int

    name = "ChallengeSubmitted"

    @property
    def args(self) -> tuple:
        return (self.challenge_id, self.issuer, self.number,
                self.asset_kind, self.amount, self.tick)


@dataclass(frozen=True)
class ChallengeSolved:
    challenge_id: int
    asset_kind: str
    solver_share: int
    pool_share: int

    name = "ChallengeSolved"

    @property
    def args(self) -> tuple:
        return (self.challenge_id, self.asset_kind, self.solver_share, self.pool_share)


@dataclass(frozen=True)
class ChallengeRewardClaimed:
    challenge_id: int
    asset_kind: str
    total_payout: int

    name = "ChallengeRewardClaimed"

    @property
    def args(self) -> tuple:
        return (self.challenge_id, self.asset_kind, self.total_payout)


EVENT_TYPES = {
    cls.name: cls
    for cls in (ChallengeSubmitted, ChallengeSolved, ChallengeRewardClaimed)
}


def event_to_json(event: Any) -> str:
    """Serialize a notification as {"event": name, "args": {...}}."""
    return json.dumps({"event": event.name, "args": asdict(event)}, sort_keys=True)


def event_from_json(json_str: str) -> Any:
    """Inverse of event_to_json."""
    data = json.loads(json_str)
    cls = EVENT_TYPES.get(data.get("event"))
    if cls is None:
        raise ValueError(f"Unknown event: {data.get('event')!r}")
    return cls(**data["args"])
