"""
GASP Game Engine - Storage

Everything the engine remembers lives in GameStorage. Engine code is
stateless around it, so an upgraded implementation picks up exactly where
the previous one stopped.

Layout (JSON):
    {
        "layout": 1,
        "initialized": true,
        "admin": "0x...",
        "current_challenge_id": 2,
        "challenges": [{...Challenge...}],
        "pools": {"0xToken": 25},
        "pending": [{...PendingSettlement...}]
    }
"""

import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from .game_types import Challenge, PendingSettlement
from .pool import PoolLedger

log = logging.getLogger(__name__)

STORAGE_LAYOUT = 1


@dataclass
class GameStorage:
    initialized: bool = False
    admin: Optional[str] = None
    current_challenge_id: int = 0
    challenges: Dict[int, Challenge] = field(default_factory=dict)
    pools: PoolLedger = field(default_factory=PoolLedger)
    # tx hash -> movement awaiting confirmation
    pending: Dict[str, PendingSettlement] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "layout": STORAGE_LAYOUT,
            "initialized": self.initialized,
            "admin": self.admin,
            "current_challenge_id": self.current_challenge_id,
            "challenges": [c.to_dict() for _, c in sorted(self.challenges.items())],
            "pools": self.pools.to_dict(),
            "pending": [p.to_dict() for _, p in sorted(self.pending.items())],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GameStorage":
        layout = data.get("layout")
        if layout != STORAGE_LAYOUT:
            raise ValueError(f"Unsupported storage layout: {layout!r}")

        challenges = {}
        for item in data.get("challenges", []):
            challenge = Challenge.from_dict(item)
            challenges[challenge.challenge_id] = challenge

        current = int(data.get("current_challenge_id", 0))
        if challenges and max(challenges) > current:
            raise ValueError(
                f"Challenge id {max(challenges)} above current id {current}"
            )

        pending = {}
        for item in data.get("pending", []):
            settlement = PendingSettlement.from_dict(item)
            pending[settlement.tx_hash] = settlement

        return cls(
            initialized=bool(data.get("initialized", False)),
            admin=data.get("admin"),
            current_challenge_id=current,
            challenges=challenges,
            pools=PoolLedger({k: int(v) for k, v in data.get("pools", {}).items()}),
            pending=pending,
        )


class StorageFile:
    """
    JSON file holding one GameStorage.

    Usage:
        store = StorageFile("gasp_state.json")
        storage = store.load()
        ...
        store.save(storage)
    """

    def __init__(self, path: str):
        self.path = path

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> GameStorage:
        """Load storage; a missing file gives fresh, uninitialized storage."""
        if not self.exists():
            log.info(f"No state at {self.path}, starting fresh")
            return GameStorage()
        with open(self.path, "r") as f:
            data = json.load(f)
        storage = GameStorage.from_dict(data)
        log.info(f"Loaded {len(storage.challenges)} challenges from {self.path}")
        return storage

    def save(self, storage: GameStorage):
        """Write atomically (temp file + rename)."""
        data = storage.to_dict()
        data["updated_ts"] = int(time.time())

        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".gasp-", suffix=".json")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
