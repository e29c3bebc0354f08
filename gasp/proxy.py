"""
GASP Game Engine - Upgradeable Proxy

The proxy owns the storage and forwards calls to the current engine
implementation. Upgrading swaps the implementation class; storage is
handed over untouched. Only the DEFAULT_ADMIN_ROLE holder (the admin set
by initialize) may upgrade.

Usage:
    proxy = GameProxy.deploy(GaspGame, ledgers, clock, admin="deployer")
    proxy.submit(21, token.address, 100, issuer="alice")

    proxy.upgrade_to(GaspGameV2, caller="deployer")
"""

import logging
from typing import Optional, Type

from .deadline import TIME_FRAME, Clock
from .engine import GaspGame
from .errors import AccessControlUnauthorizedAccount
from .ledgers import LedgerDirectory
from .storage import GameStorage

log = logging.getLogger(__name__)

DEFAULT_ADMIN_ROLE = "0x" + "00" * 32


class GameProxy:

    def __init__(self, implementation: Type[GaspGame], storage: GameStorage,
                 ledgers: LedgerDirectory, clock: Clock, time_frame: int = TIME_FRAME):
        self.storage = storage
        self.ledgers = ledgers
        self.clock = clock
        self.time_frame = time_frame
        self._engine = implementation(storage, ledgers, clock, time_frame)

    @classmethod
    def deploy(cls, implementation: Type[GaspGame], ledgers: LedgerDirectory,
               clock: Clock, admin: str, storage: Optional[GameStorage] = None,
               time_frame: int = TIME_FRAME) -> "GameProxy":
        """Create the proxy and initialize the engine in one step."""
        proxy = cls(implementation, storage or GameStorage(), ledgers, clock, time_frame)
        proxy.initialize(admin)
        return proxy

    @property
    def implementation(self) -> Type[GaspGame]:
        return type(self._engine)

    @property
    def engine(self) -> GaspGame:
        return self._engine

    def has_role(self, role: str, account: str) -> bool:
        return role == DEFAULT_ADMIN_ROLE and account is not None and account == self.storage.admin

    def upgrade_to(self, implementation: Type[GaspGame], caller: str):
        """Swap the engine code, keeping storage, events and listeners."""
        if not self.has_role(DEFAULT_ADMIN_ROLE, caller):
            log.warning(f"Upgrade refused for {caller}")
            raise AccessControlUnauthorizedAccount(caller, DEFAULT_ADMIN_ROLE)

        old = self._engine
        if implementation is type(old):
            log.info(f"Upgrade to same implementation {implementation.__name__}, nothing to do")
            return

        new = implementation(self.storage, self.ledgers, self.clock, self.time_frame)
        new.events = old.events
        new._listeners = old._listeners
        self._engine = new
        log.info(f"Upgraded {type(old).__name__} v{old.version()} -> "
                 f"{implementation.__name__} v{new.version()}")

    def __getattr__(self, name: str):
        """Forward everything else to the current implementation."""
        return getattr(self._engine, name)
