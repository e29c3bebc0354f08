"""
GASP Game Engine - Runtime Wiring

Builds a running engine from a config dict (see gasp.config):

    config = load_config(env_file=".env")
    setup_logging(config["log_level"])

    w3 = web3_from_config(config)
    ledgers = LedgerDirectory(token_ledger_from_config(w3, USDC, config))
    proxy, store = open_game(config, ledgers, Web3BlockClock(w3), admin="0x...")

    cid = proxy.submit(21, USDC, 100, issuer="0x...")
    store.save(proxy.storage)
"""

import logging
from typing import Tuple

from web3 import Web3

from .deadline import Clock
from .engine import GaspGame
from .ledgers import LedgerDirectory, Web3TokenLedger
from .proxy import GameProxy
from .storage import StorageFile

log = logging.getLogger(__name__)


def web3_from_config(config: dict):
    w3 = Web3(Web3.HTTPProvider(config["rpc_url"]))
    log.info(f"Web3 provider: {config['rpc_url']} (chain_id={config['chain_id']})")
    return w3


def token_ledger_from_config(w3, token_address: str, config: dict) -> Web3TokenLedger:
    if not config["custody_private_key"]:
        raise ValueError("No custody key configured (set GASP_CUSTODY_PRIVKEY)")
    return Web3TokenLedger(
        w3,
        token_address,
        config["custody_private_key"],
        chain_id=config["chain_id"],
        gas_limit=config["gas_limit"],
        max_fee_gwei=config["max_fee_gwei"],
        max_priority_fee_gwei=config["max_priority_fee_gwei"],
    )


def open_game(config: dict, ledgers: LedgerDirectory, clock: Clock,
              admin: str) -> Tuple[GameProxy, StorageFile]:
    """
    Load storage from config["storage_path"] and put a proxy in front of it.

    Fresh storage is initialized with `admin`; existing storage keeps the
    admin it was initialized with.
    """
    store = StorageFile(config["storage_path"])
    storage = store.load()
    proxy = GameProxy(GaspGame, storage, ledgers, clock, config["time_frame"])
    if not storage.initialized:
        proxy.initialize(admin)
    return proxy, store
