"""
GASP Game Engine - Configuration & Logging

Defaults live in CONFIG. Environment variables override them:

    GASP_TIME_FRAME        ticks a challenge stays solvable (default 10)
    GASP_RPC_URL           EVM / node JSON-RPC endpoint
    GASP_CHAIN_ID          EVM chain id
    GASP_GAS_LIMIT         gas per token transfer
    GASP_MAX_FEE_GWEI      EIP-1559 max fee
    GASP_MAX_PRIORITY_FEE_GWEI
    GASP_STORAGE_PATH      JSON state file
    GASP_LOG_LEVEL         DEBUG / INFO / WARNING / ERROR
    GASP_CUSTODY_PRIVKEY   custody account key (NEVER commit!)

A .env file next to the working directory is read first; real environment
variables win over it.
"""

import logging
import os
from typing import Dict, Optional

from .deadline import TIME_FRAME

# =============================================================================
# DEFAULTS
# =============================================================================

CONFIG = {
    "time_frame": TIME_FRAME,
    "rpc_url": "http://127.0.0.1:8545",
    "chain_id": 31337,
    "gas_limit": 100000,
    "max_fee_gwei": 50,
    "max_priority_fee_gwei": 30,
    "storage_path": "gasp_state.json",
    "log_level": "INFO",
    "custody_private_key": "",
}

# config key -> (env var, type)
ENV_VARS = {
    "time_frame": ("GASP_TIME_FRAME", int),
    "rpc_url": ("GASP_RPC_URL", str),
    "chain_id": ("GASP_CHAIN_ID", int),
    "gas_limit": ("GASP_GAS_LIMIT", int),
    "max_fee_gwei": ("GASP_MAX_FEE_GWEI", int),
    "max_priority_fee_gwei": ("GASP_MAX_PRIORITY_FEE_GWEI", int),
    "storage_path": ("GASP_STORAGE_PATH", str),
    "log_level": ("GASP_LOG_LEVEL", str),
    "custody_private_key": ("GASP_CUSTODY_PRIVKEY", str),
}

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'

log = logging.getLogger(__name__)


def mask_secret(secret: str, visible_prefix: int = 6, visible_suffix: int = 4) -> str:
    """Mask a secret for safe logging. NEVER log full keys."""
    if not secret or len(secret) <= visible_prefix + visible_suffix:
        return "***"
    return f"{secret[:visible_prefix]}...{secret[-visible_suffix:]}"


def load_env_file(path: str = ".env") -> int:
    """
    Load KEY=VALUE lines into os.environ without overriding existing vars.

    Returns:
        Number of variables set
    """
    if not os.path.exists(path):
        return 0

    count = 0
    with open(path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                key = key.strip()
                if key not in os.environ:
                    os.environ[key] = value.strip().strip('"').strip("'")
                    count += 1
    log.debug(f"Loaded {count} variables from {path}")
    return count


def load_config(env: Optional[Dict[str, str]] = None, env_file: Optional[str] = None) -> dict:
    """
    Build a config dict: CONFIG defaults overridden by environment.

    Args:
        env: Mapping to read instead of os.environ
        env_file: .env file to load into os.environ first

    Raises:
        ValueError: If a numeric variable does not parse or time frame <= 0
    """
    if env_file:
        load_env_file(env_file)
    source = os.environ if env is None else env

    config = dict(CONFIG)
    for key, (var, kind) in ENV_VARS.items():
        raw = source.get(var)
        if raw is None or raw == "":
            continue
        try:
            config[key] = kind(raw)
        except ValueError:
            raise ValueError(f"{var} must be {kind.__name__}, got {raw!r}")

    if config["time_frame"] <= 0:
        raise ValueError(f"GASP_TIME_FRAME must be positive, got {config['time_frame']}")
    config["log_level"] = config["log_level"].upper()

    if config["custody_private_key"]:
        log.info(f"Custody key loaded: {mask_secret(config['custody_private_key'])}")
    return config


def setup_logging(level: str = "INFO"):
    """Configure root logging with the standard format."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
