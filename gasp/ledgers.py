"""
GASP Game Engine - Asset Ledgers

The engine never holds balances itself. Each asset kind is backed by an
external ledger on which the engine owns a custody account:

  - transfer_in:  pull `amount` from a participant into custody
                  (ERC20 transferFrom, requires prior approval)
  - transfer_out: pay `amount` from custody to a participant
                  (ERC20 transfer)

A movement that was broadcast but not confirmed raises TransferPending
instead of AssetTransferFailed; transfer_status() later reports whether it
landed.

Implementations:
  - TokenLedger:      in-memory ERC20Token (tests, simulations)
  - Web3TokenLedger:  ERC20 contract on an EVM chain via web3
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from eth_account import Account
from web3 import Web3
from web3.exceptions import TransactionNotFound, Web3Exception

from .errors import AssetTransferFailed, TransferPending

log = logging.getLogger(__name__)


class AssetLedger(ABC):
    """Custody view of one asset kind."""

    asset_kind: str
    custody: str

    @abstractmethod
    def is_live(self) -> bool:
        """True if the asset kind points at something that can move funds."""

    @abstractmethod
    def balance_of(self, account: str) -> int:
        pass

    @abstractmethod
    def transfer_in(self, sender: str, amount: int):
        """Pull into custody. Raises AssetTransferFailed."""

    @abstractmethod
    def transfer_out(self, recipient: str, amount: int):
        """Pay from custody. Raises AssetTransferFailed."""

    def transfer_status(self, tx_ref: str) -> Optional[bool]:
        """
        Outcome of a movement that raised TransferPending.

        Returns:
            True if it landed, False if it failed, None while unknown
        """
        raise NotImplementedError(f"{type(self).__name__} never leaves transfers pending")

    def custody_balance(self) -> int:
        return self.balance_of(self.custody)


# ═══════════════════════════════════════════════════════════════════════════════
# IN-MEMORY ERC20
# ═══════════════════════════════════════════════════════════════════════════════

class TokenError(Exception):
    """ERC20 operation reverted."""


class ERC20Token:
    """
    Minimal in-memory ERC20: balances, allowances, transfer, transferFrom.

    Usage:
        token = ERC20Token("0xToken", supply=10_000, owner="deployer")
        token.transfer("deployer", "alice", 200)
        token.approve("alice", "engine", 100)
    """

    def __init__(self, address: str, supply: int = 0, owner: str = "",
                 deployed: bool = True):
        self.address = address
        self.deployed = deployed
        self.balances: Dict[str, int] = {}
        self.allowances: Dict[tuple, int] = {}
        self.total_supply = 0
        if supply:
            self.mint(owner, supply)

    def mint(self, account: str, amount: int):
        self.balances[account] = self.balances.get(account, 0) + amount
        self.total_supply += amount

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get((owner, spender), 0)

    def approve(self, owner: str, spender: str, amount: int):
        self.allowances[(owner, spender)] = amount

    def transfer(self, sender: str, recipient: str, amount: int):
        bal = self.balance_of(sender)
        if bal < amount:
            raise TokenError(f"ERC20InsufficientBalance({sender}, {bal}, {amount})")
        self.balances[sender] = bal - amount
        self.balances[recipient] = self.balance_of(recipient) + amount

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int):
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise TokenError(f"ERC20InsufficientAllowance({spender}, {allowed}, {amount})")
        self.transfer(owner, recipient, amount)
        self.allowances[(owner, spender)] = allowed - amount


class TokenLedger(AssetLedger):
    """AssetLedger over an in-memory ERC20Token."""

    def __init__(self, token: ERC20Token, custody: str):
        self.token = token
        self.custody = custody
        self.asset_kind = token.address

    def is_live(self) -> bool:
        return self.token.deployed

    def balance_of(self, account: str) -> int:
        return self.token.balance_of(account)

    def transfer_in(self, sender: str, amount: int):
        try:
            self.token.transfer_from(self.custody, sender, self.custody, amount)
        except TokenError as e:
            raise AssetTransferFailed(self.asset_kind, str(e))

    def transfer_out(self, recipient: str, amount: int):
        try:
            self.token.transfer(self.custody, recipient, amount)
        except TokenError as e:
            raise AssetTransferFailed(self.asset_kind, str(e))


# ═══════════════════════════════════════════════════════════════════════════════
# WEB3 ERC20
# ═══════════════════════════════════════════════════════════════════════════════

ERC20_ABI = [
    {
        "constant": False,
        "inputs": [
            {"name": "_to", "type": "address"},
            {"name": "_value", "type": "uint256"}
        ],
        "name": "transfer",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function"
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_from", "type": "address"},
            {"name": "_to", "type": "address"},
            {"name": "_value", "type": "uint256"}
        ],
        "name": "transferFrom",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function"
    },
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function"
    }
]


class Web3TokenLedger(AssetLedger):
    """
    AssetLedger over an ERC20 contract.

    The custody account is derived from `private_key` and signs every
    movement. Each transfer waits for its receipt. A failure before the
    broadcast or a reverted receipt raises AssetTransferFailed; a broadcast
    transaction without a receipt raises TransferPending with its hash.

    Usage:
        w3 = Web3(Web3.HTTPProvider("https://polygon-rpc.com"))
        ledger = Web3TokenLedger(w3, USDC_CONTRACT, private_key, chain_id=137)
    """

    def __init__(self, w3, token_address: str, private_key: str,
                 chain_id: int = 1, gas_limit: int = 100000,
                 max_fee_gwei: int = 50, max_priority_fee_gwei: int = 30,
                 receipt_timeout: int = 120):
        self.w3 = w3
        self.asset_kind = Web3.to_checksum_address(token_address)
        self.account = Account.from_key(private_key)
        self.custody = self.account.address
        self.chain_id = chain_id
        self.gas_limit = gas_limit
        self.max_fee_gwei = max_fee_gwei
        self.max_priority_fee_gwei = max_priority_fee_gwei
        self.receipt_timeout = receipt_timeout

        self.contract = w3.eth.contract(address=self.asset_kind, abi=ERC20_ABI)

    def is_live(self) -> bool:
        try:
            return len(self.w3.eth.get_code(self.asset_kind)) > 0
        except (Web3Exception, ValueError) as e:
            log.warning(f"Cannot read code at {self.asset_kind}: {e}")
            return False

    def balance_of(self, account: str) -> int:
        return self.contract.functions.balanceOf(Web3.to_checksum_address(account)).call()

    def transfer_in(self, sender: str, amount: int):
        fn = self.contract.functions.transferFrom(
            Web3.to_checksum_address(sender), self.custody, amount
        )
        return self._send(fn, f"transferFrom {sender} -> custody {amount}")

    def transfer_out(self, recipient: str, amount: int):
        fn = self.contract.functions.transfer(Web3.to_checksum_address(recipient), amount)
        return self._send(fn, f"transfer custody -> {recipient} {amount}")

    def transfer_status(self, tx_ref: str) -> Optional[bool]:
        try:
            receipt = self.w3.eth.get_transaction_receipt(tx_ref)
        except TransactionNotFound:
            return None
        except (Web3Exception, ValueError) as e:
            log.warning(f"{self.asset_kind}: cannot read receipt {tx_ref}: {e}")
            return None
        return receipt["status"] == 1

    def _send(self, fn, label: str) -> str:
        """Build, sign, send and confirm one contract call."""
        try:
            tx = fn.build_transaction({
                "from": self.custody,
                "chainId": self.chain_id,
                "gas": self.gas_limit,
                "maxFeePerGas": self.w3.to_wei(self.max_fee_gwei, "gwei"),
                "maxPriorityFeePerGas": self.w3.to_wei(self.max_priority_fee_gwei, "gwei"),
                "nonce": self.w3.eth.get_transaction_count(self.custody),
            })
            signed = self.account.sign_transaction(tx)
            tx_hash = Web3.to_hex(self.w3.eth.send_raw_transaction(signed.raw_transaction))
        except (Web3Exception, ValueError) as e:
            log.error(f"{self.asset_kind}: {label} failed: {e}")
            raise AssetTransferFailed(self.asset_kind, str(e))

        log.info(f"{self.asset_kind}: {label} sent {tx_hash}")

        # From here on the transaction is out; it can still be mined
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout)
        except (Web3Exception, ValueError) as e:
            log.warning(f"{self.asset_kind}: {label} unconfirmed {tx_hash}: {e}")
            raise TransferPending(self.asset_kind, tx_hash)

        if receipt["status"] != 1:
            log.error(f"{self.asset_kind}: {label} reverted in block {receipt['blockNumber']}")
            raise AssetTransferFailed(self.asset_kind, f"reverted: {tx_hash}")
        return tx_hash


# ═══════════════════════════════════════════════════════════════════════════════
# DIRECTORY
# ═══════════════════════════════════════════════════════════════════════════════

class LedgerDirectory:
    """
    Resolves asset-kind references to ledgers.

    Lookups ignore hex case so "0xabc.." and its checksum form hit the
    same ledger; the engine always keys records and pools by the ledger's
    own asset_kind.
    """

    def __init__(self, *ledgers: AssetLedger):
        self._ledgers: Dict[str, AssetLedger] = {}
        for ledger in ledgers:
            self.register(ledger)

    def register(self, ledger: AssetLedger):
        self._ledgers[ledger.asset_kind.lower()] = ledger

    def resolve(self, asset_kind: str) -> Optional[AssetLedger]:
        """Ledger for `asset_kind`, or None if unknown or not live."""
        if not isinstance(asset_kind, str):
            return None
        ledger = self._ledgers.get(asset_kind.lower())
        if ledger is None or not ledger.is_live():
            return None
        return ledger

    def __contains__(self, asset_kind: str) -> bool:
        return isinstance(asset_kind, str) and asset_kind.lower() in self._ledgers

    def __len__(self) -> int:
        return len(self._ledgers)
