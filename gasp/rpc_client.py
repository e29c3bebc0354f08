"""
GASP Game Engine - Node RPC

Reads chain height from a JSON-RPC node for NodeBlockClock. One HTTP
session is reused across calls.

Error codes (RPCError.code):
    -1  transport failure (connection, timeout, HTTP status)
    -2  reply is not a JSON-RPC object
    -3  reply has the wrong shape for the method
    other codes are passed through from the node
"""

import itertools
from typing import Any, Optional

import requests


class RPCError(Exception):
    """Node call failed."""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"RPC Error {code}: {message}")


class RPCClient:
    """
    Usage:
        rpc = RPCClient("http://localhost:8545", auth=("user", "pass"))
        height = rpc.getblockcount()
    """

    def __init__(self, url: str = "http://localhost:8545", auth: Optional[tuple] = None,
                 timeout: int = 30, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        if auth is not None:
            self.session.auth = auth
        self._ids = itertools.count(1)

    def request(self, method: str, *params) -> Any:
        """Send one JSON-RPC 2.0 request and return its `result`."""
        body = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": list(params)}
        try:
            reply = self.session.post(self.url, json=body, timeout=self.timeout)
            reply.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise RPCError(-1, f"{method} to {self.url} failed: {e}")

        try:
            data = reply.json()
        except ValueError:
            raise RPCError(-2, f"{method}: non-JSON reply from {self.url}")
        if not isinstance(data, dict):
            raise RPCError(-2, f"{method}: unexpected reply {data!r}")

        error = data.get("error")
        if error:
            raise RPCError(error.get("code", -3), error.get("message", "unknown error"))
        return data.get("result")

    def getblockcount(self) -> int:
        height = self.request("getblockcount")
        if isinstance(height, bool) or not isinstance(height, int):
            raise RPCError(-3, f"getblockcount returned {height!r}")
        return height
