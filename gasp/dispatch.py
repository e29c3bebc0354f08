"""
GASP Game Engine - Call Dispatcher

Entry point for JSON-RPC shaped calls:

    {"method": "solve", "params": [1, 3]}

The caller identity is supplied by the host, never by the payload. Calls
carrying native value, unknown methods and malformed payloads are rejected
with BareRejection (no reason, no state change). Engine errors propagate
as raised.
"""

import logging
from typing import Any, Callable, Dict

from .errors import BareRejection
from .game_types import Challenge

log = logging.getLogger(__name__)


def _to_json_safe(result: Any) -> Any:
    if isinstance(result, Challenge):
        return result.to_dict()
    if isinstance(result, tuple):
        return list(result)
    return result


class GameDispatcher:
    """
    Maps method names to engine operations.

    Usage:
        dispatcher = GameDispatcher(proxy)
        cid = dispatcher.call({"method": "submit", "params": [21, token, 100]}, caller="alice")
    """

    def __init__(self, game):
        self.game = game
        # method -> (handler, number of params)
        self.methods: Dict[str, tuple] = {
            "submit": (lambda caller, number, asset_kind, amount:
                       self.game.submit(number, asset_kind, amount, issuer=caller), 3),
            "solve": (lambda caller, challenge_id, proof:
                      self.game.solve(challenge_id, proof, solver=caller), 2),
            "claim": (lambda caller, challenge_id:
                      self.game.claim(challenge_id, caller=caller), 1),
            "version": (lambda caller: self.game.version(), 0),
            "challengeTimeFrame": (lambda caller: self.game.challenge_time_frame(), 0),
            "currentChallengeId": (lambda caller: self.game.current_challenge_id(), 0),
            "poolBalance": (lambda caller, asset_kind: self.game.pool_balance(asset_kind), 1),
            "getChallenge": (lambda caller, challenge_id: self.game.get_challenge(challenge_id), 1),
        }

    def call(self, payload: Any, caller: str, value: int = 0) -> Any:
        fn, _ = self._route(payload, value)
        return _to_json_safe(fn(caller, *payload.get("params", [])))

    def _route(self, payload: Any, value: int) -> tuple:
        if value:
            log.warning(f"Rejected native value transfer: {value}")
            raise BareRejection()
        if not isinstance(payload, dict):
            log.warning("Rejected non-object payload")
            raise BareRejection()

        method = payload.get("method")
        params = payload.get("params", [])
        handler = self.methods.get(method) if isinstance(method, str) else None
        if handler is None:
            log.warning(f"Rejected unknown method: {method!r}")
            raise BareRejection()
        if not isinstance(params, list) or len(params) != handler[1]:
            log.warning(f"Rejected {method}: bad params")
            raise BareRejection()
        return handler

    def supported_methods(self) -> list:
        return sorted(self.methods)
