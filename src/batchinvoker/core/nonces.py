"""
Per-principal nonce registry.

The registry is the only replay protection: a message is accepted only if
its nonce equals the principal's current counter, and acceptance bumps the
counter by exactly one. Counters live in the owning engine's storage, so a
bump made inside a transaction that later rolls back disappears with it.
"""

from __future__ import annotations

import logging

from ..host.chain import ContractStorage
from ..protocol.errors import InvalidNonce
from ..protocol.validators import normalize_address

logger = logging.getLogger(__name__)


class NonceRegistry:
    _SLOT = "nonce"

    def __init__(self, storage: ContractStorage) -> None:
        self._storage = storage

    def current(self, principal: str) -> int:
        """Current counter; 0 for a principal never seen."""
        return self._storage.get((self._SLOT, normalize_address(principal)), 0)

    def validate_and_advance(self, principal: str, claimed_nonce: int) -> int:
        """
        Accept ``claimed_nonce`` iff it equals the current counter and advance
        the counter. Returns the new counter value.

        Raises:
            InvalidNonce: state is left untouched
        """
        principal = normalize_address(principal)
        expected = self.current(principal)
        if claimed_nonce != expected:
            raise InvalidNonce(
                "Invalid nonce",
                expected=expected,
                claimed=claimed_nonce,
            )
        self._storage.set((self._SLOT, principal), expected + 1)
        logger.debug("Nonce for %s advanced to %d", principal, expected + 1)
        return expected + 1
