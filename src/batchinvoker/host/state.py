"""
Journaled world state.

Balances, contract storage, code and deployment counters live in a base
layer. Every transaction or call pushes an overlay frame; reads look through
the frames top-down, ``commit()`` folds the top frame into the one below and
``rollback()`` drops it. Nothing written inside a discarded frame is ever
visible again.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

_MISSING = object()


class _Frame:
    __slots__ = ("balances", "storage", "code", "deploy_nonces")

    def __init__(self) -> None:
        self.balances: Dict[str, int] = {}
        self.storage: Dict[Tuple[str, Any], Any] = {}
        self.code: Dict[str, Any] = {}
        self.deploy_nonces: Dict[str, int] = {}

    def merge_into(self, other: "_Frame") -> None:
        other.balances.update(self.balances)
        other.storage.update(self.storage)
        other.code.update(self.code)
        other.deploy_nonces.update(self.deploy_nonces)


class WorldState:
    """Not thread-safe on its own; the host serializes access."""

    def __init__(self) -> None:
        self._base = _Frame()
        self._frames: List[_Frame] = []

    # ------------------------------------------------------------------
    # Journal
    # ------------------------------------------------------------------
    @property
    def depth(self) -> int:
        return len(self._frames)

    def begin(self) -> None:
        self._frames.append(_Frame())

    def commit(self) -> None:
        if not self._frames:
            raise RuntimeError("No open frame to commit")
        top = self._frames.pop()
        top.merge_into(self._frames[-1] if self._frames else self._base)

    def rollback(self) -> None:
        if not self._frames:
            raise RuntimeError("No open frame to roll back")
        self._frames.pop()

    def _lookup(self, attr: str, key: Any, default: Any) -> Any:
        for frame in reversed(self._frames):
            value = getattr(frame, attr).get(key, _MISSING)
            if value is not _MISSING:
                return value
        return getattr(self._base, attr).get(key, default)

    def _write(self, attr: str, key: Any, value: Any) -> None:
        target = self._frames[-1] if self._frames else self._base
        getattr(target, attr)[key] = value

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    def balance_of(self, address: str) -> int:
        return self._lookup("balances", address, 0)

    def set_balance(self, address: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Negative balance for {address}")
        self._write("balances", address, amount)

    def get_storage(self, address: str, key: Any, default: Any = None) -> Any:
        return self._lookup("storage", (address, key), default)

    def set_storage(self, address: str, key: Any, value: Any) -> None:
        self._write("storage", (address, key), value)

    def code_at(self, address: str) -> Optional[Any]:
        return self._lookup("code", address, None)

    def set_code(self, address: str, contract: Any) -> None:
        self._write("code", address, contract)

    def deploy_nonce(self, address: str) -> int:
        return self._lookup("deploy_nonces", address, 0)

    def set_deploy_nonce(self, address: str, nonce: int) -> None:
        self._write("deploy_nonces", address, nonce)
