"""
Batch-authorization data model.

- SubOperation: one target call inside a batch
- Message: what the principal signs (nonce + ordered sub-operations)
- Signature: secp256k1 (r, s, v) with a boolean parity bit
- CallResult / InvocationReceipt: what the engine hands back to a sponsor

JSON field names follow the typed-data layout signers use
(``to``, ``value``, ``gasLimit``, ``data``, ``from``, ``nonce``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from eth_utils import to_hex

from .enums import InvocationState
from .validators import (
    normalize_address,
    to_data_bytes,
    to_word,
    validate_uint256,
)

DEFAULT_GAS_ALLOWANCE = 1_000_000


@dataclass(frozen=True)
class SubOperation:
    target: str
    value: int = 0
    gas_allowance: int = DEFAULT_GAS_ALLOWANCE
    data: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "target", normalize_address(self.target))
        validate_uint256(self.value, "value")
        validate_uint256(self.gas_allowance, "gas_allowance")
        object.__setattr__(self, "data", to_data_bytes(self.data))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "to": self.target,
            "value": self.value,
            "gasLimit": self.gas_allowance,
            "data": to_hex(self.data),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SubOperation:
        return cls(
            target=data.get("to", data.get("target")),
            value=int(data.get("value", 0)),
            gas_allowance=int(data.get("gasLimit", data.get("gas_allowance", DEFAULT_GAS_ALLOWANCE))),
            data=data.get("data", b""),
        )


@dataclass(frozen=True)
class Message:
    """
    A batch authorization.

    ``principal`` is the optional ``from`` field; delegated-authorization
    engines sign messages without it.
    """

    nonce: int
    operations: Tuple[SubOperation, ...] = ()
    principal: Optional[str] = None

    def __post_init__(self) -> None:
        validate_uint256(self.nonce, "nonce")
        object.__setattr__(self, "operations", tuple(self.operations))
        if self.principal is not None:
            object.__setattr__(self, "principal", normalize_address(self.principal))

    @property
    def total_value(self) -> int:
        return sum(op.value for op in self.operations)

    def with_operations(self, operations: Iterable[SubOperation]) -> Message:
        return Message(nonce=self.nonce, operations=tuple(operations), principal=self.principal)

    def to_dict(self, operations_field: str = "payloads") -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.principal is not None:
            result["from"] = self.principal
        result["nonce"] = self.nonce
        result[operations_field] = [op.to_dict() for op in self.operations]
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Message:
        raw_ops = None
        for key in ("payloads", "payload", "operations"):
            if key in data:
                raw_ops = data[key]
                break
        return cls(
            nonce=int(data["nonce"]),
            operations=tuple(SubOperation.from_dict(op) for op in (raw_ops or [])),
            principal=data.get("from", data.get("principal")),
        )


@dataclass(frozen=True)
class Signature:
    """
    ECDSA signature. ``v`` is the recovery parity: False for even y, True for odd.
    """

    r: bytes
    s: bytes
    v: bool

    def __post_init__(self) -> None:
        object.__setattr__(self, "r", to_word(self.r, "r"))
        object.__setattr__(self, "s", to_word(self.s, "s"))
        if not isinstance(self.v, bool):
            raise TypeError("v must be a bool recovery parity")

    @property
    def recovery_id(self) -> int:
        return 1 if self.v else 0

    def flipped(self) -> Signature:
        """Same (r, s) with the opposite parity bit."""
        return Signature(r=self.r, s=self.s, v=not self.v)

    def to_bytes(self) -> bytes:
        """65-byte ``r || s || v`` with v in {27, 28}."""
        return self.r + self.s + bytes([27 + self.recovery_id])

    def to_dict(self) -> Dict[str, Any]:
        return {"r": to_hex(self.r), "s": to_hex(self.s), "v": self.v}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Signature:
        return cls(r=data["r"], s=data["s"], v=_parity(data["v"]))

    @classmethod
    def from_vrs(cls, v: int, r: int, s: int) -> Signature:
        return cls(r=r.to_bytes(32, "big"), s=s.to_bytes(32, "big"), v=_parity(v))


def _parity(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, int):
        if v in (0, 1):
            return bool(v)
        if v in (27, 28):
            return v == 28
    raise ValueError(f"Invalid recovery parity: {v!r}")


ZERO_SIGNATURE = Signature(r=b"\x00" * 32, s=b"\x00" * 32, v=False)


@dataclass
class CallResult:
    """Outcome of one low-level call on the host."""

    target: str
    success: bool
    gas_used: int = 0
    return_data: bytes = b""
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "success": self.success,
            "gas_used": self.gas_used,
            "return_data": to_hex(self.return_data),
            "error": self.error,
        }


@dataclass
class InvocationReceipt:
    engine: str
    principal: str
    sponsor: str
    nonce: int
    digest: bytes
    value: int
    calls: List[CallResult] = field(default_factory=list)
    state: InvocationState = InvocationState.SETTLED

    @property
    def gas_used(self) -> int:
        return sum(c.gas_used for c in self.calls)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "engine": self.engine,
            "principal": self.principal,
            "sponsor": self.sponsor,
            "nonce": self.nonce,
            "digest": to_hex(self.digest),
            "value": self.value,
            "calls": [c.to_dict() for c in self.calls],
            "state": self.state.value,
        }
