"""
In-process execution substrate.

The host plays the part of the chain for the invocation engine:

- native balances and per-contract storage, journaled (see ``WorldState``)
- CREATE-style deployment addresses
- a low-level ``call`` primitive bounded by a gas limit
- one lock that serializes whole transactions

A call never raises for callee failure: contract code signals failure by
raising ``ExecutionReverted`` (or ``OutOfGas``), the host discards the call's
frame and reports ``success=False``. Any other exception is a bug and
propagates.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar

import rlp
from eth_utils import keccak, to_checksum_address

from ..protocol.errors import ExecutionReverted, InsufficientFunds, OutOfGas
from ..protocol.models import DEFAULT_GAS_ALLOWANCE, CallResult
from ..protocol.validators import address_bytes, normalize_address, validate_uint256
from .state import WorldState

logger = logging.getLogger(__name__)

DEFAULT_CHAIN_ID = 4056

C = TypeVar("C", bound="Contract")


@dataclass
class CallContext:
    """What a contract sees while handling one call."""

    sender: str
    target: str
    value: int
    data: bytes
    gas_limit: int
    gas_used: int = field(default=0)

    @property
    def selector(self) -> bytes:
        return self.data[:4]

    @property
    def gas_left(self) -> int:
        return self.gas_limit - self.gas_used

    def use_gas(self, amount: int) -> None:
        self.gas_used += amount
        if self.gas_used > self.gas_limit:
            self.gas_used = self.gas_limit
            raise OutOfGas(f"out of gas: limit {self.gas_limit}")


class ContractStorage:
    """
    Storage slots of one contract, read and written through the journal
    under the host lock, so readers never see another thread's open frame.
    """

    def __init__(self, state: WorldState, address: str, lock: threading.RLock) -> None:
        self._state = state
        self._address = address
        self._lock = lock

    def get(self, key: Any, default: Any = None) -> Any:
        with self._lock:
            return self._state.get_storage(self._address, key, default)

    def set(self, key: Any, value: Any) -> None:
        with self._lock:
            self._state.set_storage(self._address, key, value)

    def __getitem__(self, key: Any) -> Any:
        return self.get(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self.set(key, value)


class Contract:
    """
    Base class for code living at a host address.

    Subclasses map 4-byte selectors to handler method names in ``selectors``.
    A handler receives the ``CallContext`` and returns optional return data.
    Empty calldata goes to ``receive`` which rejects value unless
    ``accepts_plain_value`` is set.
    """

    selectors: Dict[bytes, str] = {}
    accepts_plain_value: bool = False

    def __init__(self, address: str, host: "Host") -> None:
        self.address = address
        self.host = host

    @property
    def storage(self) -> ContractStorage:
        return self.host.storage(self.address)

    @property
    def balance(self) -> int:
        return self.host.balance_of(self.address)

    def handle(self, ctx: CallContext) -> bytes:
        if not ctx.data:
            return self.receive(ctx)
        name = self.selectors.get(ctx.selector)
        if name is None:
            raise ExecutionReverted(f"unknown selector 0x{ctx.selector.hex()}")
        return getattr(self, name)(ctx) or b""

    def receive(self, ctx: CallContext) -> bytes:
        if ctx.value and not self.accepts_plain_value:
            raise ExecutionReverted("contract does not accept plain value")
        return b""


def create_address(deployer: str, nonce: int) -> str:
    """CREATE address: last 20 bytes of keccak(rlp([deployer, nonce]))."""
    return to_checksum_address(keccak(rlp.encode([address_bytes(deployer), nonce]))[12:])


class Host:
    def __init__(self, chain_id: int = DEFAULT_CHAIN_ID) -> None:
        self.chain_id = validate_uint256(chain_id, "chain_id")
        self._state = WorldState()
        # Re-entrant so contract code may call back into the host
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    @contextmanager
    def transaction(self) -> Iterator["Host"]:
        """
        Open a journaled frame. Commit on normal exit, roll back and
        re-raise on any exception.
        """
        with self._lock:
            self._state.begin()
            try:
                yield self
            except BaseException:
                self._state.rollback()
                raise
            self._state.commit()

    @property
    def in_transaction(self) -> bool:
        return self._state.depth > 0

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def balance_of(self, address: str) -> int:
        with self._lock:
            return self._state.balance_of(normalize_address(address))

    def fund(self, address: str, amount: int) -> None:
        address = normalize_address(address)
        validate_uint256(amount, "amount")
        with self._lock:
            self._state.set_balance(address, self._state.balance_of(address) + amount)

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        sender = normalize_address(sender)
        recipient = normalize_address(recipient)
        validate_uint256(amount, "amount")
        if amount == 0:
            return
        with self._lock:
            available = self._state.balance_of(sender)
            if available < amount:
                raise InsufficientFunds(
                    f"{sender} has {available}, needs {amount}"
                )
            self._state.set_balance(sender, available - amount)
            self._state.set_balance(recipient, self._state.balance_of(recipient) + amount)

    def storage(self, address: str) -> ContractStorage:
        return ContractStorage(self._state, normalize_address(address), self._lock)

    def code_at(self, address: str) -> Optional[Contract]:
        with self._lock:
            return self._state.code_at(normalize_address(address))

    def has_code(self, address: str) -> bool:
        return self.code_at(address) is not None

    # ------------------------------------------------------------------
    # Deployment
    # ------------------------------------------------------------------
    def deploy(self, factory: Callable[[str, "Host"], C], deployer: str) -> C:
        deployer = normalize_address(deployer)
        with self.transaction():
            nonce = self._state.deploy_nonce(deployer)
            address = create_address(deployer, nonce)
            self._state.set_deploy_nonce(deployer, nonce + 1)
            contract = factory(address, self)
            self._state.set_code(address, contract)
        logger.info("Deployed %s at %s", type(contract).__name__, address)
        return contract

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------
    def call(
        self,
        sender: str,
        target: str,
        value: int = 0,
        data: bytes = b"",
        gas_limit: int = DEFAULT_GAS_ALLOWANCE,
        *,
        value_from: Optional[str] = None,
    ) -> CallResult:
        """
        Single low-level invocation of ``target``.

        Runs in its own frame: value moves to ``target`` (from ``value_from``
        when given, otherwise from ``sender``), then the target's code (if any)
        handles ``data`` within ``gas_limit``. The callee sees ``sender``.
        """
        sender = normalize_address(sender)
        target = normalize_address(target)
        ctx = CallContext(
            sender=sender,
            target=target,
            value=value,
            data=bytes(data),
            gas_limit=gas_limit,
        )

        with self._lock:
            self._state.begin()
            try:
                self.transfer(value_from or sender, target, value)
                code = self._state.code_at(target)
                return_data = code.handle(ctx) if code is not None else b""
            except (ExecutionReverted, InsufficientFunds) as exc:
                self._state.rollback()
                logger.debug("Call %s -> %s failed: %s", sender, target, exc)
                return CallResult(
                    target=target,
                    success=False,
                    gas_used=ctx.gas_used,
                    error=str(exc),
                )
            except BaseException:
                self._state.rollback()
                raise
            self._state.commit()

        return CallResult(
            target=target,
            success=True,
            gas_used=ctx.gas_used,
            return_data=return_data or b"",
        )
