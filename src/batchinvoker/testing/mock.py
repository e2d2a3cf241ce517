"""
Mock callee for observing sub-operation side effects.

- increment()    bumps ``counter``, records ``last_sender``, accepts value
- causeRevert()  always reverts
"""

from __future__ import annotations

from eth_utils import function_signature_to_4byte_selector

from ..host.chain import CallContext, Contract
from ..protocol.errors import ExecutionReverted
from ..protocol.validators import ZERO_ADDRESS

INCREMENT = function_signature_to_4byte_selector("increment()")
CAUSE_REVERT = function_signature_to_4byte_selector("causeRevert()")

INCREMENT_GAS = 43_300
REVERT_GAS = 200


class MockContract(Contract):
    selectors = {
        INCREMENT: "increment",
        CAUSE_REVERT: "cause_revert",
    }

    def counter(self) -> int:
        return self.storage.get("counter", 0)

    def last_sender(self) -> str:
        return self.storage.get("lastSender", ZERO_ADDRESS)

    def increment(self, ctx: CallContext) -> bytes:
        ctx.use_gas(INCREMENT_GAS)
        self.storage["counter"] = self.counter() + 1
        self.storage["lastSender"] = ctx.sender
        return b""

    def cause_revert(self, ctx: CallContext) -> bytes:
        ctx.use_gas(REVERT_GAS)
        raise ExecutionReverted("MockContract: reverted")
