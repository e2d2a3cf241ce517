"""
Batch execution engine.

One engine instance is a contract on the host. Its only mutating entry
point is ``invoke``: a sponsor submits a principal's signed message, and the
engine either runs every sub-operation in order or changes nothing at all.

Invocation lifecycle (per call, never persisted):

    PENDING ──validate──> VALIDATED ──> EXECUTING ──conserve──> SETTLED
       └───────────────────────┴────────────┴──────────> REVERTED

Validation order: non-empty payload, signature, nonce. The nonce bump,
the attached value and every sub-operation effect live in one host
transaction; any failure discards all of them.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from ..eip712.hashing import EIP712Domain, message_digest, typed_data
from ..eip712.types import DOMAIN_TYPE_HASH, SUB_OPERATION_TYPE_HASH
from ..host.chain import Contract, Host
from ..protocol.enums import InvocationState
from ..protocol.errors import (
    EmptyPayload,
    InvalidSignature,
    InvocationError,
    SubcallFailed,
    ValueNotConserved,
)
from ..protocol.models import CallResult, InvocationReceipt, Message, Signature
from ..protocol.validators import normalize_address, validate_uint256
from .nonces import NonceRegistry
from .policies import PrincipalPolicy
from .variants import InvokerProfile

logger = logging.getLogger(__name__)


class BatchExecutionEngine(Contract):
    """
    Shared engine core; the invoker flavour is an ``InvokerProfile`` and the
    principal-resolution strategy a ``PrincipalPolicy``.

    Usage:
        engine = host.deploy(BatchExecutionEngine.factory(BATCH_INVOKER), deployer)
        receipt = engine.invoke(signature, message, value=2, sender=sponsor)
    """

    def __init__(
        self,
        address: str,
        host: Host,
        profile: InvokerProfile,
        policy: Optional[PrincipalPolicy] = None,
    ) -> None:
        super().__init__(address, host)
        self.profile = profile
        self.policy: PrincipalPolicy = policy or profile.make_policy()

        # Bound to this instance, network and version; fixed for its lifetime
        self._domain = EIP712Domain(
            name=profile.name,
            version=profile.version,
            chain_id=host.chain_id,
            verifying_contract=address,
        )
        self._domain_separator = self._domain.separator()
        self._nonces = NonceRegistry(self.storage)

    @classmethod
    def factory(
        cls,
        profile: InvokerProfile,
        policy: Optional[PrincipalPolicy] = None,
    ) -> Callable[[str, Host], "BatchExecutionEngine"]:
        return lambda address, host: cls(address, host, profile, policy)

    # ------------------------------------------------------------------
    # Read-only surface
    # ------------------------------------------------------------------
    @property
    def domain(self) -> EIP712Domain:
        return self._domain

    @property
    def domain_separator(self) -> bytes:
        return self._domain_separator

    @property
    def domain_type_hash(self) -> bytes:
        return DOMAIN_TYPE_HASH

    @property
    def message_type_hash(self) -> bytes:
        return self.profile.schema.type_hash

    @property
    def sub_operation_type_hash(self) -> bytes:
        return SUB_OPERATION_TYPE_HASH

    def nonce_of(self, principal: str) -> int:
        return self._nonces.current(principal)

    def digest(self, message: Message) -> bytes:
        """Typed-data digest of ``message`` under this engine's domain."""
        return message_digest(message, self.profile.schema, self._domain_separator)

    def signing_digest(self, message: Message) -> bytes:
        """The digest a principal must sign for this engine's policy."""
        return self.policy.signing_digest(self.digest(message), self.address)

    def typed_data(self, message: Message) -> Dict[str, Any]:
        return typed_data(message, self.profile.schema, self._domain)

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------
    def invoke(
        self,
        signature: Signature,
        message: Message,
        value: int = 0,
        *,
        sender: str,
        authority: Optional[str] = None,
    ) -> InvocationReceipt:
        """
        Execute a signed batch on behalf of its principal.

        Args:
            signature: principal's signature over ``signing_digest(message)``
            message: nonce + ordered sub-operations
            value: native value attached by the sponsor; must be forwarded
                   in full to the sub-operations
            sender: the submitting sponsor (pays ``value``)
            authority: actor designated by the delegation mechanism
                       (delegated-authorization engines only); when omitted
                       the signer of the delegated digest is the principal

        Raises:
            InsufficientFunds: sponsor cannot cover ``value``
            EmptyPayload | InvalidSignature | InvalidNonce |
            SubcallFailed | ValueNotConserved: nothing was changed
        """
        sender = normalize_address(sender)
        validate_uint256(value, "value")
        state = InvocationState.PENDING

        try:
            with self.host.transaction():
                baseline = self.balance
                self.host.transfer(sender, self.address, value)

                principal, digest = self._validate(signature, message, authority)
                state = self._transition(state, InvocationState.VALIDATED)

                state = self._transition(state, InvocationState.EXECUTING)
                calls = self._execute(principal, message)

                residual = self.balance - baseline
                if residual != 0:
                    raise ValueNotConserved("Invalid balance", residual=residual)
                state = self._transition(state, InvocationState.SETTLED)
        except InvocationError as exc:
            exc.failed_at = state
            exc.state = self._transition(state, InvocationState.REVERTED)
            logger.warning(
                "%s invocation reverted from state %s (code=%s): %s",
                self.profile.name,
                exc.failed_at.value,
                exc.code.value,
                exc,
            )
            raise

        logger.info(
            "%s settled nonce %d for %s (%d operations, sponsor=%s, value=%d)",
            self.profile.name,
            message.nonce,
            principal,
            len(calls),
            sender,
            value,
        )
        return InvocationReceipt(
            engine=self.address,
            principal=principal,
            sponsor=sender,
            nonce=message.nonce,
            digest=digest,
            value=value,
            calls=calls,
            state=state,
        )

    def _validate(self, signature: Signature, message: Message, authority: Optional[str]):
        if not message.operations:
            raise EmptyPayload(self.profile.empty_payload_reason)
        if self.profile.schema.includes_principal and message.principal is None:
            raise InvalidSignature("Invalid signature")

        digest = self.digest(message)
        principal = self.policy.resolve(
            message,
            digest,
            signature,
            self.address,
            authority=authority,
        )
        self._nonces.validate_and_advance(principal, message.nonce)
        return principal, digest

    def _execute(self, principal: str, message: Message) -> List[CallResult]:
        calls: List[CallResult] = []
        for index, op in enumerate(message.operations):
            result = self.host.call(
                principal,
                op.target,
                op.value,
                op.data,
                op.gas_allowance,
                value_from=self.address,
            )
            logger.debug(
                "Operation %d -> %s value=%d gas=%d/%d success=%s",
                index,
                op.target,
                op.value,
                result.gas_used,
                op.gas_allowance,
                result.success,
            )
            if not result.success:
                raise SubcallFailed("Transaction failed", index=index, result=result)
            calls.append(result)
        return calls

    @staticmethod
    def _transition(current: InvocationState, new: InvocationState) -> InvocationState:
        if not InvocationState.validate_transition(current, new):
            raise RuntimeError(f"Illegal invocation transition {current.value} -> {new.value}")
        return new
