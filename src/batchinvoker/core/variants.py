"""
Invoker flavours.

All three run the same execution engine; they differ in domain name and
version, the signed message layout and how the principal is resolved.

    batch                Batch Invoker                1.0.0  from + payloads   explicit signer
    transaction          Transaction Invoker          0.1.0  payload, no from  delegated
    account-abstraction  Account Abstraction Invoker  1.0.0  from + payload    explicit signer
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from ..eip712.types import MessageSchema
from ..protocol.enums import PrincipalMode
from .policies import DelegatedAuthorizationPolicy, ExplicitSignerPolicy, PrincipalPolicy


@dataclass(frozen=True)
class InvokerProfile:
    key: str
    name: str
    version: str
    schema: MessageSchema
    principal_mode: PrincipalMode
    empty_payload_reason: str = "No transaction payload"

    def make_policy(self) -> PrincipalPolicy:
        if self.principal_mode is PrincipalMode.DELEGATED:
            return DelegatedAuthorizationPolicy()
        return ExplicitSignerPolicy()


BATCH_INVOKER = InvokerProfile(
    key="batch",
    name="Batch Invoker",
    version="1.0.0",
    schema=MessageSchema(operations_field="payloads", includes_principal=True),
    principal_mode=PrincipalMode.EXPLICIT_SIGNER,
    empty_payload_reason="No payloads",
)

TRANSACTION_INVOKER = InvokerProfile(
    key="transaction",
    name="Transaction Invoker",
    version="0.1.0",
    schema=MessageSchema(operations_field="payload", includes_principal=False),
    principal_mode=PrincipalMode.DELEGATED,
)

ACCOUNT_ABSTRACTION_INVOKER = InvokerProfile(
    key="account-abstraction",
    name="Account Abstraction Invoker",
    version="1.0.0",
    schema=MessageSchema(operations_field="payload", includes_principal=True),
    principal_mode=PrincipalMode.EXPLICIT_SIGNER,
)

PROFILES: Dict[str, InvokerProfile] = {
    p.key: p for p in (BATCH_INVOKER, TRANSACTION_INVOKER, ACCOUNT_ABSTRACTION_INVOKER)
}


def get_profile(key: str) -> InvokerProfile:
    try:
        return PROFILES[key]
    except KeyError:
        raise ValueError(
            f"Unknown invoker variant '{key}' (expected one of: {', '.join(PROFILES)})"
        ) from None
