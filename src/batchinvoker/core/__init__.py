from .engine import BatchExecutionEngine
from .nonces import NonceRegistry
from .policies import DelegatedAuthorizationPolicy, ExplicitSignerPolicy, PrincipalPolicy
from .variants import (
    ACCOUNT_ABSTRACTION_INVOKER,
    BATCH_INVOKER,
    PROFILES,
    TRANSACTION_INVOKER,
    InvokerProfile,
    get_profile,
)
from .verifier import SignatureVerifier

__all__ = [
    "BatchExecutionEngine",
    "NonceRegistry",
    "PrincipalPolicy",
    "ExplicitSignerPolicy",
    "DelegatedAuthorizationPolicy",
    "InvokerProfile",
    "BATCH_INVOKER",
    "TRANSACTION_INVOKER",
    "ACCOUNT_ABSTRACTION_INVOKER",
    "PROFILES",
    "get_profile",
    "SignatureVerifier",
]
