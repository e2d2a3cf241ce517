"""
batchinvoker: signed-batch authorization and atomic sponsored execution.

A principal signs an ordered batch of sub-operations; any sponsor submits it;
the engine runs the whole batch in order exactly once, or nothing at all.
"""

from .core.engine import BatchExecutionEngine
from .core.nonces import NonceRegistry
from .core.policies import DelegatedAuthorizationPolicy, ExplicitSignerPolicy, PrincipalPolicy
from .core.variants import (
    ACCOUNT_ABSTRACTION_INVOKER,
    BATCH_INVOKER,
    TRANSACTION_INVOKER,
    InvokerProfile,
    get_profile,
)
from .core.verifier import SignatureVerifier
from .host.chain import Host
from .protocol import (
    EmptyPayload,
    InvalidNonce,
    InvalidSignature,
    InvocationReceipt,
    Message,
    Signature,
    SubcallFailed,
    SubOperation,
    ValueNotConserved,
)
from .signing.signer import MessageSigner

__version__ = "1.0.0"

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
    "get_profile",
    "SignatureVerifier",
    "Host",
    "Message",
    "SubOperation",
    "Signature",
    "InvocationReceipt",
    "EmptyPayload",
    "InvalidSignature",
    "InvalidNonce",
    "SubcallFailed",
    "ValueNotConserved",
    "MessageSigner",
]
