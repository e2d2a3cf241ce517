from .enums import ErrorCode, InvocationState, PrincipalMode
from .errors import (
    BatchInvokerError,
    InvocationError,
    EmptyPayload,
    InvalidSignature,
    InvalidNonce,
    SubcallFailed,
    ValueNotConserved,
    HostError,
    InsufficientFunds,
    ExecutionReverted,
    OutOfGas,
)
from .models import (
    DEFAULT_GAS_ALLOWANCE,
    SubOperation,
    Message,
    Signature,
    ZERO_SIGNATURE,
    CallResult,
    InvocationReceipt,
)
from .validators import ZERO_ADDRESS, normalize_address

__all__ = [
    "ErrorCode",
    "InvocationState",
    "PrincipalMode",
    "BatchInvokerError",
    "InvocationError",
    "EmptyPayload",
    "InvalidSignature",
    "InvalidNonce",
    "SubcallFailed",
    "ValueNotConserved",
    "HostError",
    "InsufficientFunds",
    "ExecutionReverted",
    "OutOfGas",
    "DEFAULT_GAS_ALLOWANCE",
    "SubOperation",
    "Message",
    "Signature",
    "ZERO_SIGNATURE",
    "CallResult",
    "InvocationReceipt",
    "ZERO_ADDRESS",
    "normalize_address",
]
