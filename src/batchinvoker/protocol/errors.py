from typing import Optional

from .enums import ErrorCode, InvocationState


class BatchInvokerError(Exception):
    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.code = code or ErrorCode.INTERNAL_ERROR


# ---------------------------------------------------------------------------
# Invocation failures (every one of them reverts the whole invocation)
# ---------------------------------------------------------------------------


class InvocationError(BatchInvokerError):
    """
    Base for failures that abort an invocation.

    The engine records the last state the invocation reached in
    ``failed_at``; ``state`` is then REVERTED.
    """

    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message, code or self.default_code)
        self.state: Optional[InvocationState] = None
        self.failed_at: Optional[InvocationState] = None


class EmptyPayload(InvocationError):
    """Raised when a message carries no sub-operations."""

    default_code = ErrorCode.EMPTY_PAYLOAD


class InvalidSignature(InvocationError):
    """Raised when the signature does not bind the message to the principal."""

    default_code = ErrorCode.INVALID_SIGNATURE


class InvalidNonce(InvocationError):
    """Raised when the claimed nonce is not the principal's current nonce."""

    default_code = ErrorCode.INVALID_NONCE

    def __init__(self, message: str, *, expected: int = 0, claimed: int = 0):
        super().__init__(message)
        self.expected = expected
        self.claimed = claimed


class SubcallFailed(InvocationError):
    """Raised when one sub-operation does not succeed."""

    default_code = ErrorCode.SUBCALL_FAILED

    def __init__(self, message: str, *, index: int = -1, result=None):
        super().__init__(message)
        self.index = index
        self.result = result


class ValueNotConserved(InvocationError):
    """Raised when attached value is left behind in the engine."""

    default_code = ErrorCode.VALUE_NOT_CONSERVED

    def __init__(self, message: str, *, residual: int = 0):
        super().__init__(message)
        self.residual = residual


# ---------------------------------------------------------------------------
# Host failures
# ---------------------------------------------------------------------------


class HostError(BatchInvokerError):
    """Raised by the execution substrate."""


class InsufficientFunds(HostError):
    def __init__(self, message: str):
        super().__init__(message, ErrorCode.INSUFFICIENT_FUNDS)


class ExecutionReverted(HostError):
    """Raised by contract code to fail the current call."""

    def __init__(self, message: str = "execution reverted"):
        super().__init__(message, ErrorCode.EXECUTION_REVERTED)


class OutOfGas(ExecutionReverted):
    def __init__(self, message: str = "out of gas"):
        super().__init__(message)
        self.code = ErrorCode.OUT_OF_GAS
