from enum import Enum


class ErrorCode(str, Enum):
    EMPTY_PAYLOAD = "empty_payload"
    INVALID_SIGNATURE = "invalid_signature"
    INVALID_NONCE = "invalid_nonce"
    SUBCALL_FAILED = "subcall_failed"
    VALUE_NOT_CONSERVED = "value_not_conserved"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    EXECUTION_REVERTED = "execution_reverted"
    OUT_OF_GAS = "out_of_gas"
    INTERNAL_ERROR = "internal_error"


class InvocationState(str, Enum):
    """
    Per-invocation lifecycle.

    Legal transitions:
    - PENDING → VALIDATED | REVERTED
    - VALIDATED → EXECUTING | REVERTED
    - EXECUTING → SETTLED | REVERTED

    Terminal states: SETTLED, REVERTED
    """

    PENDING = "pending"
    VALIDATED = "validated"
    EXECUTING = "executing"
    SETTLED = "settled"
    REVERTED = "reverted"

    @classmethod
    def is_terminal(cls, state: "InvocationState") -> bool:
        return state in {cls.SETTLED, cls.REVERTED}

    @classmethod
    def validate_transition(cls, from_state: "InvocationState", to_state: "InvocationState") -> bool:
        legal_transitions = {
            cls.PENDING: {cls.VALIDATED, cls.REVERTED},
            cls.VALIDATED: {cls.EXECUTING, cls.REVERTED},
            cls.EXECUTING: {cls.SETTLED, cls.REVERTED},
            cls.SETTLED: set(),  # Terminal
            cls.REVERTED: set(),  # Terminal
        }
        return to_state in legal_transitions.get(from_state, set())


class PrincipalMode(str, Enum):
    EXPLICIT_SIGNER = "explicit_signer"
    DELEGATED = "delegated"
