from .types import (
    DOMAIN_TYPE,
    DOMAIN_TYPE_HASH,
    SUB_OPERATION_TYPE,
    SUB_OPERATION_TYPE_HASH,
    MessageSchema,
    type_hash,
)
from .hashing import (
    EIP712Domain,
    domain_separator,
    hash_sub_operation,
    hash_operations,
    hash_message,
    typed_digest,
    message_digest,
    delegated_digest,
    typed_data,
)

__all__ = [
    "DOMAIN_TYPE",
    "DOMAIN_TYPE_HASH",
    "SUB_OPERATION_TYPE",
    "SUB_OPERATION_TYPE_HASH",
    "MessageSchema",
    "type_hash",
    "EIP712Domain",
    "domain_separator",
    "hash_sub_operation",
    "hash_operations",
    "hash_message",
    "typed_digest",
    "message_digest",
    "delegated_digest",
    "typed_data",
]
