"""
Typed-data hashing (EIP-712 style) for batch authorizations.

Pure functions only: nothing here touches engine or host state, so every
digest can be checked against fixed vectors or external tooling.

    domainSeparator = keccak(abi.encode(DOMAIN_TYPE_HASH, keccak(name),
                                        keccak(version), chainId, verifyingContract))
    structHash      = keccak(abi.encode(TYPE_HASH, [from], nonce,
                                        keccak(opHash_0 ++ ... ++ opHash_n)))
    digest          = keccak(0x19 0x01 ++ domainSeparator ++ structHash)

Delegated authorization signs a second digest that pins the commit to one
engine instance:

    authDigest      = keccak(0x03 ++ pad32(engine) ++ digest)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable

from eth_abi import encode
from eth_utils import keccak

from ..protocol.models import Message, SubOperation
from ..protocol.validators import address_bytes, normalize_address, validate_uint256
from .types import (
    DOMAIN_TYPE_HASH,
    SUB_OPERATION_TYPE_HASH,
    MessageSchema,
)

EIP712_PREFIX = b"\x19\x01"
AUTH_MAGIC = b"\x03"


@dataclass(frozen=True)
class EIP712Domain:
    name: str
    version: str
    chain_id: int
    verifying_contract: str

    def __post_init__(self) -> None:
        validate_uint256(self.chain_id, "chain_id")
        object.__setattr__(self, "verifying_contract", normalize_address(self.verifying_contract))

    def separator(self) -> bytes:
        return domain_separator(self.name, self.version, self.chain_id, self.verifying_contract)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }


def domain_separator(name: str, version: str, chain_id: int, verifying_contract: str) -> bytes:
    return keccak(
        encode(
            ["bytes32", "bytes32", "bytes32", "uint256", "address"],
            [
                DOMAIN_TYPE_HASH,
                keccak(text=name),
                keccak(text=version),
                chain_id,
                normalize_address(verifying_contract),
            ],
        )
    )


def hash_sub_operation(op: SubOperation) -> bytes:
    return keccak(
        encode(
            ["bytes32", "address", "uint256", "uint256", "bytes32"],
            [SUB_OPERATION_TYPE_HASH, op.target, op.value, op.gas_allowance, keccak(op.data)],
        )
    )


def hash_operations(operations: Iterable[SubOperation]) -> bytes:
    """Array hash: keccak of the concatenated element struct hashes, in order."""
    return keccak(b"".join(hash_sub_operation(op) for op in operations))


def hash_message(message: Message, schema: MessageSchema) -> bytes:
    if schema.includes_principal:
        if message.principal is None:
            raise ValueError(f"{schema.primary_type} requires a 'from' field")
        return keccak(
            encode(
                ["bytes32", "address", "uint256", "bytes32"],
                [schema.type_hash, message.principal, message.nonce, hash_operations(message.operations)],
            )
        )
    return keccak(
        encode(
            ["bytes32", "uint256", "bytes32"],
            [schema.type_hash, message.nonce, hash_operations(message.operations)],
        )
    )


def typed_digest(separator: bytes, struct_hash: bytes) -> bytes:
    return keccak(EIP712_PREFIX + separator + struct_hash)


def message_digest(message: Message, schema: MessageSchema, separator: bytes) -> bytes:
    return typed_digest(separator, hash_message(message, schema))


def delegated_digest(engine_address: str, commit: bytes) -> bytes:
    if len(commit) != 32:
        raise ValueError("commit must be 32 bytes")
    return keccak(AUTH_MAGIC + address_bytes(engine_address).rjust(32, b"\x00") + commit)


def typed_data(message: Message, schema: MessageSchema, domain: EIP712Domain) -> Dict[str, Any]:
    """Full typed-data document, consumable by standard EIP-712 signers."""
    body = message.to_dict(schema.operations_field)
    if not schema.includes_principal:
        body.pop("from", None)
    return {
        "types": schema.typed_data_types(),
        "primaryType": schema.primary_type,
        "domain": domain.to_dict(),
        "message": body,
    }
