"""
Type strings and type hashes for batch authorizations.

The three engine flavours share the sub-operation layout and differ only in
the primary message type: whether it carries ``address from`` and what the
sub-operation array is called. A different name is a different type string
and therefore a different type hash, so a signature for one flavour never
validates on another.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from eth_utils import keccak

DOMAIN_TYPE = "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
SUB_OPERATION_TYPE_NAME = "TransactionPayload"
SUB_OPERATION_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("to", "address"),
    ("value", "uint256"),
    ("gasLimit", "uint256"),
    ("data", "bytes"),
)
DOMAIN_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("name", "string"),
    ("version", "string"),
    ("chainId", "uint256"),
    ("verifyingContract", "address"),
)


def encode_type(name: str, fields: Tuple[Tuple[str, str], ...]) -> str:
    return f"{name}(" + ",".join(f"{ftype} {fname}" for fname, ftype in fields) + ")"


def type_hash(type_string: str) -> bytes:
    return keccak(text=type_string)


SUB_OPERATION_TYPE = encode_type(SUB_OPERATION_TYPE_NAME, SUB_OPERATION_FIELDS)
DOMAIN_TYPE_HASH = type_hash(DOMAIN_TYPE)
SUB_OPERATION_TYPE_HASH = type_hash(SUB_OPERATION_TYPE)


@dataclass(frozen=True)
class MessageSchema:
    """Field layout of the signed message for one engine flavour."""

    primary_type: str = "Transaction"
    operations_field: str = "payloads"
    includes_principal: bool = True

    @property
    def fields(self) -> Tuple[Tuple[str, str], ...]:
        fields: List[Tuple[str, str]] = []
        if self.includes_principal:
            fields.append(("from", "address"))
        fields.append(("nonce", "uint256"))
        fields.append((self.operations_field, f"{SUB_OPERATION_TYPE_NAME}[]"))
        return tuple(fields)

    @property
    def type_string(self) -> str:
        # Referenced struct types are appended after the primary type
        return encode_type(self.primary_type, self.fields) + SUB_OPERATION_TYPE

    @property
    def type_hash(self) -> bytes:
        return type_hash(self.type_string)

    def typed_data_types(self) -> dict:
        def _as_list(fields):
            return [{"name": n, "type": t} for n, t in fields]

        return {
            "EIP712Domain": _as_list(DOMAIN_FIELDS),
            self.primary_type: _as_list(self.fields),
            SUB_OPERATION_TYPE_NAME: _as_list(SUB_OPERATION_FIELDS),
        }
