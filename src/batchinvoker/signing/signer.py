"""
Off-chain message signer.

Produces the signatures a principal hands to a sponsor. The engine never
trusts this code; it only trusts its own recovery in ``SignatureVerifier``.

KEY MANAGEMENT ASSUMPTIONS:
- Private keys are provided at initialization (env var, keystore, HSM export)
- ``generate()`` is for tests and demos only
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Optional, Union

from eth_account import Account
from eth_keys import keys

from ..eip712.hashing import delegated_digest
from ..protocol.models import Message, Signature

if TYPE_CHECKING:
    from ..core.engine import BatchExecutionEngine


class MessageSigner:
    """
    secp256k1 signer for batch authorizations.

    Usage:
        signer = MessageSigner.from_env("PK_ALICE")
        signature = signer.sign(message, engine)
    """

    def __init__(self, private_key: Union[bytes, str]):
        account = Account.from_key(private_key)
        self._private_key = keys.PrivateKey(bytes(account.key))
        self._address = account.address

    @property
    def address(self) -> str:
        return self._address

    def sign_digest(self, digest: bytes) -> Signature:
        """Sign a raw 32-byte digest. Signatures are deterministic and low-s."""
        if len(digest) != 32:
            raise ValueError("digest must be 32 bytes")
        sig = self._private_key.sign_msg_hash(digest)
        return Signature.from_vrs(sig.v, sig.r, sig.s)

    def sign(self, message: Message, engine: "BatchExecutionEngine") -> Signature:
        """Sign whichever digest ``engine``'s policy expects."""
        return self.sign_digest(engine.signing_digest(message))

    def sign_delegation(self, commit: bytes, engine_address: str) -> Signature:
        """Sign the magic-prefixed authorization digest for ``commit``."""
        return self.sign_digest(delegated_digest(engine_address, commit))

    @classmethod
    def generate(cls) -> "MessageSigner":
        """
        WARNING: Use only for testing.
        """
        return cls(bytes(Account.create().key))

    @classmethod
    def from_env(cls, var: str, environ: Optional[dict] = None) -> "MessageSigner":
        env = os.environ if environ is None else environ
        key = env.get(var)
        if not key:
            raise ValueError(f"No private key provided in ${var}")
        return cls(key)
