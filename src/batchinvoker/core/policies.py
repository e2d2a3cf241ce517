"""
Principal-resolution policies.

The execution engine is shared by every invoker flavour; what differs is how
the principal of an invocation is determined:

- ExplicitSignerPolicy: the principal is whoever signed the typed digest.
  If the message declares ``from``, it must match.
- DelegatedAuthorizationPolicy: the principal is whoever signed the
  magic-prefixed digest pinned to this engine instance. When the calling
  context designates an authority, the signer must be that authority.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ..eip712.hashing import delegated_digest
from ..protocol.enums import PrincipalMode
from ..protocol.errors import InvalidSignature
from ..protocol.models import Message, Signature
from .verifier import SignatureVerifier


@runtime_checkable
class PrincipalPolicy(Protocol):
    mode: PrincipalMode

    def signing_digest(self, typed_digest: bytes, engine_address: str) -> bytes:  # pragma: no cover - interface
        """Digest the principal is expected to have signed."""
        ...

    def resolve(
        self,
        message: Message,
        typed_digest: bytes,
        signature: Signature,
        engine_address: str,
        authority: Optional[str] = None,
    ) -> str:  # pragma: no cover - interface
        """Return the principal or raise InvalidSignature."""
        ...


class ExplicitSignerPolicy:
    mode = PrincipalMode.EXPLICIT_SIGNER

    def __init__(self, verifier: Optional[SignatureVerifier] = None) -> None:
        self._verifier = verifier or SignatureVerifier()

    def signing_digest(self, typed_digest: bytes, engine_address: str) -> bytes:
        return typed_digest

    def resolve(
        self,
        message: Message,
        typed_digest: bytes,
        signature: Signature,
        engine_address: str,
        authority: Optional[str] = None,
    ) -> str:
        # ``authority`` is meaningless here: the signature alone decides
        return self._verifier.verify(typed_digest, signature, message.principal)


class DelegatedAuthorizationPolicy:
    mode = PrincipalMode.DELEGATED

    def __init__(self, verifier: Optional[SignatureVerifier] = None) -> None:
        self._verifier = verifier or SignatureVerifier()

    def signing_digest(self, typed_digest: bytes, engine_address: str) -> bytes:
        return delegated_digest(engine_address, typed_digest)

    def resolve(
        self,
        message: Message,
        typed_digest: bytes,
        signature: Signature,
        engine_address: str,
        authority: Optional[str] = None,
    ) -> str:
        principal = self._verifier.verify(
            self.signing_digest(typed_digest, engine_address),
            signature,
            authority,
        )
        if message.principal is not None and message.principal != principal:
            raise InvalidSignature("Invalid signature")
        return principal
