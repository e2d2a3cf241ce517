"""
secp256k1 signature recovery.

Recovery rejects anything an EVM ``ecrecover`` caller should not trust:
r or s outside [1, n), malleable high-s values, points that do not recover,
and the zero address.
"""

from __future__ import annotations

import logging
from typing import Optional

from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError as KeyValidationError

from ..protocol.errors import InvalidSignature
from ..protocol.models import Signature
from ..protocol.validators import ZERO_ADDRESS, normalize_address

logger = logging.getLogger(__name__)

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2


class SignatureVerifier:
    """
    Stateless verifier.

    Usage:
        verifier = SignatureVerifier()
        signer = verifier.recover(digest, signature)
        verifier.verify(digest, signature, expected_principal)
    """

    def __init__(self, *, reason: str = "Invalid signature") -> None:
        self._reason = reason

    def recover(self, digest: bytes, signature: Signature) -> str:
        """
        Recover the signing address.

        Raises:
            InvalidSignature: malformed, malleable or unrecoverable signature
        """
        if len(digest) != 32:
            raise InvalidSignature(self._reason)

        r = int.from_bytes(signature.r, "big")
        s = int.from_bytes(signature.s, "big")
        if not (0 < r < SECP256K1_N) or not (0 < s < SECP256K1_N):
            logger.debug("Rejected signature with out-of-range r/s")
            raise InvalidSignature(self._reason)
        if s > SECP256K1_HALF_N:
            logger.debug("Rejected high-s signature")
            raise InvalidSignature(self._reason)

        try:
            sig = keys.Signature(vrs=(signature.recovery_id, r, s))
            public_key = sig.recover_public_key_from_msg_hash(digest)
        except (BadSignature, KeyValidationError) as exc:
            logger.debug("Signature recovery failed: %s", exc)
            raise InvalidSignature(self._reason) from exc

        recovered = normalize_address(public_key.to_checksum_address())
        if recovered == ZERO_ADDRESS:
            raise InvalidSignature(self._reason)
        return recovered

    def verify(self, digest: bytes, signature: Signature, expected: Optional[str]) -> str:
        """
        Recover and compare against ``expected``. Returns the principal.
        """
        recovered = self.recover(digest, signature)
        if expected is not None and recovered != normalize_address(expected):
            logger.debug("Recovered %s, expected %s", recovered, expected)
            raise InvalidSignature(self._reason)
        return recovered
