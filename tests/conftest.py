"""
Shared fixtures: an in-memory host, two key holders and one engine per
invoker flavour.

alice is the principal who signs; bob is the sponsor who submits and pays
attached value.
"""

import pytest

from batchinvoker.core.engine import BatchExecutionEngine
from batchinvoker.core.variants import (
    ACCOUNT_ABSTRACTION_INVOKER,
    BATCH_INVOKER,
    TRANSACTION_INVOKER,
)
from batchinvoker.host.chain import Host
from batchinvoker.protocol.models import Message
from batchinvoker.signing.signer import MessageSigner
from batchinvoker.testing.mock import MockContract

CHAIN_ID = 4056
ALICE_KEY = "0x" + "a1" * 32
BOB_KEY = "0x" + "b0" * 32

ALL_PROFILES = [BATCH_INVOKER, TRANSACTION_INVOKER, ACCOUNT_ABSTRACTION_INVOKER]


@pytest.fixture
def host():
    return Host(chain_id=CHAIN_ID)


@pytest.fixture
def alice(host):
    signer = MessageSigner(ALICE_KEY)
    host.fund(signer.address, 100)
    return signer


@pytest.fixture
def bob(host):
    signer = MessageSigner(BOB_KEY)
    host.fund(signer.address, 1_000)
    return signer


@pytest.fixture(params=ALL_PROFILES, ids=lambda p: p.key)
def engine(request, host, bob):
    return host.deploy(BatchExecutionEngine.factory(request.param), bob.address)


@pytest.fixture
def mock(host, bob):
    return host.deploy(MockContract, bob.address)


@pytest.fixture
def make_message(engine, alice):
    """Build a message for alice in the engine's layout, at her current nonce."""

    def _make(*operations, nonce=None, principal=None):
        if nonce is None:
            nonce = engine.nonce_of(alice.address)
        if principal is None and engine.profile.schema.includes_principal:
            principal = alice.address
        return Message(nonce=nonce, operations=tuple(operations), principal=principal)

    return _make


@pytest.fixture
def submit(engine, alice, bob):
    """
    Invoke as bob on alice's behalf.

    alice is designated as the authority unless ``designate=False``, in which
    case a delegated engine takes the principal from the signature alone.
    """

    def _submit(signature, message, value=0, *, sender=None, designate=True):
        return engine.invoke(
            signature,
            message,
            value,
            sender=sender or bob.address,
            authority=alice.address if designate else None,
        )

    return _submit

