"""
Tests for the batch execution engine, run against every invoker flavour.

Coverage:
1. Public read surface (type hashes, domain separator, nonces)
2. Validation failures (empty payload, signature, nonce)
3. Sub-operation failure and atomic rollback
4. Value conservation
5. Bundling, sponsorship, replay and tampering
"""

import pytest

from batchinvoker.core.engine import BatchExecutionEngine
from batchinvoker.eip712.types import DOMAIN_TYPE_HASH
from batchinvoker.protocol.enums import ErrorCode, InvocationState
from batchinvoker.protocol.errors import (
    EmptyPayload,
    InsufficientFunds,
    InvalidNonce,
    InvalidSignature,
    SubcallFailed,
    ValueNotConserved,
)
from batchinvoker.protocol.models import ZERO_SIGNATURE, SubOperation
from batchinvoker.signing.signer import MessageSigner
from batchinvoker.testing.mock import CAUSE_REVERT, INCREMENT, INCREMENT_GAS


def increment(mock, value=0, gas=1_000_000):
    return SubOperation(target=mock.address, value=value, gas_allowance=gas, data=INCREMENT)


def cause_revert(mock):
    return SubOperation(target=mock.address, gas_allowance=1_000_000, data=CAUSE_REVERT)


# ===========================================================================
# 1. Read surface
# ===========================================================================


class TestEngineSurface:
    def test_type_hashes_exposed(self, engine):
        assert engine.domain_type_hash == DOMAIN_TYPE_HASH
        assert engine.message_type_hash == engine.profile.schema.type_hash
        assert len(engine.sub_operation_type_hash) == 32

    def test_domain_separator_bound_to_instance(self, host, bob, engine):
        """Two instances of the same flavour get different separators."""
        other = host.deploy(BatchExecutionEngine.factory(engine.profile), bob.address)
        assert other.address != engine.address
        assert other.domain_separator != engine.domain_separator

    def test_nonce_starts_at_zero(self, engine, alice):
        assert engine.nonce_of(alice.address) == 0

    def test_engine_rejects_plain_value(self, host, engine, bob):
        result = host.call(bob.address, engine.address, value=1, data=b"")
        assert not result.success
        assert host.balance_of(engine.address) == 0


# ===========================================================================
# 2. Validation failures
# ===========================================================================


class TestValidation:
    def test_empty_payload(self, engine, alice, make_message, submit):
        message = make_message()
        signature = alice.sign(message, engine)

        with pytest.raises(EmptyPayload) as exc:
            submit(signature, message)

        assert str(exc.value) == engine.profile.empty_payload_reason
        assert exc.value.code == ErrorCode.EMPTY_PAYLOAD
        assert exc.value.failed_at == InvocationState.PENDING
        assert exc.value.state == InvocationState.REVERTED
        assert engine.nonce_of(alice.address) == 0

    def test_flipped_parity_is_invalid_signature(self, engine, alice, mock, make_message, submit):
        message = make_message(increment(mock))
        signature = alice.sign(message, engine).flipped()

        with pytest.raises(InvalidSignature, match="Invalid signature"):
            submit(signature, message)

        assert engine.nonce_of(alice.address) == 0
        assert mock.counter() == 0

    def test_zero_signature_is_invalid(self, engine, mock, make_message, submit):
        message = make_message(increment(mock))

        with pytest.raises(InvalidSignature):
            submit(ZERO_SIGNATURE, message)

    def test_signature_from_another_key(self, engine, alice, bob, mock, make_message, submit):
        message = make_message(increment(mock))
        signature = bob.sign(message, engine)

        with pytest.raises(InvalidSignature):
            submit(signature, message)

    def test_nonce_ahead_is_invalid(self, engine, alice, mock, make_message, submit):
        message = make_message(increment(mock), nonce=engine.nonce_of(alice.address) + 1)
        signature = alice.sign(message, engine)

        with pytest.raises(InvalidNonce, match="Invalid nonce") as exc:
            submit(signature, message)

        assert exc.value.expected == 0
        assert exc.value.claimed == 1
        assert exc.value.state == InvocationState.REVERTED
        assert engine.nonce_of(alice.address) == 0

    def test_empty_payload_checked_before_signature(self, engine, make_message, submit):
        with pytest.raises(EmptyPayload):
            submit(ZERO_SIGNATURE, make_message())

    def test_signature_checked_before_nonce(self, engine, alice, mock, make_message, submit):
        message = make_message(increment(mock), nonce=7)
        signature = alice.sign(message, engine).flipped()

        with pytest.raises(InvalidSignature):
            submit(signature, message)


# ===========================================================================
# 3. Sub-operation failure
# ===========================================================================


class TestSubcallFailure:
    def test_second_operation_reverts_whole_batch(self, host, engine, alice, bob, mock, make_message, submit):
        """Nonce, counter and forwarded value all roll back."""
        message = make_message(increment(mock, value=1), cause_revert(mock))
        signature = alice.sign(message, engine)
        bob_before = host.balance_of(bob.address)

        with pytest.raises(SubcallFailed, match="Transaction failed") as exc:
            submit(signature, message, value=1)

        assert exc.value.index == 1
        assert exc.value.result.success is False
        assert exc.value.failed_at == InvocationState.EXECUTING
        assert exc.value.state == InvocationState.REVERTED
        assert engine.nonce_of(alice.address) == 0
        assert mock.counter() == 0
        assert host.balance_of(mock.address) == 0
        assert host.balance_of(engine.address) == 0
        assert host.balance_of(bob.address) == bob_before

    def test_failed_attempt_remains_resubmittable(self, engine, alice, mock, make_message, submit):
        message = make_message(increment(mock, gas=INCREMENT_GAS - 1))
        signature = alice.sign(message, engine)

        with pytest.raises(SubcallFailed):
            submit(signature, message)

        # Same nonce, fixed gas, fresh signature
        fixed = make_message(increment(mock, gas=INCREMENT_GAS))
        submit(alice.sign(fixed, engine), fixed)
        assert mock.counter() == 1
        assert engine.nonce_of(alice.address) == 1

    def test_gas_allowance_is_hard_cap(self, engine, alice, mock, make_message, submit):
        message = make_message(increment(mock, gas=INCREMENT_GAS - 1))

        with pytest.raises(SubcallFailed) as exc:
            submit(alice.sign(message, engine), message)

        assert exc.value.result.error == f"out of gas: limit {INCREMENT_GAS - 1}"

    def test_value_beyond_attached_fails(self, engine, alice, mock, make_message, submit):
        """Operations cannot spend more than the sponsor attached."""
        message = make_message(increment(mock, value=2))

        with pytest.raises(SubcallFailed):
            submit(alice.sign(message, engine), message, value=1)

    def test_sponsor_without_funds(self, host, engine, alice, mock, make_message, submit):
        poor = MessageSigner.generate()
        message = make_message(increment(mock, value=1))

        with pytest.raises(InsufficientFunds):
            submit(alice.sign(message, engine), message, value=1, sender=poor.address)

        assert engine.nonce_of(alice.address) == 0


# ===========================================================================
# 4. Value conservation
# ===========================================================================


class TestValueConservation:
    def test_leftover_value(self, host, engine, alice, bob, mock, make_message, submit):
        message = make_message(increment(mock))
        bob_before = host.balance_of(bob.address)

        with pytest.raises(ValueNotConserved, match="Invalid balance") as exc:
            submit(alice.sign(message, engine), message, value=1)

        assert exc.value.residual == 1
        assert exc.value.failed_at == InvocationState.EXECUTING
        assert exc.value.state == InvocationState.REVERTED
        assert host.balance_of(engine.address) == 0
        assert host.balance_of(bob.address) == bob_before
        assert engine.nonce_of(alice.address) == 0
        assert mock.counter() == 0

    def test_exact_value_succeeds(self, host, engine, alice, mock, make_message, submit):
        message = make_message(increment(mock, value=3), increment(mock, value=4))

        receipt = submit(alice.sign(message, engine), message, value=7)

        assert receipt.value == 7
        assert host.balance_of(mock.address) == 7
        assert host.balance_of(engine.address) == 0

    def test_preexisting_engine_balance_not_attributed(self, host, engine, alice, mock, make_message, submit):
        """Only value from this invocation must be consumed."""
        host.fund(engine.address, 5)
        message = make_message(increment(mock, value=1))

        submit(alice.sign(message, engine), message, value=1)

        assert host.balance_of(engine.address) == 5
        assert host.balance_of(mock.address) == 1


# ===========================================================================
# 5. Bundling, sponsorship, replay
# ===========================================================================


class TestBundling:
    def test_bundle_transactions(self, host, engine, alice, mock, make_message, submit):
        message = make_message(increment(mock, value=1), increment(mock, value=1))
        mock_balance = host.balance_of(mock.address)
        mock_counter = mock.counter()

        receipt = submit(alice.sign(message, engine), message, value=2)

        assert host.balance_of(mock.address) == mock_balance + 2
        assert mock.last_sender() == alice.address
        assert mock.counter() == mock_counter + 2
        assert receipt.state == InvocationState.SETTLED
        assert receipt.principal == alice.address
        assert len(receipt.calls) == 2
        assert receipt.gas_used == 2 * INCREMENT_GAS
        assert receipt.digest == engine.digest(message)

    def test_nonce_advances_by_one_per_success(self, engine, alice, mock, make_message, submit):
        for expected in range(3):
            assert engine.nonce_of(alice.address) == expected
            message = make_message(increment(mock))
            submit(alice.sign(message, engine), message)

        assert engine.nonce_of(alice.address) == 3
        assert mock.counter() == 3

    def test_replay_fails_with_invalid_nonce(self, engine, alice, mock, make_message, submit):
        message = make_message(increment(mock))
        signature = alice.sign(message, engine)
        submit(signature, message)

        with pytest.raises(InvalidNonce):
            submit(signature, message)

        assert mock.counter() == 1
        assert engine.nonce_of(alice.address) == 1


class TestSponsoring:
    def test_sponsoring_without_designated_authority(self, host, engine, alice, bob, mock, make_message, submit):
        """The plain invoke(signature, message, value) shape works for every flavour."""
        message = make_message(increment(mock, value=1), increment(mock, value=1))
        alice_balance = host.balance_of(alice.address)

        receipt = submit(alice.sign(message, engine), message, value=2, designate=False)

        assert receipt.principal == alice.address
        assert mock.last_sender() == alice.address
        assert mock.counter() == 2
        assert host.balance_of(mock.address) == 2
        assert host.balance_of(alice.address) == alice_balance
        assert engine.nonce_of(alice.address) == 1

    def test_replay_without_designated_authority(self, engine, alice, mock, make_message, submit):
        message = make_message(increment(mock))
        signature = alice.sign(message, engine)
        submit(signature, message, designate=False)

        with pytest.raises(InvalidNonce):
            submit(signature, message, designate=False)

    def test_enables_transaction_sponsoring(self, host, engine, alice, bob, mock, make_message, submit):
        message = make_message(increment(mock))
        alice_balance = host.balance_of(alice.address)

        receipt = submit(alice.sign(message, engine), message, sender=bob.address)

        assert host.balance_of(alice.address) == alice_balance
        assert mock.last_sender() == alice.address
        assert mock.counter() == 1
        assert receipt.sponsor == bob.address

    def test_sponsor_pays_attached_value(self, host, engine, alice, bob, mock, make_message, submit):
        message = make_message(increment(mock, value=5))
        alice_balance = host.balance_of(alice.address)
        bob_balance = host.balance_of(bob.address)

        submit(alice.sign(message, engine), message, value=5)

        assert host.balance_of(alice.address) == alice_balance
        assert host.balance_of(bob.address) == bob_balance - 5

    def test_any_sender_may_submit(self, host, engine, alice, mock, make_message, submit):
        stranger = MessageSigner.generate()
        message = make_message(increment(mock))

        submit(alice.sign(message, engine), message, sender=stranger.address)

        assert mock.counter() == 1

    @pytest.mark.parametrize(
        "field, change",
        [
            ("gas_allowance", 5_000_000),
            ("value", 1),
            ("data", INCREMENT + b"\x00"),
        ],
    )
    def test_prevents_manipulation(self, engine, alice, mock, make_message, submit, field, change):
        message = make_message(increment(mock))
        signature = alice.sign(message, engine)

        fields = {
            "target": mock.address,
            "value": 0,
            "gas_allowance": 1_000_000,
            "data": INCREMENT,
        }
        fields[field] = change
        modified = message.with_operations([SubOperation(**fields)])

        with pytest.raises(InvalidSignature):
            submit(signature, modified, value=modified.total_value)

        assert engine.nonce_of(alice.address) == 0

    def test_signature_not_valid_for_other_nonce(self, engine, alice, mock, make_message, submit):
        message = make_message(increment(mock))
        signature = alice.sign(message, engine)
        bumped = make_message(increment(mock), nonce=message.nonce + 1)

        with pytest.raises(InvalidSignature):
            submit(signature, bumped)

    def test_signature_not_valid_on_other_instance(self, host, engine, alice, bob, mock, make_message, submit):
        other = host.deploy(BatchExecutionEngine.factory(engine.profile), bob.address)
        message = make_message(increment(mock))
        signature = alice.sign(message, engine)

        with pytest.raises(InvalidSignature):
            other.invoke(signature, message, sender=bob.address, authority=alice.address)

        assert other.nonce_of(alice.address) == 0
