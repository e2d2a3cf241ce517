"""
batchinvoker CLI commands.

Commands:
    batchinvoker type-hashes --variant <v>                 Print the type hashes
    batchinvoker domain-separator --variant <v> ...        Print the domain separator
    batchinvoker typed-data --variant <v> ... <message>    Print the typed-data document
    batchinvoker digest --variant <v> ... <message>        Print typed and signing digests
    batchinvoker sign --variant <v> ... <message>          Sign a message with a key from the env
    batchinvoker demo --variant <v>                        Sponsored two-step batch on a fresh host
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, Dict

from eth_utils import to_hex

from batchinvoker.utils.json import json_dumps, json_loads


def _load_message(args):
    from batchinvoker.protocol.models import Message

    source = args.message
    try:
        if source == "-":
            raw = json_loads(sys.stdin.read())
        elif source.lstrip().startswith("{"):
            raw = json_loads(source)
        else:
            with open(source, "r", encoding="utf-8") as f:
                raw = json_loads(f.read())
        return Message.from_dict(raw)
    except (OSError, ValueError, KeyError, TypeError) as e:
        print(f"Invalid message: {e}", file=sys.stderr)
        sys.exit(1)


def _domain(args):
    from batchinvoker.core.variants import get_profile
    from batchinvoker.eip712.hashing import EIP712Domain

    profile = get_profile(args.variant)
    try:
        domain = EIP712Domain(
            name=profile.name,
            version=profile.version,
            chain_id=args.chain_id,
            verifying_contract=args.contract,
        )
    except (TypeError, ValueError) as e:
        print(f"Invalid domain: {e}", file=sys.stderr)
        sys.exit(1)
    return profile, domain


@dataclass(frozen=True)
class MessageDigests:
    profile: Any
    message: Any
    struct_hash: bytes
    digest: bytes
    signing_digest: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variant": self.profile.key,
            "struct_hash": to_hex(self.struct_hash),
            "digest": to_hex(self.digest),
            "signing_digest": to_hex(self.signing_digest),
        }


def _digests(args) -> MessageDigests:
    from batchinvoker.eip712.hashing import hash_message, typed_digest

    profile, domain = _domain(args)
    message = _load_message(args)
    try:
        struct_hash = hash_message(message, profile.schema)
    except ValueError as e:
        print(f"Invalid message: {e}", file=sys.stderr)
        sys.exit(1)

    digest = typed_digest(domain.separator(), struct_hash)
    signing = profile.make_policy().signing_digest(digest, domain.verifying_contract)
    return MessageDigests(
        profile=profile,
        message=message,
        struct_hash=struct_hash,
        digest=digest,
        signing_digest=signing,
    )


def cmd_type_hashes(args) -> None:
    from batchinvoker.core.variants import get_profile
    from batchinvoker.eip712.types import DOMAIN_TYPE, DOMAIN_TYPE_HASH, SUB_OPERATION_TYPE, SUB_OPERATION_TYPE_HASH

    profile = get_profile(args.variant)
    data = {
        "variant": profile.key,
        "domain": {"type": DOMAIN_TYPE, "hash": to_hex(DOMAIN_TYPE_HASH)},
        "message": {"type": profile.schema.type_string, "hash": to_hex(profile.schema.type_hash)},
        "sub_operation": {"type": SUB_OPERATION_TYPE, "hash": to_hex(SUB_OPERATION_TYPE_HASH)},
    }
    _print_output(data, args.output)


def cmd_domain_separator(args) -> None:
    profile, domain = _domain(args)
    data = {"variant": profile.key, **domain.to_dict(), "domainSeparator": to_hex(domain.separator())}
    _print_output(data, args.output)


def cmd_typed_data(args) -> None:
    from batchinvoker.eip712.hashing import typed_data

    profile, domain = _domain(args)
    message = _load_message(args)
    print(json_dumps(typed_data(message, profile.schema, domain), indent=2))


def cmd_digest(args) -> None:
    _print_output(_digests(args).to_dict(), args.output)


def cmd_sign(args) -> None:
    from batchinvoker.signing.signer import MessageSigner

    d = _digests(args)
    try:
        signer = MessageSigner.from_env(args.key_env)
    except ValueError as e:
        print(f"Signing error: {e}", file=sys.stderr)
        sys.exit(1)

    signature = signer.sign_digest(d.signing_digest)
    principal = d.message.principal
    if principal is not None and principal != signer.address:
        print(
            f"Warning: message 'from' {principal} is not the signer {signer.address}",
            file=sys.stderr,
        )
    _print_output({"signer": signer.address, **signature.to_dict()}, args.output)


def cmd_demo(args) -> None:
    from batchinvoker.core.engine import BatchExecutionEngine
    from batchinvoker.core.variants import get_profile
    from batchinvoker.host.chain import Host
    from batchinvoker.protocol.errors import BatchInvokerError
    from batchinvoker.protocol.models import Message, SubOperation
    from batchinvoker.signing.signer import MessageSigner
    from batchinvoker.testing.mock import INCREMENT, MockContract
    from batchinvoker.tracking.records import RecordStore, resolve_instances

    profile = get_profile(args.variant)
    host = Host(chain_id=args.chain_id)
    alice = MessageSigner.generate()
    bob = MessageSigner.generate()
    host.fund(bob.address, 10)

    def deploy():
        engine = host.deploy(BatchExecutionEngine.factory(profile), bob.address)
        return engine, host.deploy(MockContract, bob.address)

    engine, mock = resolve_instances(
        host,
        RecordStore(args.record_path),
        deploy,
        variant=profile.key,
        redeploy=args.redeploy,
    )

    message = Message(
        nonce=engine.nonce_of(alice.address),
        operations=(
            SubOperation(target=mock.address, value=1, gas_allowance=args.gas, data=INCREMENT),
            SubOperation(target=mock.address, value=1, gas_allowance=args.gas, data=INCREMENT),
        ),
        principal=alice.address if profile.schema.includes_principal else None,
    )
    signature = alice.sign(message, engine)

    try:
        receipt = engine.invoke(
            signature,
            message,
            value=2,
            sender=bob.address,
            authority=alice.address,
        )
    except BatchInvokerError as e:
        print(f"Invocation failed ({e.code.value}): {e}", file=sys.stderr)
        sys.exit(1)

    data = receipt.to_dict()
    data["mock"] = {"counter": mock.counter(), "last_sender": mock.last_sender(), "balance": mock.balance}
    _print_output(data, args.output)


def _print_output(data: Dict[str, Any], fmt: str) -> None:
    if fmt == "json":
        print(json_dumps(data, indent=2))
        return

    width = max(len(k) for k in data) + 2 if data else 0
    for k, v in data.items():
        if isinstance(v, dict):
            print(f"{k}:")
            for sk, sv in v.items():
                print(f"  {sk}: {sv}")
        elif isinstance(v, list):
            print(f"{k}:")
            for item in v:
                print(f"  - {item}")
        else:
            print(f"{(k + ':'):<{width}} {v}")
