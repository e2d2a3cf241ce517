"""
batchinvoker command line entry point.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from batchinvoker.core.settings import get_settings
from batchinvoker.core.variants import PROFILES
from batchinvoker.utils.logging import configure_logging

from . import commands


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="batchinvoker",
        description="Signed-batch authorization and sponsored execution tools.",
    )
    parser.add_argument("--log-level", default=settings.runtime.log_level)
    sub = parser.add_subparsers(dest="command", required=True)

    def _common(p: argparse.ArgumentParser, *, domain: bool = False, message: bool = False) -> None:
        p.add_argument("--variant", choices=sorted(PROFILES), default="batch")
        p.add_argument("--output", choices=["table", "json"], default="table")
        if domain:
            p.add_argument("--chain-id", type=int, default=settings.engine.chain_id)
            p.add_argument("--contract", required=True, help="Engine instance address")
        if message:
            p.add_argument("message", help="Message JSON: a file path, inline JSON, or '-' for stdin")

    p = sub.add_parser("type-hashes", help="Print message, sub-operation and domain type hashes")
    _common(p)
    p.set_defaults(func=commands.cmd_type_hashes)

    p = sub.add_parser("domain-separator", help="Print the domain separator of an engine instance")
    _common(p, domain=True)
    p.set_defaults(func=commands.cmd_domain_separator)

    p = sub.add_parser("typed-data", help="Print the typed-data document for a message")
    _common(p, domain=True, message=True)
    p.set_defaults(func=commands.cmd_typed_data)

    p = sub.add_parser("digest", help="Print the struct hash and digests of a message")
    _common(p, domain=True, message=True)
    p.set_defaults(func=commands.cmd_digest)

    p = sub.add_parser("sign", help="Sign a message with a private key read from the environment")
    _common(p, domain=True, message=True)
    p.add_argument("--key-env", default=settings.signer.key_env)
    p.set_defaults(func=commands.cmd_sign)

    p = sub.add_parser("demo", help="Run a sponsored two-step batch on an in-memory host")
    _common(p)
    p.add_argument("--chain-id", type=int, default=settings.engine.chain_id)
    p.add_argument("--gas", type=int, default=settings.engine.default_gas_allowance, help="Gas allowance per sub-operation")
    p.add_argument("--record-path", default=settings.records.path)
    p.add_argument("--redeploy", action="store_true", default=settings.records.redeploy)
    p.set_defaults(func=commands.cmd_demo)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    args.func(args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
