"""
Instance-record cache.

Remembers which engine and mock instances a run deployed, keyed by chain id
and engine variant, so later runs against the same host can reuse them instead of redeploying.
Purely a bootstrap convenience; nothing in the authorization path reads it.

Record format (JSON):

    {"chainId": 4056, "variant": "batch", "invoker": "0x...", "mock": "0x..."}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from ..host.chain import Contract, Host
from ..protocol.validators import normalize_address
from ..utils.json import json_dumps, json_loads

logger = logging.getLogger(__name__)

DEFAULT_RECORD_PATH = ".batchinvoker/record.json"


@dataclass(frozen=True)
class InstanceRecord:
    chain_id: int
    invoker: str
    mock: str
    variant: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chainId": self.chain_id,
            "variant": self.variant,
            "invoker": self.invoker,
            "mock": self.mock,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> InstanceRecord:
        return cls(
            chain_id=int(data["chainId"]),
            invoker=normalize_address(data["invoker"]),
            mock=normalize_address(data["mock"]),
            variant=data.get("variant"),
        )


class RecordStore:
    def __init__(self, path: str = DEFAULT_RECORD_PATH) -> None:
        self.path = Path(path)

    def read(self) -> Optional[InstanceRecord]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return InstanceRecord.from_dict(json_loads(f.read()))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring unreadable record %s: %s", self.path, e)
            return None

    def write(self, record: InstanceRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(json_dumps(record.to_dict()))

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


def resolve_instances(
    host: Host,
    store: RecordStore,
    deploy: Callable[[], Tuple[Contract, Contract]],
    *,
    variant: Optional[str] = None,
    redeploy: bool = False,
) -> Tuple[Contract, Contract]:
    """
    Return ``(invoker, mock)``: recorded instances when the record matches
    the host and ``variant``, otherwise freshly deployed ones (and a
    rewritten record).
    """
    record = store.read()
    if (
        record is not None
        and not redeploy
        and record.chain_id == host.chain_id
        and record.variant == variant
    ):
        invoker = host.code_at(record.invoker)
        mock = host.code_at(record.mock)
        if invoker is not None and mock is not None:
            logger.info("Reusing recorded instances invoker=%s mock=%s", record.invoker, record.mock)
            return invoker, mock
        logger.info("Recorded instances not present on host, redeploying")

    invoker, mock = deploy()
    store.write(
        InstanceRecord(
            chain_id=host.chain_id,
            invoker=invoker.address,
            mock=mock.address,
            variant=variant,
        )
    )
    return invoker, mock
