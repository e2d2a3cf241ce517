"""
JSON helpers. Byte strings serialize as 0x-prefixed hex, enums by value.
"""

import json
from enum import Enum
from typing import Any, Optional

from eth_utils import to_hex


def _default(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray)):
        return to_hex(bytes(obj))
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def json_dumps(obj: Any, indent: Optional[int] = None) -> str:
    if indent is None:
        return json.dumps(obj, separators=(",", ":"), ensure_ascii=False, default=_default)
    return json.dumps(obj, indent=indent, ensure_ascii=False, default=_default)


def json_loads(s: str) -> Any:
    return json.loads(s)
