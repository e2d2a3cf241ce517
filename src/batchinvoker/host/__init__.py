from .chain import (
    DEFAULT_CHAIN_ID,
    CallContext,
    Contract,
    ContractStorage,
    Host,
    create_address,
)
from .state import WorldState

__all__ = [
    "DEFAULT_CHAIN_ID",
    "CallContext",
    "Contract",
    "ContractStorage",
    "Host",
    "create_address",
    "WorldState",
]
