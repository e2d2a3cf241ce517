from .mock import CAUSE_REVERT, INCREMENT, MockContract

__all__ = ["MockContract", "INCREMENT", "CAUSE_REVERT"]
