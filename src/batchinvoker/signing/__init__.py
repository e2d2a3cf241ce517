from .signer import MessageSigner

__all__ = ["MessageSigner"]
