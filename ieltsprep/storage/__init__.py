"""Local persistence for the practice client."""

from .credential_store import CredentialStore

__all__ = [
    "CredentialStore",
]
