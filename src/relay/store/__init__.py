"""Webhook secret storage.

Secrets live only for the lifetime of the process; see secret_store.py.
"""

from src.relay.store.secret_store import (
    InMemorySecretStore,
    SecretStore,
    generate_secret,
    repository_key,
)

__all__ = [
    "InMemorySecretStore",
    "SecretStore",
    "generate_secret",
    "repository_key",
]
