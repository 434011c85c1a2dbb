"""Webhook secret storage.

Maps a repository full name ("owner/name") to the shared secret used to
sign its GitHub webhook deliveries. The SecretStore protocol is what the
registrar and the receiver depend on; InMemorySecretStore is the
process-lifetime implementation wired at startup. A restart loses every
secret, after which previously created webhooks can no longer be verified.
"""

import asyncio
import secrets
from typing import Dict, List, Optional, Protocol, runtime_checkable

import structlog


logger = structlog.get_logger(__name__)

SECRET_NUM_BYTES = 32


def generate_secret() -> str:
    """Generate a fresh webhook secret.

    Returns:
        str: 32 cryptographically random bytes as lowercase hex.
    """
    return secrets.token_hex(SECRET_NUM_BYTES)


def repository_key(owner: str, name: str) -> str:
    """Build the store key for a repository.

    Returns:
        str: Repository full name in format "{owner}/{name}"
    """
    return f"{owner}/{name}"


@runtime_checkable
class SecretStore(Protocol):
    """Key-value store of webhook secrets keyed by repository full name."""

    async def get(self, key: str) -> Optional[str]:
        """Return the secret stored under key, or None."""
        ...

    async def put(self, key: str, secret: str) -> None:
        """Store secret under key, replacing any previous value."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove key. Returns True if an entry was removed."""
        ...

    async def keys(self) -> List[str]:
        """Return the registered repository full names."""
        ...


class InMemorySecretStore:
    """SecretStore backed by a dict guarded by an asyncio lock.

    Registration and webhook delivery can hit the same key concurrently,
    so every access goes through the lock.
    """

    def __init__(self) -> None:
        self._secrets: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            return self._secrets.get(key)

    async def put(self, key: str, secret: str) -> None:
        async with self._lock:
            replaced = key in self._secrets
            self._secrets[key] = secret
        logger.debug("Stored webhook secret", repository=key, replaced=replaced)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            removed = self._secrets.pop(key, None) is not None
        logger.debug("Deleted webhook secret", repository=key, removed=removed)
        return removed

    async def keys(self) -> List[str]:
        async with self._lock:
            return list(self._secrets)

    def __len__(self) -> int:
        return len(self._secrets)
