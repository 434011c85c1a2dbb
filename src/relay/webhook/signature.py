"""HMAC-SHA256 signatures for GitHub webhook deliveries.

GitHub signs each delivery with the webhook secret and sends the result in
the X-Hub-Signature-256 header as ``sha256=<hex digest>``. The digest is
computed over the raw request body, so verification must use the exact
bytes received rather than a re-serialized payload.
"""

import hashlib
import hmac
from typing import Optional


SIGNATURE_PREFIX = "sha256="


def compute_signature(secret: str, body: bytes) -> str:
    """Compute the X-Hub-Signature-256 value for a body.

    Args:
        secret: The shared webhook secret.
        body: The raw request body bytes.

    Returns:
        str: "sha256=" followed by the lowercase hex HMAC-SHA256 digest.
    """
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return SIGNATURE_PREFIX + digest


def verify_signature(secret: str, body: bytes, signature: Optional[str]) -> bool:
    """Check a delivery signature against the expected value.

    A missing signature never verifies.
    """
    if not signature:
        return False
    expected = compute_signature(secret, body)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
