"""GitHub webhook handling for the deploy relay.

This module parses GitHub push deliveries and verifies their
X-Hub-Signature-256 HMAC against the per-repository secret stored at
registration time.
"""

from .handler import WebhookHandler
from .models import (
    DeliveryOutcome,
    PushEvent,
    RegistrationResult,
    RepositoryRegistration,
)
from .signature import compute_signature, verify_signature

__all__ = [
    "DeliveryOutcome",
    "PushEvent",
    "RegistrationResult",
    "RepositoryRegistration",
    "WebhookHandler",
    "compute_signature",
    "verify_signature",
]
