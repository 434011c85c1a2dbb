"""GitHub push delivery handling.

A push delivery is only turned into a Jenkins build when its repository has
a stored secret and the X-Hub-Signature-256 header matches the HMAC of the
raw body under that secret. Non-push events are acknowledged without
touching the store or checking a signature.

Push-triggered builds use the repository owner login as USER_ID (and so
as the job name suffix): deliveries do not carry the user id supplied at
registration.
"""

import json
from typing import Optional

import structlog

from src.relay.errors import (
    InvalidSignatureError,
    MalformedPayloadError,
    RepositoryNotRegisteredError,
)
from src.relay.jenkins.client import (
    DEFAULT_JOB_NAME_PREFIX,
    JenkinsClient,
    job_name_for,
)
from src.relay.jenkins.models import BuildParameters
from src.relay.store.secret_store import SecretStore
from src.relay.webhook.handler import WebhookHandler
from src.relay.webhook.models import DeliveryOutcome
from src.relay.webhook.signature import verify_signature


logger = structlog.get_logger(__name__)

PUSH_EVENT = "push"


class PushReceiver:
    """Verifies push deliveries and triggers deploy builds."""

    def __init__(
        self,
        secret_store: SecretStore,
        jenkins_client: JenkinsClient,
        webhook_handler: Optional[WebhookHandler] = None,
        job_name_prefix: str = DEFAULT_JOB_NAME_PREFIX,
    ):
        self.secret_store = secret_store
        self.jenkins_client = jenkins_client
        self.webhook_handler = webhook_handler or WebhookHandler()
        self.job_name_prefix = job_name_prefix

    async def receive(
        self,
        event_type: Optional[str],
        signature: Optional[str],
        body: bytes,
    ) -> DeliveryOutcome:
        """Handle one webhook delivery.

        Args:
            event_type: Value of the X-GitHub-Event header.
            signature: Value of the X-Hub-Signature-256 header.
            body: The raw request body, exactly as received.

        Returns:
            DeliveryOutcome.IGNORED for non-push events,
            DeliveryOutcome.PROCESSED once a build was triggered.

        Raises:
            MalformedPayloadError: If the body is not a push payload.
            RepositoryNotRegisteredError: If no secret is stored for the
                repository.
            InvalidSignatureError: If the signature does not match.
            JenkinsAPIError: If the build trigger fails.
        """
        logger.info("Received GitHub webhook", github_event=event_type)

        if event_type != PUSH_EVENT:
            return DeliveryOutcome.IGNORED

        try:
            payload = json.loads(body)
        except ValueError as e:
            logger.error("Webhook body is not valid JSON", error=str(e))
            raise MalformedPayloadError("Webhook body is not valid JSON") from e

        event = self.webhook_handler.parse_push_event(payload)
        if event is None:
            raise MalformedPayloadError("Webhook body is not a push event")

        repository = event.repository_full_name
        logger.info("Push detected", repository=repository, branch=event.branch)

        secret = await self.secret_store.get(repository)
        if secret is None:
            logger.warning("No webhook secret found for repository", repository=repository)
            raise RepositoryNotRegisteredError(repository)

        if not verify_signature(secret, body, signature):
            logger.error("Invalid webhook signature", repository=repository)
            raise InvalidSignatureError(repository)

        logger.info("Signature verified", repository=repository)

        user_id = event.owner
        job_name = job_name_for(user_id, self.job_name_prefix)
        await self.jenkins_client.trigger_build(
            job_name,
            BuildParameters(
                repo_owner=event.owner,
                repo_name=event.name,
                branch=event.branch,
                user_id=user_id,
                commit_sha=event.commit_sha,
            ),
        )

        return DeliveryOutcome.PROCESSED
