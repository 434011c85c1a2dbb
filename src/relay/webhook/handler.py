"""GitHub push webhook parsing.

GitHub Webhook Payload Structure (push event, relevant fields):
{
  "ref": "refs/heads/main",
  "after": "6113728f27ae82c7b1a177c8d03f9e96e0adf246",
  "repository": {
    "name": "widget",
    "full_name": "acme/widget",
    "owner": {"login": "acme", "name": "acme"}
  }
}
"""

from typing import Any, Dict, Optional, Tuple

import structlog

from src.relay.webhook.models import PushEvent


logger = structlog.get_logger(__name__)


class WebhookHandler:
    """Parser for GitHub push webhook payloads."""

    def parse_push_event(self, payload: Dict[str, Any]) -> Optional[PushEvent]:
        """Parse a push event from a webhook payload.

        The repository owner and name are taken from
        ``repository.full_name``; when that is absent they fall back to
        ``repository.owner.login`` (or ``owner.name``) and
        ``repository.name``.

        Args:
            payload: The decoded webhook payload.

        Returns:
            PushEvent if parsing succeeds, None for malformed payloads.
        """
        if not isinstance(payload, dict):
            logger.warning("Invalid payload: expected dict", payload_type=type(payload).__name__)
            return None

        repo_data = payload.get("repository")
        if not isinstance(repo_data, dict):
            logger.warning("Missing or invalid 'repository' field in payload")
            return None

        owner, name = self._split_full_name(repo_data)
        if owner is None or name is None:
            logger.warning(
                "Could not determine repository owner and name",
                full_name=repo_data.get("full_name"),
            )
            return None

        ref = payload.get("ref")
        if not isinstance(ref, str) or not ref.strip():
            logger.warning("Missing or invalid 'ref' field in payload", ref=ref)
            return None

        commit_sha = payload.get("after")
        if commit_sha is not None and not isinstance(commit_sha, str):
            logger.warning("Invalid 'after' field in payload", after=commit_sha)
            commit_sha = None

        event = PushEvent(owner=owner, name=name, ref=ref, commit_sha=commit_sha)
        if not event.branch:
            logger.warning("Push ref names no branch", ref=ref)
            return None

        logger.info(
            "Parsed push event",
            repository=event.repository_full_name,
            branch=event.branch,
            commit_sha=commit_sha,
        )
        return event

    def _split_full_name(
        self, repo_data: Dict[str, Any]
    ) -> Tuple[Optional[str], Optional[str]]:
        full_name = repo_data.get("full_name")
        if isinstance(full_name, str) and full_name.count("/") == 1:
            owner, name = full_name.split("/")
            if owner and name:
                return owner, name

        name = repo_data.get("name")
        owner_data = repo_data.get("owner")
        owner = None
        if isinstance(owner_data, dict):
            owner = owner_data.get("login") or owner_data.get("name")

        if not isinstance(owner, str) or not owner.strip():
            return None, None
        if not isinstance(name, str) or not name.strip():
            return None, None
        return owner.strip(), name.strip()
