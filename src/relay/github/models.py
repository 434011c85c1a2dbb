"""GitHub API response models."""

from typing import Any, Dict

from pydantic import BaseModel, Field


class CreatedWebhook(BaseModel):
    """A repository webhook as returned by the GitHub hooks API.

    Attributes:
        webhook_id: The numeric id GitHub assigned to the webhook.
        url: The delivery URL configured on the webhook.
    """

    webhook_id: int = Field(..., description="GitHub webhook id")
    url: str = Field(..., description="Configured delivery URL")

    @classmethod
    def from_github_response(cls, data: Dict[str, Any]) -> "CreatedWebhook":
        """Build from the JSON body of POST /repos/{owner}/{repo}/hooks.

        Raises:
            pydantic.ValidationError: If the id or config url is missing.
        """
        config = data.get("config") or {}
        return cls(webhook_id=data.get("id"), url=config.get("url"))
