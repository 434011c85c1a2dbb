"""GitHub API client for creating repository push webhooks."""

from src.relay.github.client import GitHubAPIError, GitHubClient
from src.relay.github.models import CreatedWebhook

__all__ = [
    "CreatedWebhook",
    "GitHubAPIError",
    "GitHubClient",
]
