"""GitHub API client for repository webhook management.

This module provides an async wrapper around the GitHub REST API used by
the registrar to create push webhooks. Every request carries an explicit
timeout. Requests are not retried: a failure is reported to the caller
with the remote status code and error body when GitHub returned one.
"""

from typing import Any, Dict, Optional, Sequence

import httpx
import structlog

from src.relay.errors import RemoteAPIError
from src.relay.github.models import CreatedWebhook


logger = structlog.get_logger(__name__)


class GitHubAPIError(RemoteAPIError):
    """Raised when a GitHub API request fails."""


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class GitHubClient:
    """Async GitHub API client.

    Attributes:
        token: GitHub API token (PAT or GitHub App token).
        base_url: Base URL for GitHub API (default: https://api.github.com).
        timeout: Request timeout in seconds.

    Example:
        >>> client = GitHubClient(token="ghp_xxx")
        >>> async with client:
        ...     await client.create_webhook("acme", "widget", url, secret)
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the GitHub client.

        Args:
            token: GitHub API token for authentication.
            base_url: Base URL for GitHub API. Use this to support
                      GitHub Enterprise Server endpoints.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._default_headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "DeployRelay/1.0",
        }

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Make a single HTTP request to the GitHub API.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE).
            path: API path (e.g., /repos/owner/repo/hooks).
            json_data: Optional JSON body for the request.

        Returns:
            The HTTP response from GitHub.

        Raises:
            GitHubAPIError: On a non-2xx response, a timeout or a
                transport error.
        """
        try:
            response = await self.client.request(
                method=method,
                url=path,
                json=json_data,
            )
        except httpx.TimeoutException as e:
            logger.error(
                "GitHub API request timed out",
                method=method,
                path=path,
                timeout=self.timeout,
            )
            raise GitHubAPIError(
                message=f"GitHub API request timed out after {self.timeout}s",
                request_url=f"{self.base_url}{path}",
            ) from e
        except httpx.RequestError as e:
            logger.error(
                "GitHub API request failed",
                method=method,
                path=path,
                error=str(e),
            )
            raise GitHubAPIError(
                message=f"GitHub API request failed: {e}",
                request_url=f"{self.base_url}{path}",
            ) from e

        if response.status_code >= 400:
            body = _response_body(response)
            logger.error(
                "GitHub API error",
                status_code=response.status_code,
                method=method,
                path=path,
                response_body=response.text[:500],
            )
            raise GitHubAPIError(
                message=f"GitHub API error: {response.status_code}",
                status_code=response.status_code,
                response_body=body,
                request_url=str(response.url),
            )

        return response

    async def create_webhook(
        self,
        owner: str,
        repo: str,
        url: str,
        secret: str,
        events: Sequence[str] = ("push",),
    ) -> CreatedWebhook:
        """Create an active repository webhook.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            url: Delivery URL GitHub will POST events to.
            secret: Shared secret GitHub signs deliveries with.
            events: Event types the webhook subscribes to.

        Returns:
            CreatedWebhook with the webhook id and delivery URL.

        Raises:
            GitHubAPIError: If the request fails.
        """
        path = f"/repos/{owner}/{repo}/hooks"

        logger.info(
            "Creating repository webhook",
            owner=owner,
            repo=repo,
            url=url,
            events=list(events),
        )

        response = await self._request(
            method="POST",
            path=path,
            json_data={
                "name": "web",
                "config": {
                    "url": url,
                    "content_type": "json",
                    "secret": secret,
                    "insecure_ssl": "0",
                },
                "events": list(events),
                "active": True,
            },
        )

        result = CreatedWebhook.from_github_response(response.json())

        logger.info(
            "Repository webhook created",
            owner=owner,
            repo=repo,
            webhook_id=result.webhook_id,
        )

        return result
