"""Jenkins client for parameterized build triggers.

Builds are triggered with ``POST {jenkins_url}/job/{job}/buildWithParameters``
using HTTP basic auth. Only acceptance of the trigger is confirmed; the
relay never waits for a build to finish. Job definitions are provisioned
manually by an operator, so a missing job only produces a warning at
registration time and surfaces as a failure when a build is triggered.
"""

from typing import Any, Optional

import httpx
import structlog

from src.relay.errors import RemoteAPIError
from src.relay.jenkins.models import BuildParameters
from src.relay.metrics import RelayMetrics


logger = structlog.get_logger(__name__)

DEFAULT_JOB_NAME_PREFIX = "odoo-deploy-"


class JenkinsAPIError(RemoteAPIError):
    """Raised when a Jenkins API request fails."""


def job_name_for(user_id: str, prefix: str = DEFAULT_JOB_NAME_PREFIX) -> str:
    """Derive the deploy job name for a user.

    Args:
        user_id: User identifier the job belongs to.
        prefix: Job name prefix.

    Returns:
        str: Job name in format "{prefix}{user_id}"
    """
    return f"{prefix}{user_id}"


class JenkinsClient:
    """Async Jenkins REST client.

    Attributes:
        base_url: Jenkins server URL.
        username: Jenkins user the API token belongs to.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        api_token: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        metrics: Optional[RelayMetrics] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.username = username
        self._api_token = api_token
        self.timeout = timeout
        self.metrics = metrics
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self.username, self._api_token),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "JenkinsClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send one request, converting transport failures to JenkinsAPIError."""
        try:
            return await self.client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(
                "Jenkins request timed out",
                method=method,
                path=path,
                timeout=self.timeout,
            )
            raise JenkinsAPIError(
                message=f"Jenkins request timed out after {self.timeout}s",
                request_url=f"{self.base_url}{path}",
            ) from e
        except httpx.RequestError as e:
            logger.error(
                "Jenkins request failed",
                method=method,
                path=path,
                error=str(e),
            )
            raise JenkinsAPIError(
                message=f"Jenkins request failed: {e}",
                request_url=f"{self.base_url}{path}",
            ) from e

    def _record_trigger(self, success: bool) -> None:
        if self.metrics is not None:
            self.metrics.record_build_trigger(success)

    @staticmethod
    def _error_from(response: httpx.Response, message: str) -> JenkinsAPIError:
        return JenkinsAPIError(
            message=f"{message}: {response.status_code}",
            status_code=response.status_code,
            response_body=response.text,
            request_url=str(response.url),
        )

    async def job_exists(self, job_name: str) -> bool:
        """Check whether a job is defined on the Jenkins server.

        Returns:
            True on 200, False on 404.

        Raises:
            JenkinsAPIError: For any other status or a transport failure.
        """
        response = await self._send("GET", f"/job/{job_name}/api/json")
        if response.status_code == 404:
            return False
        if response.is_success:
            return True
        logger.error(
            "Jenkins job lookup failed",
            job=job_name,
            status_code=response.status_code,
        )
        raise self._error_from(response, "Jenkins job lookup failed")

    async def ensure_job_exists(self, job_name: str) -> bool:
        """Warn when the deploy job is missing.

        The job is never created here; it has to be provisioned manually.

        Returns:
            True if the job exists.
        """
        if await self.job_exists(job_name):
            logger.info("Jenkins job already exists", job=job_name)
            return True

        logger.warning(
            "Jenkins job not found - it must be created manually",
            job=job_name,
        )
        return False

    async def trigger_build(
        self,
        job_name: str,
        parameters: BuildParameters,
    ) -> Optional[str]:
        """Trigger a parameterized build.

        Args:
            job_name: Name of the job to build.
            parameters: Build parameters, sent as query parameters.

        Returns:
            The queue item URL from the Location header, if Jenkins sent one.

        Raises:
            JenkinsAPIError: On a non-2xx response or a transport failure.
        """
        path = f"/job/{job_name}/buildWithParameters"

        logger.info(
            "Triggering Jenkins build",
            job=job_name,
            repository=f"{parameters.repo_owner}/{parameters.repo_name}",
            branch=parameters.branch,
            commit_sha=parameters.commit_sha,
        )

        try:
            response = await self._send(
                "POST",
                path,
                params=parameters.as_query(),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except JenkinsAPIError:
            self._record_trigger(success=False)
            raise

        self._record_trigger(success=response.is_success)
        if not response.is_success:
            logger.error(
                "Jenkins build trigger rejected",
                job=job_name,
                status_code=response.status_code,
                response_body=response.text[:500],
            )
            raise self._error_from(response, "Jenkins build trigger failed")

        queue_url = response.headers.get("location")
        logger.info(
            "Jenkins build triggered",
            job=job_name,
            status_code=response.status_code,
            queue_url=queue_url,
        )
        return queue_url
