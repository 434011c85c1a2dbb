"""Repository registration.

Registering a repository creates a GitHub push webhook signed with a fresh
secret, stores that secret, checks that the user's Jenkins job exists and
triggers an initial build.

Steps are not rolled back: if the job check or the initial build fails
after the webhook was created, the webhook stays on GitHub and its secret
stays in the store. Registering the same repository again replaces the
stored secret, so deliveries signed with the old secret stop verifying.
"""

import structlog

from src.relay.github.client import GitHubClient
from src.relay.jenkins.client import (
    DEFAULT_JOB_NAME_PREFIX,
    JenkinsClient,
    job_name_for,
)
from src.relay.jenkins.models import BuildParameters
from src.relay.store.secret_store import (
    SecretStore,
    generate_secret,
    repository_key,
)
from src.relay.webhook.models import RegistrationResult, RepositoryRegistration


logger = structlog.get_logger(__name__)


class Registrar:
    """Registers repositories for push-triggered deployment.

    Attributes:
        github_client: Client used to create the repository webhook.
        jenkins_client: Client used to check the job and trigger builds.
        secret_store: Store receiving the generated webhook secret.
        webhook_url: Public URL of this relay's webhook receiver.
        job_name_prefix: Prefix of the per-user Jenkins job name.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        jenkins_client: JenkinsClient,
        secret_store: SecretStore,
        webhook_url: str,
        job_name_prefix: str = DEFAULT_JOB_NAME_PREFIX,
    ):
        self.github_client = github_client
        self.jenkins_client = jenkins_client
        self.secret_store = secret_store
        self.webhook_url = webhook_url
        self.job_name_prefix = job_name_prefix

    async def register(self, registration: RepositoryRegistration) -> RegistrationResult:
        """Register a repository and trigger its first build.

        Args:
            registration: Owner, name, branch and user id of the repository.

        Returns:
            RegistrationResult describing the created webhook and job.

        Raises:
            GitHubAPIError: If the webhook cannot be created. Nothing is
                stored in that case.
            JenkinsAPIError: If the job lookup or the initial build
                trigger fails. The webhook and secret are kept.
        """
        repository = registration.full_repository
        log = logger.bind(repository=repository, user_id=registration.user_id)
        log.info("Processing repository registration", branch=registration.branch)

        secret = generate_secret()

        webhook = await self.github_client.create_webhook(
            owner=registration.repo_owner,
            repo=registration.repo_name,
            url=self.webhook_url,
            secret=secret,
            events=("push",),
        )
        log.info("Webhook created", webhook_id=webhook.webhook_id)

        await self.secret_store.put(
            repository_key(registration.repo_owner, registration.repo_name),
            secret,
        )

        job_name = job_name_for(registration.user_id, self.job_name_prefix)
        await self.jenkins_client.ensure_job_exists(job_name)

        log.info("Triggering initial Jenkins build", job=job_name)
        await self.jenkins_client.trigger_build(
            job_name,
            BuildParameters(
                repo_owner=registration.repo_owner,
                repo_name=registration.repo_name,
                branch=registration.branch,
                user_id=registration.user_id,
            ),
        )

        log.info("Repository registered", webhook_id=webhook.webhook_id, job=job_name)

        return RegistrationResult(
            webhook_id=webhook.webhook_id,
            webhook_url=webhook.url,
            jenkins_job=job_name,
            repository=repository,
            branch=registration.branch,
        )
