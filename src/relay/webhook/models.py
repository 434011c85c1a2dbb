"""Request and event models for the relay.

RepositoryRegistration is the body of POST /add-repo. PushEvent is the
subset of a GitHub push delivery the receiver needs to trigger a build.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


BRANCH_REF_PREFIX = "refs/heads/"

REQUIRED_REGISTRATION_FIELDS = ("repo_owner", "repo_name", "branch", "user_id")


class DeliveryOutcome(str, Enum):
    """Result of handling a webhook delivery.

    Attributes:
        IGNORED: The event was not a push; nothing was done.
        PROCESSED: The signature matched and a build was triggered.
    """

    IGNORED = "ignored"
    PROCESSED = "processed"


class RepositoryRegistration(BaseModel):
    """A repository to register for deployment.

    Attributes:
        repo_owner: The repository owner (user or organization).
        repo_name: The repository name without owner prefix.
        branch: Branch deployed by the initial build.
        user_id: User identifier; names the Jenkins job.
    """

    repo_owner: str = Field(..., min_length=1)
    repo_name: str = Field(..., min_length=1)
    branch: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)

    @field_validator("repo_owner", "repo_name", "branch", "user_id")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject whitespace-only values."""
        if not v.strip():
            raise ValueError("value cannot be blank")
        return v

    @property
    def full_repository(self) -> str:
        """Repository path in format "{owner}/{name}"."""
        return f"{self.repo_owner}/{self.repo_name}"


class RegistrationResult(BaseModel):
    """Data returned for a successful registration."""

    webhook_id: int
    webhook_url: str
    jenkins_job: str
    repository: str
    branch: str


class PushEvent(BaseModel):
    """Parsed GitHub push webhook event.

    Attributes:
        owner: The repository owner login.
        name: The repository name.
        ref: The full git ref that was pushed (e.g. refs/heads/main).
        commit_sha: The head commit after the push.
    """

    owner: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    ref: str = Field(..., min_length=1)
    commit_sha: Optional[str] = None

    @property
    def repository_full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def branch(self) -> str:
        """The pushed branch, with the refs/heads/ namespace removed."""
        if self.ref.startswith(BRANCH_REF_PREFIX):
            return self.ref[len(BRANCH_REF_PREFIX):]
        return self.ref
