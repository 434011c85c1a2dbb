"""Jenkins client for triggering deploy builds."""

from src.relay.jenkins.client import (
    DEFAULT_JOB_NAME_PREFIX,
    JenkinsAPIError,
    JenkinsClient,
    job_name_for,
)
from src.relay.jenkins.models import BuildParameters

__all__ = [
    "BuildParameters",
    "DEFAULT_JOB_NAME_PREFIX",
    "JenkinsAPIError",
    "JenkinsClient",
    "job_name_for",
]
