"""Relay configuration using pydantic-settings.

This module defines the RelaySettings class that reads configuration from
environment variables (and an optional ``.env`` file). The GitHub token,
the Jenkins credentials and the public webhook base URL must be set for
the relay to start.
"""

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.relay.jenkins.client import DEFAULT_JOB_NAME_PREFIX


WEBHOOK_RECEIVER_PATH = "/webhook/github"


class RelaySettings(BaseSettings):
    """Deploy relay configuration from environment variables.

    Required fields (must be set via environment variables):
    - github_token: GitHub API token used to create repository webhooks
    - jenkins_url: Base URL of the Jenkins server
    - jenkins_user: Jenkins username for API authentication
    - jenkins_api_token: Jenkins API token for that user
    - webhook_base_url: Public base URL where this relay is reachable
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # GitHub Configuration
    # -------------------------------------------------------------------------
    github_token: str

    # Base URL for GitHub API (supports GitHub Enterprise)
    github_base_url: str = "https://api.github.com"

    # -------------------------------------------------------------------------
    # Jenkins Configuration
    # -------------------------------------------------------------------------
    jenkins_url: str
    jenkins_user: str
    jenkins_api_token: str

    # Jobs are named "{job_name_prefix}{user_id}"
    job_name_prefix: str = DEFAULT_JOB_NAME_PREFIX

    # -------------------------------------------------------------------------
    # Relay Configuration
    # -------------------------------------------------------------------------
    # Public base URL GitHub delivers webhooks to
    webhook_base_url: str

    # Timeout applied to every outbound GitHub and Jenkins call
    http_timeout_seconds: float = 30.0

    # When false, /health reports only the number of registered repositories
    health_expose_repositories: bool = True

    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    host: str = "0.0.0.0"
    port: int = 3000

    @property
    def webhook_receiver_url(self) -> str:
        """URL registered on GitHub as the push webhook target."""
        return f"{self.webhook_base_url.rstrip('/')}{WEBHOOK_RECEIVER_PATH}"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("github_token", "jenkins_user", "jenkins_api_token")
    @classmethod
    def validate_not_empty(cls, v: str, info: ValidationInfo) -> str:
        """Validate that credentials are not empty."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty")
        return v

    @field_validator("github_base_url", "jenkins_url", "webhook_base_url")
    @classmethod
    def validate_url(cls, v: str, info: ValidationInfo) -> str:
        """Validate that URLs use http or https and drop trailing slashes."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"{info.field_name} must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("http_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate that the outbound timeout is positive."""
        if v <= 0:
            raise ValueError("http_timeout_seconds must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalise the log level name."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v


def get_settings() -> RelaySettings:
    """Create and return a RelaySettings instance.

    Returns:
        RelaySettings: Configured settings instance.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    return RelaySettings()
