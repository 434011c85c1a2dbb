"""Pytest configuration for all tests."""

import json
from typing import Any, Callable, Dict, Optional
from unittest.mock import AsyncMock

import pytest

from src.relay.config import RelaySettings
from src.relay.github.client import GitHubClient
from src.relay.github.models import CreatedWebhook
from src.relay.jenkins.client import JenkinsClient
from src.relay.store.secret_store import InMemorySecretStore


def _push_payload(
    owner: str = "acme",
    name: str = "widget",
    ref: str = "refs/heads/main",
    after: Optional[str] = "6113728f27ae82c7b1a177c8d03f9e96e0adf246",
) -> Dict[str, Any]:
    return {
        "ref": ref,
        "before": "0000000000000000000000000000000000000000",
        "after": after,
        "repository": {
            "id": 1296269,
            "name": name,
            "full_name": f"{owner}/{name}",
            "owner": {"login": owner, "name": owner},
        },
        "pusher": {"name": owner},
    }


@pytest.fixture
def make_push_payload() -> Callable[..., Dict[str, Any]]:
    """Factory for GitHub push payloads (defaults to acme/widget on main)."""
    return _push_payload


@pytest.fixture
def encode_payload() -> Callable[[Dict[str, Any]], bytes]:
    """Serialize a payload the way GitHub sends it: UTF-8 JSON bytes."""
    return lambda payload: json.dumps(payload).encode("utf-8")


@pytest.fixture
def relay_settings() -> RelaySettings:
    return RelaySettings(
        github_token="ghp_test_token",
        jenkins_url="https://jenkins.example.com",
        jenkins_user="deployer",
        jenkins_api_token="jenkins-token",
        webhook_base_url="https://relay.example.com",
    )


@pytest.fixture
def secret_store() -> InMemorySecretStore:
    return InMemorySecretStore()


@pytest.fixture
def github_client() -> AsyncMock:
    client = AsyncMock(spec=GitHubClient)
    client.create_webhook.return_value = CreatedWebhook(
        webhook_id=12345678,
        url="https://relay.example.com/webhook/github",
    )
    return client


@pytest.fixture
def jenkins_client() -> AsyncMock:
    client = AsyncMock(spec=JenkinsClient)
    client.ensure_job_exists.return_value = True
    client.trigger_build.return_value = "https://jenkins.example.com/queue/item/7/"
    return client
