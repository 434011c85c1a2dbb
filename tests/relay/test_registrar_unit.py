"""Unit tests for repository registration."""

import asyncio

import pytest

from src.relay.github import GitHubAPIError
from src.relay.jenkins import BuildParameters, JenkinsAPIError
from src.relay.registrar import Registrar
from src.relay.webhook import RegistrationResult, RepositoryRegistration


WEBHOOK_URL = "https://relay.example.com/webhook/github"


def run_async(coro):
    return asyncio.run(coro)


def _registration(**overrides) -> RepositoryRegistration:
    fields = {
        "repo_owner": "acme",
        "repo_name": "widget",
        "branch": "main",
        "user_id": "u123",
    }
    fields.update(overrides)
    return RepositoryRegistration(**fields)


@pytest.fixture
def registrar(github_client, jenkins_client, secret_store) -> Registrar:
    return Registrar(
        github_client=github_client,
        jenkins_client=jenkins_client,
        secret_store=secret_store,
        webhook_url=WEBHOOK_URL,
    )


class TestRegister:
    def test_returns_registration_result(self, registrar):
        result = run_async(registrar.register(_registration()))

        assert result == RegistrationResult(
            webhook_id=12345678,
            webhook_url=WEBHOOK_URL,
            jenkins_job="odoo-deploy-u123",
            repository="acme/widget",
            branch="main",
        )

    def test_creates_push_webhook_with_stored_secret(
        self, registrar, github_client, secret_store
    ):
        run_async(registrar.register(_registration()))

        kwargs = github_client.create_webhook.call_args.kwargs
        assert kwargs["owner"] == "acme"
        assert kwargs["repo"] == "widget"
        assert kwargs["url"] == WEBHOOK_URL
        assert tuple(kwargs["events"]) == ("push",)
        assert len(kwargs["secret"]) == 64
        assert run_async(secret_store.get("acme/widget")) == kwargs["secret"]

    def test_checks_job_and_triggers_initial_build(self, registrar, jenkins_client):
        run_async(registrar.register(_registration()))

        jenkins_client.ensure_job_exists.assert_awaited_once_with("odoo-deploy-u123")
        jenkins_client.trigger_build.assert_awaited_once_with(
            "odoo-deploy-u123",
            BuildParameters(
                repo_owner="acme",
                repo_name="widget",
                branch="main",
                user_id="u123",
            ),
        )

    def test_missing_job_does_not_block_registration(self, registrar, jenkins_client):
        jenkins_client.ensure_job_exists.return_value = False

        result = run_async(registrar.register(_registration()))

        assert result.jenkins_job == "odoo-deploy-u123"
        jenkins_client.trigger_build.assert_awaited_once()

    def test_reregistration_replaces_secret(
        self, registrar, github_client, secret_store
    ):
        run_async(registrar.register(_registration()))
        first = github_client.create_webhook.call_args.kwargs["secret"]
        run_async(registrar.register(_registration(branch="develop")))
        second = github_client.create_webhook.call_args.kwargs["secret"]

        assert first != second
        assert run_async(secret_store.get("acme/widget")) == second
        assert run_async(secret_store.keys()) == ["acme/widget"]

    def test_custom_job_prefix(self, github_client, jenkins_client, secret_store):
        registrar = Registrar(
            github_client=github_client,
            jenkins_client=jenkins_client,
            secret_store=secret_store,
            webhook_url=WEBHOOK_URL,
            job_name_prefix="deploy-",
        )

        result = run_async(registrar.register(_registration()))

        assert result.jenkins_job == "deploy-u123"


class TestRegisterFailures:
    def test_webhook_failure_stores_nothing(
        self, registrar, github_client, jenkins_client, secret_store
    ):
        github_client.create_webhook.side_effect = GitHubAPIError(
            "GitHub API error: 404", status_code=404, response_body={"message": "Not Found"}
        )

        with pytest.raises(GitHubAPIError):
            run_async(registrar.register(_registration()))

        assert run_async(secret_store.keys()) == []
        jenkins_client.trigger_build.assert_not_awaited()

    def test_build_failure_keeps_webhook_secret(
        self, registrar, jenkins_client, secret_store
    ):
        jenkins_client.trigger_build.side_effect = JenkinsAPIError(
            "Jenkins build trigger failed: 404", status_code=404
        )

        with pytest.raises(JenkinsAPIError):
            run_async(registrar.register(_registration()))

        assert run_async(secret_store.get("acme/widget")) is not None

    def test_job_lookup_failure_propagates(self, registrar, jenkins_client):
        jenkins_client.ensure_job_exists.side_effect = JenkinsAPIError(
            "Jenkins job lookup failed: 401", status_code=401
        )

        with pytest.raises(JenkinsAPIError):
            run_async(registrar.register(_registration()))

        jenkins_client.trigger_build.assert_not_awaited()
