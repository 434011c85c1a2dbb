"""FastAPI application entry point for the deploy relay.

Endpoints:
- POST /add-repo: register a repository (create webhook, store secret,
  trigger the initial build)
- POST /webhook/github: verify a GitHub push delivery and trigger a build
- GET /health: liveness probe listing registered repositories
- GET /metrics: Prometheus metrics

Components are created during lifespan startup, stored on ``app.state`` and
handed to endpoints through FastAPI dependencies.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog
from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST
from pydantic import ValidationError

from .config import RelaySettings, WEBHOOK_RECEIVER_PATH, get_settings
from .errors import (
    InvalidSignatureError,
    MalformedPayloadError,
    RemoteAPIError,
    RepositoryNotRegisteredError,
)
from .github.client import GitHubClient
from .jenkins.client import JenkinsClient
from .logging_config import configure_logging, redact_secret
from .metrics import RelayMetrics
from .receiver import PushReceiver
from .registrar import Registrar
from .store.secret_store import InMemorySecretStore, SecretStore
from .webhook.models import (
    REQUIRED_REGISTRATION_FIELDS,
    DeliveryOutcome,
    RepositoryRegistration,
)

logger = structlog.get_logger(__name__)

MISSING_FIELDS_MESSAGE = (
    "Missing required fields: " + ", ".join(REQUIRED_REGISTRATION_FIELDS)
)


def _log_configuration(settings: RelaySettings) -> None:
    """Log configuration values with secrets redacted."""
    logger.info(
        "Relay configuration",
        github_base_url=settings.github_base_url,
        github_token=redact_secret(settings.github_token),
        jenkins_url=settings.jenkins_url,
        jenkins_user=settings.jenkins_user,
        jenkins_api_token=redact_secret(settings.jenkins_api_token),
        webhook_receiver_url=settings.webhook_receiver_url,
        job_name_prefix=settings.job_name_prefix,
        http_timeout_seconds=settings.http_timeout_seconds,
        health_expose_repositories=settings.health_expose_repositories,
        host=settings.host,
        port=settings.port,
    )


def build_components(
    app: FastAPI,
    settings: RelaySettings,
    secret_store: Optional[SecretStore] = None,
) -> None:
    """Create the relay components and attach them to ``app.state``."""
    metrics = RelayMetrics()
    store = secret_store if secret_store is not None else InMemorySecretStore()

    github_client = GitHubClient(
        token=settings.github_token,
        base_url=settings.github_base_url,
        timeout=settings.http_timeout_seconds,
    )
    jenkins_client = JenkinsClient(
        base_url=settings.jenkins_url,
        username=settings.jenkins_user,
        api_token=settings.jenkins_api_token,
        timeout=settings.http_timeout_seconds,
        metrics=metrics,
    )

    app.state.settings = settings
    app.state.metrics = metrics
    app.state.secret_store = store
    app.state.github_client = github_client
    app.state.jenkins_client = jenkins_client
    app.state.registrar = Registrar(
        github_client=github_client,
        jenkins_client=jenkins_client,
        secret_store=store,
        webhook_url=settings.webhook_receiver_url,
        job_name_prefix=settings.job_name_prefix,
    )
    app.state.receiver = PushReceiver(
        secret_store=store,
        jenkins_client=jenkins_client,
        job_name_prefix=settings.job_name_prefix,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load configuration, wire components and close clients on shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("Deploy relay starting up")
    _log_configuration(settings)
    build_components(app, settings)
    logger.info(
        "Deploy relay started",
        port=settings.port,
        webhook_url=settings.webhook_receiver_url,
    )

    yield

    logger.info("Deploy relay shutting down")
    await app.state.github_client.close()
    await app.state.jenkins_client.close()
    logger.info("Deploy relay shutdown complete")


app = FastAPI(
    title="Deploy Relay",
    description="Relays verified GitHub push webhooks to Jenkins deploy builds",
    version="1.0.0",
    lifespan=lifespan,
)


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------
def get_relay_settings(request: Request) -> RelaySettings:
    return request.app.state.settings


def get_secret_store(request: Request) -> SecretStore:
    return request.app.state.secret_store


def get_registrar(request: Request) -> Registrar:
    return request.app.state.registrar


def get_receiver(request: Request) -> PushReceiver:
    return request.app.state.receiver


def get_metrics(request: Request) -> RelayMetrics:
    return request.app.state.metrics


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------
@app.post("/add-repo")
async def add_repo(
    request: Request,
    registrar: Registrar = Depends(get_registrar),
    metrics: RelayMetrics = Depends(get_metrics),
):
    """Register a repository for push-triggered deployment.

    Body: ``{"repo_owner", "repo_name", "branch", "user_id"}``, all required.

    Returns:
        200 with the created webhook and job on success, 400 when a field is
        missing, the remote status for GitHub/Jenkins errors, 500 otherwise.
    """
    try:
        body = await request.json()
        registration = RepositoryRegistration.model_validate(body)
    except (ValueError, ValidationError):
        metrics.record_registration("client_error")
        logger.warning("Rejected registration with missing fields")
        return JSONResponse(status_code=400, content={"error": MISSING_FIELDS_MESSAGE})

    try:
        result = await registrar.register(registration)
    except RemoteAPIError as e:
        logger.error(
            "Repository registration failed",
            repository=registration.full_repository,
            error=e.message,
            status_code=e.status_code,
        )
        if e.status_code is not None:
            metrics.record_registration("remote_error")
            return JSONResponse(
                status_code=e.status_code,
                content={"error": e.message, "details": e.response_body},
            )
        metrics.record_registration("error")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": e.message},
        )
    except Exception as e:
        logger.exception(
            "Unexpected error registering repository",
            repository=registration.full_repository,
        )
        metrics.record_registration("error")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": str(e)},
        )

    metrics.record_registration("success")
    return {
        "success": True,
        "message": "Repository added successfully",
        "data": result.model_dump(),
    }


@app.post(WEBHOOK_RECEIVER_PATH, response_class=PlainTextResponse)
async def github_webhook(
    request: Request,
    x_github_event: Optional[str] = Header(default=None),
    x_hub_signature_256: Optional[str] = Header(default=None),
    receiver: PushReceiver = Depends(get_receiver),
    metrics: RelayMetrics = Depends(get_metrics),
):
    """GitHub webhook receiver endpoint.

    Returns:
        Plain text: 200 when processed or ignored, 404 for an unregistered
        repository, 401 for a bad signature, 500 for any other failure.
    """
    body = await request.body()

    try:
        outcome = await receiver.receive(x_github_event, x_hub_signature_256, body)
    except RepositoryNotRegisteredError:
        metrics.record_delivery("not_registered")
        return PlainTextResponse("Repository not registered", status_code=404)
    except InvalidSignatureError:
        metrics.record_delivery("invalid_signature")
        return PlainTextResponse("Invalid signature", status_code=401)
    except (MalformedPayloadError, RemoteAPIError) as e:
        logger.error("Webhook error", error=str(e))
        metrics.record_delivery("error")
        return PlainTextResponse("Internal error", status_code=500)
    except Exception:
        logger.exception("Unexpected webhook error")
        metrics.record_delivery("error")
        return PlainTextResponse("Internal error", status_code=500)

    metrics.record_delivery(outcome.value)
    if outcome is DeliveryOutcome.IGNORED:
        return PlainTextResponse("Event ignored", status_code=200)

    logger.info("Webhook processed")
    return PlainTextResponse("Webhook processed", status_code=200)


@app.get("/health")
async def health(
    settings: RelaySettings = Depends(get_relay_settings),
    secret_store: SecretStore = Depends(get_secret_store),
) -> Dict[str, Any]:
    """Liveness probe endpoint.

    Lists the registered repositories unless
    ``health_expose_repositories`` is disabled, in which case only their
    count is reported.
    """
    repositories = await secret_store.keys()
    response: Dict[str, Any] = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if settings.health_expose_repositories:
        response["registered_repos"] = repositories
    else:
        response["registered_repos_count"] = len(repositories)
    return response


@app.get("/metrics")
async def metrics_endpoint(metrics: RelayMetrics = Depends(get_metrics)) -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=metrics.export(), media_type=CONTENT_TYPE_LATEST)


if __name__ == "__main__":
    import uvicorn

    dev_settings = get_settings()
    uvicorn.run(
        "src.relay.main:app",
        host=dev_settings.host,
        port=dev_settings.port,
    )
