"""Exception hierarchy shared by the relay components."""

from typing import Any, Optional


class RelayError(Exception):
    """Base class for errors raised by the relay."""


class RemoteAPIError(RelayError):
    """Raised when a call to GitHub or Jenkins fails.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code from the remote, or None when the
            request never produced a response (timeout, connection error).
        response_body: Parsed JSON body, or raw text, returned by the remote.
        request_url: The URL that was requested.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Any = None,
        request_url: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url
        super().__init__(message)


class RepositoryNotRegisteredError(RelayError):
    """Raised when a push arrives for a repository with no stored secret."""

    def __init__(self, repository: str):
        self.repository = repository
        super().__init__(f"Repository not registered: {repository}")


class InvalidSignatureError(RelayError):
    """Raised when a push delivery signature does not match."""

    def __init__(self, repository: str):
        self.repository = repository
        super().__init__(f"Invalid webhook signature for {repository}")


class MalformedPayloadError(RelayError):
    """Raised when a push delivery body cannot be parsed."""
