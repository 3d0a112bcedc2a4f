"""Error taxonomy for the attribution pipeline.

Every failure the pipeline can report derives from AttributionError, which
carries the same diagnostic fields as an HTTP provider error (message,
status code, truncated response body).

Terminal (published on the orchestrator's ``error``):
    TokenUnavailable, TransportError, InvalidToken, NotFound,
    ServerUnavailable, UnexpectedStatus, MockDataReceived, DecodeError

Absorbed (logged, treated as a cache miss):
    CacheCorrupt
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from asa_attribution.payload import AttributionPayload


class AttributionError(Exception):
    """Base exception for attribution pipeline errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body


class TokenUnavailable(AttributionError):
    """The platform token source failed or returned no token."""

    def __init__(self, message: str = "Attribution token is unavailable") -> None:
        super().__init__(message)


class TransportError(AttributionError):
    """The request did not produce a well-formed HTTP response."""


class DecodeError(AttributionError):
    """A payload body could not be decoded into an AttributionPayload."""


class CacheCorrupt(AttributionError):
    """The cached payload blob exists but cannot be decoded."""


class InvalidToken(AttributionError):
    """HTTP 400: the token was rejected."""

    def __init__(self, response_body: str | None = None) -> None:
        super().__init__("Token is invalid", status_code=400, response_body=response_body)


class NotFound(AttributionError):
    """HTTP 404: no record found for the token.

    Tokens live for 24 hours. When the token is still valid the service
    recommends retrying every ``retry_interval`` seconds, at most
    ``max_attempts`` times. Retrying is up to the caller.
    """

    retry_interval: float = 5.0
    max_attempts: int = 3

    def __init__(self, response_body: str | None = None) -> None:
        super().__init__("No record found for token", status_code=404, response_body=response_body)


class ServerUnavailable(AttributionError):
    """HTTP 500: the attribution server is temporarily unavailable."""

    def __init__(self, response_body: str | None = None) -> None:
        super().__init__(
            "The Apple Search Ads server is temporarily down or unavailable",
            status_code=500,
            response_body=response_body,
        )


class UnexpectedStatus(AttributionError):
    """Any HTTP status other than 200, 400, 404 or 500."""

    def __init__(self, status_code: int, response_body: str | None = None) -> None:
        super().__init__(
            f"Received unexpected HTTP status code {status_code} - response ignored",
            status_code=status_code,
            response_body=response_body,
        )


class MockDataReceived(AttributionError):
    """The service answered with sentinel-valued mock data."""

    def __init__(self, payload: "AttributionPayload") -> None:
        super().__init__("Attribution payload appears to be mock data", status_code=200)
        self.payload = payload
