"""Response classification for the AdServices attribution API.

Maps an HTTP status code and body to exactly one outcome. Dispatch is on the
status code alone; only a 200 body is ever decoded.

Outcome Types:
    1. SUCCESS (200): payload, or None when no attributable click exists
    2. MOCK_DATA (200): decoded payload carries the mock sentinel
    3. INVALID_TOKEN (400)
    4. NOT_FOUND (404): retry-worthy, but retrying is the caller's job
    5. SERVER_UNAVAILABLE (500)
    6. UNEXPECTED_STATUS: every other status code

Only SUCCESS is a usable result. Every other outcome maps to an
AttributionError through ``Outcome.unwrap()``; MOCK_DATA is reported as an
error even though the HTTP call succeeded.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum

from asa_attribution.errors import (
    AttributionError,
    DecodeError,
    InvalidToken,
    MockDataReceived,
    NotFound,
    ServerUnavailable,
    TransportError,
    UnexpectedStatus,
)
from asa_attribution.payload import AttributionPayload

logger = logging.getLogger(__name__)


class OutcomeType(Enum):
    """Classified result of one attribution API call."""

    SUCCESS = "success"
    MOCK_DATA = "mock_data"
    INVALID_TOKEN = "invalid_token"
    NOT_FOUND = "not_found"
    SERVER_UNAVAILABLE = "server_unavailable"
    UNEXPECTED_STATUS = "unexpected_status"


@dataclass(frozen=True)
class Outcome:
    """Classification of an attribution API response.

    Attributes:
        kind: The outcome type
        status_code: HTTP status code of the response
        payload: Decoded payload (SUCCESS with attribution, or MOCK_DATA)
        response_body: Truncated body text, kept for diagnostics on failures
    """

    kind: OutcomeType
    status_code: int
    payload: AttributionPayload | None = None
    response_body: str | None = None

    @property
    def is_success(self) -> bool:
        """True for a SUCCESS outcome, with or without a payload."""
        return self.kind is OutcomeType.SUCCESS

    def to_error(self) -> AttributionError | None:
        """Return the error this outcome represents, or None for SUCCESS."""
        if self.kind is OutcomeType.SUCCESS:
            return None
        if self.kind is OutcomeType.MOCK_DATA:
            return MockDataReceived(self.payload)
        if self.kind is OutcomeType.INVALID_TOKEN:
            return InvalidToken(response_body=self.response_body)
        if self.kind is OutcomeType.NOT_FOUND:
            return NotFound(response_body=self.response_body)
        if self.kind is OutcomeType.SERVER_UNAVAILABLE:
            return ServerUnavailable(response_body=self.response_body)
        return UnexpectedStatus(self.status_code, response_body=self.response_body)

    def unwrap(self) -> AttributionPayload | None:
        """Return the payload of a SUCCESS outcome.

        Raises:
            AttributionError: The matching error for any other outcome
        """
        error = self.to_error()
        if error is not None:
            raise error
        return self.payload


def _body_text(body: bytes, limit: int = 500) -> str:
    return body[:limit].decode("utf-8", errors="replace")


def _log_body(body: bytes) -> None:
    """Log a response body as JSON, text, or a byte count."""
    try:
        obj = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        obj = None

    if isinstance(obj, dict):
        logger.debug("JSON object is %s", obj)
        return

    try:
        logger.info("Non-JSON response: %s", body.decode("utf-8"))
    except UnicodeDecodeError:
        logger.info("Non-JSON, non-text response data of %d bytes", len(body))


def classify(status_code: int, body: bytes) -> Outcome:
    """Classify an attribution API response.

    Args:
        status_code: HTTP status code
        body: Raw response body

    Returns:
        Outcome for the response

    Raises:
        TransportError: status_code is not a valid HTTP status
        DecodeError: A 200 body is not JSON, or an attributed payload fails
            strict decoding
    """
    if isinstance(status_code, bool) or not isinstance(status_code, int) or not 100 <= status_code <= 599:
        raise TransportError(f"Response has no valid HTTP status code: {status_code!r}")

    if status_code == 200:
        return _classify_success(body)

    if status_code == 400:
        kind = OutcomeType.INVALID_TOKEN
    elif status_code == 404:
        kind = OutcomeType.NOT_FOUND
    elif status_code == 500:
        kind = OutcomeType.SERVER_UNAVAILABLE
    else:
        kind = OutcomeType.UNEXPECTED_STATUS
        logger.error("Received unexpected HTTP status code %d - response ignored", status_code)
        _log_body(body)

    return Outcome(kind=kind, status_code=status_code, response_body=_body_text(body))


def _classify_success(body: bytes) -> Outcome:
    try:
        document = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(
            f"Attribution response is not JSON: {e}",
            status_code=200,
            response_body=_body_text(body),
        ) from e

    # A non-object JSON document counts as an empty object.
    if not isinstance(document, dict):
        document = {}

    if document.get("attribution") is not True:
        logger.info("API call successful, but `attribution` key is missing or has a non-`true` value")
        _log_body(body)
        return Outcome(kind=OutcomeType.SUCCESS, status_code=200)

    payload = AttributionPayload.decode(body)

    if payload.is_mock_data:
        logger.warning("Attribution received. *** MOCK PAYLOAD: %r", payload)
        _log_body(body)
        return Outcome(kind=OutcomeType.MOCK_DATA, status_code=200, payload=payload)

    logger.info("Attribution received. Payload: %r", payload)
    return Outcome(kind=OutcomeType.SUCCESS, status_code=200, payload=payload)
