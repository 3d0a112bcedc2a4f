"""AdServices attribution API client.

Exchanges an attribution token for an attribution record with a single POST:

    POST https://api-adservices.apple.com/api/v1/
    Content-Type: text/plain

    <token>

API Documentation: https://developer.apple.com/documentation/adservices

Usage:
    from asa_attribution.clients.adservices import AdServicesClient

    async with AdServicesClient() as client:
        outcome = await client.fetch_attribution(token)
        payload = outcome.unwrap()
"""

import logging

from asa_attribution.clients.base import BaseAsyncClient
from asa_attribution.config import settings
from asa_attribution.engine.classifier import Outcome, classify

logger = logging.getLogger(__name__)


class AdServicesClient(BaseAsyncClient):
    """Async client for the AdServices attribution API.

    Args:
        base_url: Attribution endpoint (default: from settings)
        timeout: Request timeout in seconds (default: from settings)
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        super().__init__(
            base_url=base_url or settings.endpoint_url,
            headers={"Content-Type": "text/plain"},
            timeout=timeout or settings.http_timeout,
        )

    async def fetch_attribution(self, token: str) -> Outcome:
        """Fetch and classify the attribution record for a token.

        Args:
            token: Attribution token from the platform

        Returns:
            Classified Outcome

        Raises:
            TransportError: No well-formed HTTP response was received
            DecodeError: A 200 response could not be decoded
        """
        logger.debug("Fetching attribution record")
        response = await self._request("POST", "", content=token.encode("utf-8"))
        return classify(response.status_code, response.content)
