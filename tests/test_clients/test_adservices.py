"""Tests for the AdServices attribution API client."""

import httpx
import pytest

from asa_attribution.clients.adservices import AdServicesClient
from asa_attribution.engine import OutcomeType
from asa_attribution.errors import DecodeError, TransportError

ENDPOINT = "https://api-adservices.apple.com/api/v1/"

ATTRIBUTED = {
    "attribution": True,
    "orgId": 40669820,
    "campaignId": 542370539,
    "conversionType": "Redownload",
    "adGroupId": 542317095,
    "countryOrRegion": "GB",
    "keywordId": 87675432,
}


class TestAdServicesClient:
    """Tests for AdServices client."""

    @pytest.mark.asyncio
    async def test_posts_token_as_plain_text(self, respx_mock):
        """Token is the UTF-8 body of a text/plain POST."""
        route = respx_mock.post(ENDPOINT).mock(
            return_value=httpx.Response(200, json={"attribution": False})
        )

        async with AdServicesClient() as client:
            await client.fetch_attribution("tok€n-123")

        assert route.call_count == 1
        request = route.calls.last.request
        assert request.method == "POST"
        assert str(request.url) == ENDPOINT
        assert request.headers["Content-Type"] == "text/plain"
        assert request.content == "tok€n-123".encode("utf-8")

    @pytest.mark.asyncio
    async def test_attributed_response(self, respx_mock):
        respx_mock.post(ENDPOINT).mock(return_value=httpx.Response(200, json=ATTRIBUTED))

        async with AdServicesClient() as client:
            outcome = await client.fetch_attribution("token")

        assert outcome.kind is OutcomeType.SUCCESS
        assert outcome.payload.conversion_type == "Redownload"
        assert outcome.payload.ad_id is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, kind",
        [
            (400, OutcomeType.INVALID_TOKEN),
            (404, OutcomeType.NOT_FOUND),
            (500, OutcomeType.SERVER_UNAVAILABLE),
            (503, OutcomeType.UNEXPECTED_STATUS),
        ],
    )
    async def test_error_statuses_single_attempt(self, respx_mock, status, kind):
        """Error statuses are classified and never retried."""
        route = respx_mock.post(ENDPOINT).mock(return_value=httpx.Response(status))

        async with AdServicesClient() as client:
            outcome = await client.fetch_attribution("token")

        assert outcome.kind is kind
        assert route.call_count == 1

    @pytest.mark.asyncio
    async def test_non_json_success(self, respx_mock):
        respx_mock.post(ENDPOINT).mock(return_value=httpx.Response(200, text="maintenance"))

        async with AdServicesClient() as client:
            with pytest.raises(DecodeError):
                await client.fetch_attribution("token")

    @pytest.mark.asyncio
    async def test_network_failure(self, respx_mock):
        respx_mock.post(ENDPOINT).mock(side_effect=httpx.ConnectError("offline"))

        async with AdServicesClient() as client:
            with pytest.raises(TransportError):
                await client.fetch_attribution("token")

    @pytest.mark.asyncio
    async def test_custom_endpoint(self, respx_mock):
        """Endpoint can be overridden (e.g. a staging proxy)."""
        route = respx_mock.post("http://localhost:8080/attribution/").mock(
            return_value=httpx.Response(200, json={"attribution": False})
        )

        async with AdServicesClient(base_url="http://localhost:8080/attribution/", timeout=5.0) as client:
            outcome = await client.fetch_attribution("token")

        assert route.called
        assert outcome.payload is None
