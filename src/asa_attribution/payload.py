"""Apple Search Ads install attribution payload.

Immutable value type decoded from the AdServices API response (and from the
local cache). Wire keys are camelCase; Python attributes are snake_case.

Example response (detailed variant):
    {
        "attribution": true,
        "orgId": 40669820,
        "campaignId": 542370539,
        "conversionType": "Download",
        "clickDate": "2020-04-08T17:17Z",
        "adGroupId": 542317095,
        "countryOrRegion": "US",
        "keywordId": 87675432,
        "adId": 542317136
    }

Usage:
    payload = AttributionPayload.decode(response_bytes)
    if not payload.is_mock_data:
        analytics.track(payload.as_analytics_dict(prefix="ASA"))
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from asa_attribution.errors import DecodeError

# Placeholder id returned by the simulator / development builds.
# Not an API contract, just what Apple has been observed to send.
MOCK_SENTINEL = 1234567890


class AttributionPayload(BaseModel):
    """An Apple Search Ads install attribution record.

    Attributes:
        attribution: True if the user clicked an Apple Search Ads impression
            up to 30 days before the download
        org_id: Organization that owns the campaign
        campaign_id: Campaign identifier
        conversion_type: "Download" or "Redownload"
        ad_group_id: Ad group identifier
        country_or_region: Country or region of the campaign
        click_date: Click timestamp, only in the detailed response (ATT authorized)
        keyword_id: Keyword identifier, absent when search match is enabled
        ad_id: Ad identifier, absent without Custom Product Pages
    """

    model_config = ConfigDict(
        frozen=True,
        strict=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    attribution: bool
    org_id: int
    campaign_id: int
    conversion_type: str
    ad_group_id: int
    country_or_region: str
    click_date: str | None = None
    keyword_id: int | None = None
    ad_id: int | None = None

    @classmethod
    def decode(cls, data: bytes | str) -> "AttributionPayload":
        """Strictly decode a JSON document into a payload.

        Raises:
            DecodeError: Malformed JSON, missing keys or mistyped values
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise DecodeError(
                f"Invalid attribution payload: {e.error_count()} validation error(s)",
                response_body=_preview(data),
            ) from e

    def encode(self) -> bytes:
        """Encode as UTF-8 JSON with wire keys; absent optionals are omitted."""
        return self.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")

    @property
    def is_mock_data(self) -> bool:
        """True if any campaign id carries the mock sentinel."""
        return MOCK_SENTINEL in (self.org_id, self.campaign_id, self.ad_group_id, self.ad_id)

    def as_analytics_dict(self, prefix: str = "") -> dict[str, Any]:
        """Flatten into analytics event properties."""
        return as_analytics_dict(self, prefix=prefix)


def as_analytics_dict(payload: AttributionPayload, prefix: str = "") -> dict[str, Any]:
    """Express a payload as a flat analytics dictionary.

    OrgId, CampaignID, ConversionType, AdGroupID and CountryOrRegion are always
    present. KeywordID, AdID and ClickDate appear only when set.

    Args:
        payload: Payload to export
        prefix: Prepended to every key (e.g. "ASA" -> "ASAOrgId")

    Returns:
        Dictionary of analytics keys to values
    """
    result: dict[str, Any] = {
        f"{prefix}OrgId": payload.org_id,
        f"{prefix}CampaignID": payload.campaign_id,
        f"{prefix}ConversionType": payload.conversion_type,
        f"{prefix}AdGroupID": payload.ad_group_id,
        f"{prefix}CountryOrRegion": payload.country_or_region,
    }

    if payload.keyword_id is not None:
        result[f"{prefix}KeywordID"] = payload.keyword_id
    if payload.ad_id is not None:
        result[f"{prefix}AdID"] = payload.ad_id
    if payload.click_date is not None:
        result[f"{prefix}ClickDate"] = payload.click_date

    return result


def _preview(data: bytes | str, limit: int = 500) -> str:
    if isinstance(data, bytes):
        return data[:limit].decode("utf-8", errors="replace")
    return data[:limit]
