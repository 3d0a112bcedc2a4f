"""asa-attribution — Apple Search Ads install attribution.

Fetches the AdServices attribution record for an install, reconciles it
with the last cached record and notifies callers when it is new or changed.
"""

from asa_attribution.errors import (
    AttributionError,
    CacheCorrupt,
    DecodeError,
    InvalidToken,
    MockDataReceived,
    NotFound,
    ServerUnavailable,
    TokenUnavailable,
    TransportError,
    UnexpectedStatus,
)
from asa_attribution.payload import MOCK_SENTINEL, AttributionPayload, as_analytics_dict

__version__ = "0.1.0"

__all__ = [
    "AttributionPayload",
    "MOCK_SENTINEL",
    "as_analytics_dict",
    "AttributionError",
    "CacheCorrupt",
    "DecodeError",
    "InvalidToken",
    "MockDataReceived",
    "NotFound",
    "ServerUnavailable",
    "TokenUnavailable",
    "TransportError",
    "UnexpectedStatus",
]
