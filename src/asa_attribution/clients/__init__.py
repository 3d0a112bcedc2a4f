"""API client layer for asa-attribution.

Async HTTP client for the AdServices attribution API.
"""

from asa_attribution.clients.base import BaseAsyncClient
from asa_attribution.clients.adservices import AdServicesClient

__all__ = [
    "BaseAsyncClient",
    "AdServicesClient",
]
