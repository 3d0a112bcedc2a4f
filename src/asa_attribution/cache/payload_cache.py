"""Single-slot cache of the last fetched attribution payload.

Losing the cache is always safe: a corrupt blob loads as "no cache" and a
failed save only means the next run will see the payload as new again.
Neither condition is raised to the caller.
"""

import logging

from asa_attribution.cache.store import KeyValueStore
from asa_attribution.config import DEFAULT_CACHE_KEY
from asa_attribution.errors import CacheCorrupt, DecodeError
from asa_attribution.payload import AttributionPayload

logger = logging.getLogger(__name__)


class PayloadCache:
    """Load, save and clear the cached AttributionPayload.

    Args:
        store: Persistence substrate
        key: Key the payload is stored under
    """

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_CACHE_KEY) -> None:
        self.store = store
        self.key = key

    def _decode(self, data: bytes) -> AttributionPayload:
        try:
            return AttributionPayload.decode(data)
        except DecodeError as e:
            raise CacheCorrupt(
                f"Saved attribution payload could not be decoded: {e}",
                response_body=e.response_body,
            ) from e

    async def load(self) -> AttributionPayload | None:
        """Return the cached payload, or None if absent or undecodable."""
        try:
            data = await self.store.load(self.key)
        except OSError as e:
            logger.warning("Failed to read cached payload %r: %s. Treating as cache miss.", self.key, e)
            return None

        if data is None:
            return None

        try:
            return self._decode(data)
        except CacheCorrupt as e:
            logger.warning("%s. Treating as cache miss.", e)
            return None

    async def save(self, payload: AttributionPayload) -> bool:
        """Persist ``payload``.

        Returns:
            True if stored, False if encoding or the store failed
        """
        try:
            data = payload.encode()
            await self.store.save(self.key, data)
        except Exception as e:
            logger.error("Unable to save attribution payload under %r: %s", self.key, e)
            return False
        return True

    async def clear(self) -> None:
        """Remove the cached payload."""
        await self.store.remove(self.key)
        logger.debug("Cleared cached attribution payload %r", self.key)
