"""Orchestrator — attribution acquisition and reconciliation.

Single-pass pipeline, started as soon as the orchestrator is constructed:
  1. Load the cached payload → emit "loaded" if present
  2. Acquire the attribution token (isolated worker)
  3. POST the token, classify the response
  4. Compare with the cached payload → on change: save, emit "loaded", emit "new"

Any failure in steps 2-3 ends the run and is published on ``error``, as is
any unexpected exception (wrapped in AttributionError, cause chained). The
run is never retried; construct a new orchestrator to try again.

Usage:
    orchestrator = AttributionOrchestrator(
        on_loaded,
        on_new,
        token_provider=TokenProvider(platform_token_call),
    )
    await orchestrator.wait()
    if orchestrator.error:
        ...
"""

import asyncio
import concurrent.futures
import logging
from typing import Callable

from asa_attribution.cache import FileStore, PayloadCache
from asa_attribution.clients.adservices import AdServicesClient
from asa_attribution.config import settings
from asa_attribution.errors import AttributionError
from asa_attribution.payload import AttributionPayload
from asa_attribution.pipeline.state import ObservableValue
from asa_attribution.token_provider import TokenProvider

logger = logging.getLogger(__name__)

PayloadCallback = Callable[[AttributionPayload], None]


class AttributionOrchestrator:
    """Fetches the install attribution record once per instance.

    Callbacks and observable state are updated on the event loop the run
    is scheduled on: the running loop at construction, or ``loop`` when
    given. Network and cache I/O are awaited there; the token source runs
    on the token provider's own worker thread.

    Args:
        on_attribution_payload_loaded: Called with the cached payload when one
            is loaded, and again with a fetched payload that differs from it
        on_new_attribution_payload_received: Called once with a fetched
            payload that was never seen before or has changed
        token_provider: Source of the attribution token; never shut down
            here, the caller releases it
        client: AdServices client (default: configured from settings)
        cache: Payload cache (default: file store in settings.cache_dir)
        loop: Event loop to run on, possibly running in another thread
            (default: the running loop)

    Raises:
        RuntimeError: No loop given and none is running
    """

    def __init__(
        self,
        on_attribution_payload_loaded: PayloadCallback,
        on_new_attribution_payload_received: PayloadCallback,
        *,
        token_provider: TokenProvider,
        client: AdServicesClient | None = None,
        cache: PayloadCache | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._on_loaded = on_attribution_payload_loaded
        self._on_new = on_new_attribution_payload_received
        self.token_provider = token_provider
        self.client = client or AdServicesClient()
        self.cache = cache or PayloadCache(
            FileStore(base_path=settings.cache_dir), key=settings.cache_key
        )

        self._payload: ObservableValue[AttributionPayload] = ObservableValue()
        self._error: ObservableValue[AttributionError] = ObservableValue()

        self._future: asyncio.Future | concurrent.futures.Future
        if loop is None:
            self._future = asyncio.get_running_loop().create_task(self._run())
        else:
            self._future = asyncio.run_coroutine_threadsafe(self._run(), loop)

    @property
    def attribution_payload(self) -> AttributionPayload | None:
        """Most recently emitted payload, or None."""
        return self._payload.value

    @property
    def error(self) -> AttributionError | None:
        """Terminal failure of the run, or None."""
        return self._error.value

    def observe_payload(self, listener: Callable[[AttributionPayload | None], None]) -> Callable[[], None]:
        """Subscribe to ``attribution_payload`` changes."""
        return self._payload.subscribe(listener)

    def observe_error(self, listener: Callable[[AttributionError | None], None]) -> Callable[[], None]:
        """Subscribe to ``error`` being set."""
        return self._error.subscribe(listener)

    def done(self) -> bool:
        """True once the run has finished."""
        return self._future.done()

    async def wait(self) -> None:
        """Wait for the run to finish. Failures are read from ``error``."""
        if isinstance(self._future, concurrent.futures.Future):
            await asyncio.wrap_future(self._future)
        else:
            await self._future

    def _emit_loaded(self, payload: AttributionPayload) -> None:
        self._payload.set(payload)
        try:
            self._on_loaded(payload)
        except Exception:
            logger.exception("onAttributionPayloadLoaded callback raised")

    def _emit_new(self, payload: AttributionPayload) -> None:
        try:
            self._on_new(payload)
        except Exception:
            logger.exception("onNewAttributionPayloadReceived callback raised")

    async def _fetch(self) -> AttributionPayload | None:
        """Token → request → classified payload.

        Raises:
            AttributionError: Any terminal failure
        """
        token = await self.token_provider.acquire_token()
        async with self.client:
            outcome = await self.client.fetch_attribution(token)
        return outcome.unwrap()

    async def _run(self) -> None:
        try:
            await self._reconcile()
        except Exception as e:
            logger.exception("Attribution run failed unexpectedly")
            error = AttributionError(f"Attribution run failed unexpectedly: {e}")
            error.__cause__ = e
            self._error.set(error)

    async def _reconcile(self) -> None:
        cached = await self.cache.load()
        if cached is not None:
            logger.info("Loaded saved attribution payload")
            self._emit_loaded(cached)

        try:
            payload = await self._fetch()
        except AttributionError as e:
            logger.error("Error fetching ad attribution record: %s", e)
            self._error.set(e)
            return

        if payload is None:
            logger.info("No attribution record for this install")
            return

        if payload == cached:
            logger.info("Attribution payload unchanged")
            return

        logger.info("New attribution payload received")
        await self.cache.save(payload)
        self._emit_loaded(payload)
        self._emit_new(payload)
