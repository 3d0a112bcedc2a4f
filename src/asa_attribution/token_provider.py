"""Attribution token acquisition on an isolated worker.

The platform call that produces the token has been reported to stall and
possibly hit the network on its own, so it never runs on the caller's event
loop. Each TokenProvider owns a single-worker thread pool; synchronous
sources are called there, coroutine sources get their own event loop inside
that worker.

No timeout is applied: a hung source leaves ``acquire_token`` pending. The
provider is owned by the caller, not by the orchestrator, so the caller
releases it with ``shutdown()``. ``concurrent.futures`` joins worker threads
at interpreter exit, so a source that never returns still blocks process
exit even after ``shutdown()``.

Usage:
    provider = TokenProvider(platform_token_call)
    token = await provider.acquire_token()
"""

import asyncio
import inspect
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Awaitable, Callable, Union

from asa_attribution.errors import TokenUnavailable

logger = logging.getLogger(__name__)

TokenSource = Callable[[], Union[str, Awaitable[str]]]


class TokenProvider:
    """Runs a token source off the calling event loop.

    Args:
        source: Zero-argument callable returning the token, or a coroutine function
        executor: Executor to run the source on (default: private single-worker pool)
    """

    def __init__(self, source: TokenSource, executor: Executor | None = None) -> None:
        self._source = source
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="attribution-token"
        )

    def _call_source(self) -> str:
        """Invoke the source inside the worker thread."""
        result = self._source()
        if inspect.isawaitable(result):
            loop = asyncio.new_event_loop()
            try:
                return loop.run_until_complete(result)
            finally:
                loop.close()
        return result

    async def acquire_token(self) -> str:
        """Fetch the attribution token.

        Returns:
            Opaque token string

        Raises:
            TokenUnavailable: The source failed or returned an empty token
        """
        logger.debug("Requesting ad attribution token")
        loop = asyncio.get_running_loop()

        try:
            token = await loop.run_in_executor(self._executor, self._call_source)
        except Exception as e:
            logger.error("Attribution token source failed: %s", e)
            raise TokenUnavailable(f"Attribution token is unavailable: {e}") from e

        if not isinstance(token, str) or not token:
            raise TokenUnavailable("Attribution token source returned no token")

        logger.debug("Received ad attribution token: %s...", token[:8])
        return token

    def shutdown(self) -> None:
        """Release the private worker without waiting for a hung call."""
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
