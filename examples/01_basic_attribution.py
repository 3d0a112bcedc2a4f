"""Example 1: Basic Attribution

This example shows the most basic usage of asa-attribution: wiring the two
callbacks, running the pipeline once and inspecting the outcome.

The token normally comes from the platform (AAAttribution.attributionToken()).
Here it is read from the ASA_EXAMPLE_TOKEN environment variable.
"""

import asyncio
import os

from asa_attribution.cache import FileStore, PayloadCache
from asa_attribution.payload import AttributionPayload
from asa_attribution.pipeline import AttributionOrchestrator
from asa_attribution.token_provider import TokenProvider


def on_loaded(payload: AttributionPayload) -> None:
    print(f"  ✓ Attribution available: campaign {payload.campaign_id} ({payload.conversion_type})")


def on_new(payload: AttributionPayload) -> None:
    print("  ✓ New attribution, reporting to analytics:")
    for key, value in payload.as_analytics_dict(prefix="ASA").items():
        print(f"      {key} = {value}")


async def main() -> None:
    """Run basic attribution example."""
    print("=" * 60)
    print("asa-attribution — Example 1: Basic Attribution")
    print("=" * 60)
    print()

    token_provider = TokenProvider(lambda: os.environ["ASA_EXAMPLE_TOKEN"])
    orchestrator = AttributionOrchestrator(
        on_loaded,
        on_new,
        token_provider=token_provider,
        cache=PayloadCache(FileStore("data/examples")),
    )
    await orchestrator.wait()
    token_provider.shutdown()

    print()
    if orchestrator.error is not None:
        print(f"  ✗ {type(orchestrator.error).__name__}: {orchestrator.error}")
        print("    Construct a new orchestrator to try again.")
    elif orchestrator.attribution_payload is None:
        print("  No attribution record for this install.")


if __name__ == "__main__":
    asyncio.run(main())
