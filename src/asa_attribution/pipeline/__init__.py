"""Attribution pipeline — Cache → Token → API → Compare → Notify.

Components:
- AttributionOrchestrator: Runs the pipeline once per instance
- ObservableValue: Thread-safe value holder with listeners
"""

from asa_attribution.pipeline.orchestrator import AttributionOrchestrator
from asa_attribution.pipeline.state import ObservableValue

__all__ = ["AttributionOrchestrator", "ObservableValue"]
