"""Response classification engine.

Modules:
    - classifier: HTTP status + body -> typed Outcome
"""

from asa_attribution.engine.classifier import (
    Outcome,
    OutcomeType,
    classify,
)

__all__ = [
    "Outcome",
    "OutcomeType",
    "classify",
]
