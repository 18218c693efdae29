"""
CCPI Schema Contracts

JSON contracts between the resolver, the scoring layer, the cache and the API.
"""

from ccpi.schemas.indicators import (
    AttemptRecord,
    Indicator,
    Pillar,
    PILLAR_LABELS,
    ResolutionTier,
)
from ccpi.schemas.composite import (
    Canary,
    CompositeResult,
    CrashAmplifier,
    ExecutiveSummary,
    IndicatorContribution,
    IndicatorReport,
    PillarScore,
    Playbook,
    Regime,
    Severity,
    Summary,
)

__all__ = [
    # Indicators
    "AttemptRecord",
    "Indicator",
    "Pillar",
    "PILLAR_LABELS",
    "ResolutionTier",
    # Composite
    "Canary",
    "CompositeResult",
    "CrashAmplifier",
    "ExecutiveSummary",
    "IndicatorContribution",
    "IndicatorReport",
    "PillarScore",
    "Playbook",
    "Regime",
    "Severity",
    "Summary",
]
