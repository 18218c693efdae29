"""
CONTRACT 1: Resolved Indicators

Output of the Indicator Resolver, input of the Pillar Aggregator.

One Indicator per configured signal per resolution cycle. Records are
frozen: a new cycle produces new records.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================


class ResolutionTier(str, Enum):
    LIVE = "live"  # Structured market-data API
    BEST_EFFORT = "best-effort"  # Language-model extraction
    BASELINE = "baseline"  # Static historical default


class Pillar(str, Enum):
    MOMENTUM = "momentum"
    RISK_APPETITE = "risk_appetite"
    VALUATION = "valuation"
    MACRO = "macro"


PILLAR_LABELS = {
    Pillar.MOMENTUM: "Momentum & Technical",
    Pillar.RISK_APPETITE: "Risk Appetite & Volatility",
    Pillar.VALUATION: "Valuation & Market Structure",
    Pillar.MACRO: "Macro",
}


# =============================================================================
# OUTPUT: Indicator
# =============================================================================


class AttemptRecord(BaseModel):
    """One tier/provider attempt, kept for auditing."""

    model_config = ConfigDict(frozen=True)

    tier_index: Optional[int] = None
    provider: str
    outcome: str  # "ok" or a failure reason


class Indicator(BaseModel):
    """
    A resolved indicator.
    Sent by: Indicator Resolver
    Received by: Pillar Aggregator, Composite Engine
    """

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    pillar: Pillar
    value: float
    tier: ResolutionTier
    source: str = Field(..., description="Provider that produced the value, or 'baseline'")
    tier_index: Optional[int] = Field(
        default=None, description="Index of the satisfying source tier; None for baseline"
    )
    resolved_at: datetime
    attempts: tuple[AttemptRecord, ...] = ()
