"""
CONTRACT 2: Composite Result

Output of the Composite Engine. This is the unit stored in the Result
Cache and returned by the read endpoint.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ccpi.schemas.indicators import Pillar, ResolutionTier


# =============================================================================
# ENUMS
# =============================================================================


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"


# =============================================================================
# PILLARS
# =============================================================================


class IndicatorContribution(BaseModel):
    """One indicator's normalized contribution to its pillar."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    value: float
    tier: ResolutionTier
    signal: float = Field(..., ge=0, le=100, description="Normalized 0-100 risk signal")
    weight: float = Field(..., ge=0, description="Intra-pillar weight")


class PillarScore(BaseModel):
    """Weighted category of indicators."""

    model_config = ConfigDict(frozen=True)

    pillar: Pillar
    label: str
    weight: float = Field(..., ge=0, le=1)
    score: float = Field(..., ge=0, le=100)
    components: list[IndicatorContribution]
    low_certainty: bool = Field(
        default=False, description="Every constituent fell back to baseline"
    )


# =============================================================================
# CLASSIFICATION
# =============================================================================


class Regime(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: int = Field(..., ge=1, le=5)
    name: str
    color: str
    description: str


class Playbook(BaseModel):
    model_config = ConfigDict(frozen=True)

    bias: str
    strategies: list[str]
    allocation: dict[str, str]


class Canary(BaseModel):
    """An indicator breaching its warning threshold."""

    model_config = ConfigDict(frozen=True)

    indicator: str
    signal: str
    pillar: str
    severity: Severity
    impact_score: float = 0.0


class CrashAmplifier(BaseModel):
    """Bonus points added for an acute crash condition."""

    model_config = ConfigDict(frozen=True)

    reason: str
    points: float


class Summary(BaseModel):
    model_config = ConfigDict(frozen=True)

    headline: str
    bullets: list[str]


# =============================================================================
# OUTPUT: CompositeResult
# =============================================================================


class IndicatorReport(BaseModel):
    """Which tier each indicator resolved at."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    pillar: Pillar
    value: float
    tier: ResolutionTier
    source: str


class CompositeResult(BaseModel):
    """
    Complete CCPI reading.
    Sent by: Composite Engine
    Received by: Result Cache, API consumers
    """

    model_config = ConfigDict(frozen=True)

    composite_score: float = Field(..., ge=0, le=100, description="Sum of weight x pillar score")
    amplified_score: float = Field(
        ..., ge=0, le=100, description="Composite plus crash amplifier bonus, capped at 100"
    )
    certainty: float = Field(..., ge=0, le=100, description="Confidence in the composite (%)")
    regime: Regime
    pillars: dict[str, PillarScore]
    tier_counts: dict[str, int]
    indicators: list[IndicatorReport]
    canaries: list[Canary] = []
    crash_amplifiers: list[CrashAmplifier] = []
    total_bonus: float = 0.0
    playbook: Optional[Playbook] = None
    summary: Optional[Summary] = None
    timestamp: datetime

    @property
    def total_indicators(self) -> int:
        return len(self.indicators)


class ExecutiveSummary(BaseModel):
    """One-sentence description of a CompositeResult."""

    summary: str
    provider: str = Field(..., description="LLM provider that wrote it, or 'template'")
