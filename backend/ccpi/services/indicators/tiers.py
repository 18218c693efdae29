"""
Indicator Definitions and Source Tiers

An indicator is data: an ordered list of source tiers ending in exactly one
baseline, a normalisation transform, an intra-pillar weight and optional
canary thresholds.

Tier variants:
- StructuredApiTier: one named market-data provider (resolves as "live")
- LanguageModelChainTier: the LLM provider chain (resolves as "best-effort")
- BaselineTier: static historical default (resolves as "baseline")
"""

from dataclasses import dataclass
from typing import Optional, Union

from ccpi.core.config import ConfigurationError
from ccpi.schemas.indicators import Pillar, ResolutionTier
from ccpi.schemas.composite import Severity
from ccpi.services.indicators.transforms import Transform
from ccpi.services.providers.interface import Query


@dataclass(frozen=True)
class StructuredApiTier:
    provider: str
    series: str
    field: str = "last"
    timeout: Optional[float] = None  # None: resolver default


@dataclass(frozen=True)
class LanguageModelChainTier:
    timeout: Optional[float] = None
    per_provider_timeout: Optional[float] = None


@dataclass(frozen=True)
class BaselineTier:
    value: float


SourceTier = Union[StructuredApiTier, LanguageModelChainTier, BaselineTier]


def tier_label(tier: SourceTier) -> ResolutionTier:
    if isinstance(tier, StructuredApiTier):
        return ResolutionTier.LIVE
    if isinstance(tier, LanguageModelChainTier):
        return ResolutionTier.BEST_EFFORT
    return ResolutionTier.BASELINE


@dataclass(frozen=True)
class CanaryRule:
    """
    Warning thresholds. A value strictly beyond a high threshold is a
    high-severity canary, beyond a medium threshold a medium one.
    """

    above_medium: Optional[float] = None
    above_high: Optional[float] = None
    below_medium: Optional[float] = None
    below_high: Optional[float] = None

    def severity(self, value: float) -> Optional[Severity]:
        if (self.above_high is not None and value > self.above_high) or (
            self.below_high is not None and value < self.below_high
        ):
            return Severity.HIGH
        if (self.above_medium is not None and value > self.above_medium) or (
            self.below_medium is not None and value < self.below_medium
        ):
            return Severity.MEDIUM
        return None


@dataclass(frozen=True)
class IndicatorDefinition:
    name: str
    label: str
    pillar: Pillar
    description: str  # What a language model is asked for
    tiers: tuple[SourceTier, ...]
    transform: Transform
    weight: float
    signed: bool = False  # Zero and negative values are legitimate
    unit: str = ""
    canary: Optional[CanaryRule] = None
    group: Optional[str] = None  # Correlation group for certainty

    def __post_init__(self):
        baselines = [t for t in self.tiers if isinstance(t, BaselineTier)]
        if len(baselines) != 1 or not isinstance(self.tiers[-1], BaselineTier):
            raise ConfigurationError(
                f"{self.name}: exactly one baseline tier is required, and it must be last"
            )
        if self.weight < 0:
            raise ConfigurationError(f"{self.name}: weight must be non-negative")

    @property
    def baseline(self) -> float:
        return self.tiers[-1].value

    def query_for(self, tier: SourceTier) -> Query:
        if isinstance(tier, StructuredApiTier):
            return Query(
                indicator=self.name,
                description=self.description,
                series=tier.series,
                field=tier.field,
                positive_only=not self.signed,
            )
        return Query(
            indicator=self.name,
            description=self.description,
            positive_only=not self.signed,
        )

    def format_value(self, value: float) -> str:
        return f"{value:,.2f}{self.unit}"
