"""
Indicator Resolution

CONTRACT:
    Input:  IndicatorDefinition (source tiers + baseline)
    Output: Indicator (value tagged live / best-effort / baseline)

Every indicator always resolves. Exhausting every tier yields the baseline.
"""

from ccpi.services.indicators.catalog import INDICATORS, get_indicator_catalog
from ccpi.services.indicators.resolver import IndicatorResolver
from ccpi.services.indicators.tiers import (
    BaselineTier,
    CanaryRule,
    IndicatorDefinition,
    LanguageModelChainTier,
    SourceTier,
    StructuredApiTier,
)
from ccpi.services.indicators.transforms import (
    AsymmetricReturn,
    DrawdownFromReference,
    LinearBand,
    TwoSided,
)

__all__ = [
    "INDICATORS",
    "get_indicator_catalog",
    "IndicatorResolver",
    "BaselineTier",
    "CanaryRule",
    "IndicatorDefinition",
    "LanguageModelChainTier",
    "SourceTier",
    "StructuredApiTier",
    "AsymmetricReturn",
    "DrawdownFromReference",
    "LinearBand",
    "TwoSided",
]
