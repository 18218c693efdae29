"""
Certainty

How much to trust a composite reading, 0-100:

    certainty = 100 * (quality_weight * quality + agreement_weight * agreement)
                - low_pillar_penalty * (pillars flagged low-certainty)

- quality: mean tier credit (live > best-effort > baseline)
- agreement: how consistent correlated signals are with each other, and how
  aligned the pillars are. Depends on values only, never on tiers.
"""

from dataclasses import dataclass, field
from typing import Mapping, Sequence

import numpy as np

from ccpi.core.config import Settings
from ccpi.schemas.indicators import Indicator, ResolutionTier
from ccpi.services.indicators.transforms import clamp

# Signals are on a 0-100 scale; a std of 50 is maximal disagreement
MAX_SIGNAL_STD = 50.0


@dataclass(frozen=True)
class CertaintyPolicy:
    quality_weight: float = 0.7
    agreement_weight: float = 0.3
    credits: dict = field(
        default_factory=lambda: {
            ResolutionTier.LIVE: 1.0,
            ResolutionTier.BEST_EFFORT: 0.5,
            ResolutionTier.BASELINE: 0.0,
        }
    )
    low_pillar_penalty: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "CertaintyPolicy":
        return cls(
            quality_weight=settings.certainty_quality_weight,
            agreement_weight=settings.certainty_agreement_weight,
            credits={
                ResolutionTier.LIVE: settings.certainty_credit_live,
                ResolutionTier.BEST_EFFORT: settings.certainty_credit_best_effort,
                ResolutionTier.BASELINE: settings.certainty_credit_baseline,
            },
            low_pillar_penalty=settings.certainty_low_pillar_penalty,
        )


def data_quality(indicators: Sequence[Indicator], policy: CertaintyPolicy) -> float:
    """Mean tier credit, 0-1."""
    if not indicators:
        return 0.0
    return sum(policy.credits[i.tier] for i in indicators) / len(indicators)


def _consistency(signals: Sequence[float]) -> float:
    return max(0.0, 1.0 - float(np.std(signals)) / MAX_SIGNAL_STD)


def signal_agreement(
    group_signals: Mapping[str, Sequence[float]],
    pillar_scores: Sequence[float],
) -> float:
    """0-1. Groups with fewer than two signals say nothing about agreement."""
    parts = [_consistency(s) for s in group_signals.values() if len(s) >= 2]
    if len(pillar_scores) >= 2:
        parts.append(_consistency(pillar_scores))
    if not parts:
        return 1.0
    return float(np.mean(parts))


def compute_certainty(
    indicators: Sequence[Indicator],
    group_signals: Mapping[str, Sequence[float]],
    pillar_scores: Sequence[float],
    low_certainty_pillars: int,
    policy: CertaintyPolicy,
) -> float:
    quality = data_quality(indicators, policy)
    agreement = signal_agreement(group_signals, pillar_scores)
    raw = 100 * (policy.quality_weight * quality + policy.agreement_weight * agreement)
    raw -= policy.low_pillar_penalty * low_certainty_pillars
    return round(clamp(raw), 1)
