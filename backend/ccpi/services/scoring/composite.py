"""
Composite Engine

CONTRACT:
    Input:  list[Indicator] (one per catalog entry, every one resolved)
    Output: CompositeResult

Weighted sum of the four pillar scores, certainty, crash amplifiers,
regime, canaries, playbook and summary. Pure: no I/O, no clock except
the result timestamp.
"""

import logging
from datetime import datetime, timezone
from typing import Mapping, Optional, Sequence

from ccpi.core.config import ConfigurationError, Settings, validate_pillar_weights
from ccpi.schemas.composite import CompositeResult, IndicatorReport
from ccpi.schemas.indicators import Indicator, Pillar, ResolutionTier
from ccpi.services.indicators.tiers import IndicatorDefinition
from ccpi.services.indicators.transforms import clamp
from ccpi.services.scoring.aggregator import PillarAggregator
from ccpi.services.scoring.alerts import (
    apply_amplifiers,
    find_canaries,
    find_crash_amplifiers,
)
from ccpi.services.scoring.certainty import CertaintyPolicy, compute_certainty
from ccpi.services.scoring.regimes import build_summary, classify_regime, get_playbook

logger = logging.getLogger(__name__)


class CompositeEngine:
    def __init__(
        self,
        definitions: Sequence[IndicatorDefinition],
        pillar_weights: Mapping[str, float],
        certainty_policy: Optional[CertaintyPolicy] = None,
        enable_amplifiers: bool = True,
    ):
        # Checked once here, never per request
        validate_pillar_weights(dict(pillar_weights))
        expected = {p.value for p in Pillar}
        if set(pillar_weights) != expected:
            raise ConfigurationError(
                f"Pillar weights must cover exactly {sorted(expected)}, got {sorted(pillar_weights)}"
            )

        self.definitions = {d.name: d for d in definitions}
        self.pillar_weights = dict(pillar_weights)
        self.certainty_policy = certainty_policy or CertaintyPolicy()
        self.enable_amplifiers = enable_amplifiers
        self.aggregator = PillarAggregator(definitions)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        definitions: Sequence[IndicatorDefinition],
    ) -> "CompositeEngine":
        return cls(
            definitions,
            settings.pillar_weights,
            certainty_policy=CertaintyPolicy.from_settings(settings),
            enable_amplifiers=settings.enable_crash_amplifiers,
        )

    def compute(self, indicators: Sequence[Indicator]) -> CompositeResult:
        pillars = {
            pillar.value: self.aggregator.aggregate(
                pillar, indicators, self.pillar_weights[pillar.value]
            )
            for pillar in Pillar
        }
        composite = round(
            clamp(sum(p.weight * p.score for p in pillars.values())), 1
        )

        signals = {
            c.name: c.signal for p in pillars.values() for c in p.components
        }
        group_signals: dict[str, list[float]] = {}
        for indicator in indicators:
            definition = self.definitions.get(indicator.name)
            if definition is not None and definition.group and indicator.name in signals:
                group_signals.setdefault(definition.group, []).append(signals[indicator.name])

        certainty = compute_certainty(
            indicators,
            group_signals,
            [p.score for p in pillars.values()],
            sum(1 for p in pillars.values() if p.low_certainty),
            self.certainty_policy,
        )

        amplifiers = find_crash_amplifiers(indicators) if self.enable_amplifiers else []
        total_bonus = sum(a.points for a in amplifiers)
        amplified = round(apply_amplifiers(composite, amplifiers), 1)
        regime = classify_regime(amplified)

        canaries = find_canaries(indicators, self.definitions, signals, self.pillar_weights)

        tier_counts = {tier.value: 0 for tier in ResolutionTier}
        for indicator in indicators:
            tier_counts[indicator.tier.value] += 1

        logger.info(
            f"CCPI {composite} (amplified {amplified}), certainty {certainty}%, "
            f"regime {regime.name}, tiers {tier_counts}"
        )

        return CompositeResult(
            composite_score=composite,
            amplified_score=amplified,
            certainty=certainty,
            regime=regime,
            pillars=pillars,
            tier_counts=tier_counts,
            indicators=[
                IndicatorReport(
                    name=i.name,
                    label=i.label,
                    pillar=i.pillar,
                    value=i.value,
                    tier=i.tier,
                    source=i.source,
                )
                for i in indicators
            ],
            canaries=canaries,
            crash_amplifiers=amplifiers,
            total_bonus=total_bonus,
            playbook=get_playbook(regime),
            summary=build_summary(
                amplified,
                certainty,
                {p.label: p.score for p in pillars.values()},
            ),
            timestamp=datetime.now(timezone.utc),
        )
