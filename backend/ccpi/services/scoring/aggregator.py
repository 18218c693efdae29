"""
Pillar Aggregator

Normalises each indicator to a 0-100 risk signal with its own transform
and combines a pillar's indicators by their intra-pillar weights.
"""

import logging
from typing import Sequence

from ccpi.schemas.composite import IndicatorContribution, PillarScore
from ccpi.schemas.indicators import PILLAR_LABELS, Indicator, Pillar, ResolutionTier
from ccpi.services.indicators.tiers import IndicatorDefinition
from ccpi.services.indicators.transforms import clamp

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50.0


class PillarAggregator:
    def __init__(self, definitions: Sequence[IndicatorDefinition]):
        self._definitions = {d.name: d for d in definitions}

    def definition(self, name: str) -> IndicatorDefinition:
        return self._definitions[name]

    def signal(self, indicator: Indicator) -> float:
        return clamp(self._definitions[indicator.name].transform.score(indicator.value))

    def aggregate(
        self,
        pillar: Pillar,
        indicators: Sequence[Indicator],
        weight: float,
    ) -> PillarScore:
        components = []
        for indicator in indicators:
            if indicator.pillar != pillar:
                continue
            definition = self._definitions.get(indicator.name)
            if definition is None:
                logger.warning(f"No definition for {indicator.name}, skipped")
                continue
            components.append(
                IndicatorContribution(
                    name=indicator.name,
                    label=indicator.label,
                    value=indicator.value,
                    tier=indicator.tier,
                    signal=round(self.signal(indicator), 2),
                    weight=definition.weight,
                )
            )

        total_weight = sum(c.weight for c in components)
        if not components or total_weight == 0:
            # Nothing to measure: neutral and flagged
            return PillarScore(
                pillar=pillar,
                label=PILLAR_LABELS[pillar],
                weight=weight,
                score=NEUTRAL_SCORE,
                components=components,
                low_certainty=True,
            )

        score = sum(c.signal * c.weight for c in components) / total_weight
        return PillarScore(
            pillar=pillar,
            label=PILLAR_LABELS[pillar],
            weight=weight,
            score=round(clamp(score), 1),
            components=components,
            low_certainty=all(c.tier == ResolutionTier.BASELINE for c in components),
        )
