"""
Canaries and Crash Amplifiers

Canaries: indicators beyond their warning thresholds, ranked.
Crash amplifiers: acute conditions that add bonus points on top of the
weighted composite, so a fast crash is not averaged away by slow pillars.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Sequence

from ccpi.schemas.composite import Canary, CrashAmplifier, Severity
from ccpi.schemas.indicators import PILLAR_LABELS, Indicator, ResolutionTier
from ccpi.services.indicators.tiers import IndicatorDefinition

logger = logging.getLogger(__name__)

MAX_CANARIES = 5

SEVERITY_RANK = {Severity.HIGH: 0, Severity.MEDIUM: 1}


# =============================================================================
# CANARIES
# =============================================================================


def find_canaries(
    indicators: Sequence[Indicator],
    definitions: Mapping[str, IndicatorDefinition],
    signals: Mapping[str, float],
    pillar_weights: Mapping[str, float],
    limit: int = MAX_CANARIES,
) -> list[Canary]:
    """
    Top canaries: high severity first, then by impact on the composite
    (signal x share of pillar weight x pillar weight).
    """
    pillar_totals: dict[str, float] = {}
    for indicator in indicators:
        definition = definitions.get(indicator.name)
        if definition is not None:
            key = indicator.pillar.value
            pillar_totals[key] = pillar_totals.get(key, 0.0) + definition.weight

    canaries = []
    for indicator in indicators:
        definition = definitions.get(indicator.name)
        if definition is None or definition.canary is None:
            continue
        severity = definition.canary.severity(indicator.value)
        if severity is None:
            continue

        pillar = indicator.pillar.value
        share = definition.weight / pillar_totals[pillar] if pillar_totals.get(pillar) else 0.0
        impact = signals.get(indicator.name, 0.0) * share * pillar_weights.get(pillar, 0.0)
        canaries.append(
            Canary(
                indicator=definition.label,
                signal=f"{definition.label} at {definition.format_value(indicator.value)}",
                pillar=PILLAR_LABELS[indicator.pillar],
                severity=severity,
                impact_score=round(impact, 2),
            )
        )

    canaries.sort(key=lambda c: (SEVERITY_RANK[c.severity], -c.impact_score))
    return canaries[:limit]


# =============================================================================
# CRASH AMPLIFIERS
# =============================================================================


@dataclass(frozen=True)
class AmplifierRule:
    indicator: str
    condition: Callable[[float], bool]
    points: float
    reason: str


# Checked in order. Rules sharing an indicator are exclusive: the first
# match wins, so a -9% day scores +40 rather than +40 and +25.
AMPLIFIER_RULES = [
    AmplifierRule("qqq_daily_return", lambda v: v <= -9, 40, "QQQ daily loss of 9% or more"),
    AmplifierRule("qqq_daily_return", lambda v: v <= -6, 25, "QQQ daily loss of 6% or more"),
    AmplifierRule("qqq_sma50_gap", lambda v: v < 0, 20, "QQQ below its 50-day moving average"),
    AmplifierRule("vix", lambda v: v > 35, 20, "VIX above 35"),
    AmplifierRule("put_call_ratio", lambda v: v > 1.3, 15, "Put/call ratio above 1.3"),
    AmplifierRule("yield_curve", lambda v: v < 0, 15, "Inverted yield curve"),
]


def find_crash_amplifiers(
    indicators: Sequence[Indicator],
    rules: Sequence[AmplifierRule] = AMPLIFIER_RULES,
) -> list[CrashAmplifier]:
    """Only resolved values count; baseline defaults never amplify."""
    values = {i.name: i.value for i in indicators if i.tier != ResolutionTier.BASELINE}

    fired = []
    matched: set[str] = set()
    for rule in rules:
        if rule.indicator in matched or rule.indicator not in values:
            continue
        if rule.condition(values[rule.indicator]):
            matched.add(rule.indicator)
            fired.append(CrashAmplifier(reason=rule.reason, points=rule.points))

    if fired:
        logger.info(
            "Crash amplifiers: " + ", ".join(f"{a.reason} (+{a.points:g})" for a in fired)
        )
    return fired


def apply_amplifiers(composite: float, amplifiers: Sequence[CrashAmplifier]) -> float:
    return min(100.0, composite + sum(a.points for a in amplifiers))
