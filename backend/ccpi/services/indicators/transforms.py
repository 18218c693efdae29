"""
Signal Transforms

Normalisation policies mapping a raw indicator value onto a 0-100 risk
signal (0 = calm, 100 = maximum stress). Every transform clamps.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


class Transform(ABC):
    @abstractmethod
    def score(self, value: float) -> float:
        pass


@dataclass(frozen=True)
class LinearBand(Transform):
    """
    Linear between a calm level (signal 0) and a stressed level (signal 100).

    Inverted indicators (lower is riskier) simply have calm > stressed.
    """

    calm: float
    stressed: float

    def __post_init__(self):
        if self.calm == self.stressed:
            raise ValueError("LinearBand needs distinct calm and stressed levels")

    def score(self, value: float) -> float:
        return clamp((value - self.calm) / (self.stressed - self.calm) * 100)


@dataclass(frozen=True)
class TwoSided(Transform):
    """Risk grows with distance from an ideal level in either direction."""

    ideal: float
    width: float

    def score(self, value: float) -> float:
        return clamp(abs(value - self.ideal) / self.width * 100)


@dataclass(frozen=True)
class AsymmetricReturn(Transform):
    """
    Daily percent return. Gains lower the signal slowly, losses raise it
    downside_multiplier times faster.
    """

    neutral: float = 30.0
    per_point: float = 7.0
    downside_multiplier: float = 5.0

    def score(self, value: float) -> float:
        if value >= 0:
            return clamp(self.neutral - value * self.per_point)
        return clamp(self.neutral - value * self.per_point * self.downside_multiplier)


@dataclass(frozen=True)
class DrawdownFromReference(Transform):
    """Percent drawdown below a reference level; full stress at full_stress_pct."""

    reference: float
    full_stress_pct: float

    def score(self, value: float) -> float:
        drawdown = (self.reference - value) / self.reference * 100
        return clamp(drawdown / self.full_stress_pct * 100)
