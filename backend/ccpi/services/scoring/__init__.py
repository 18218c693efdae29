"""
Scoring Service

CONTRACT:
    Input:  list[Indicator]
    Output: CompositeResult

RESPONSIBILITIES:
    - Per-indicator normalisation to 0-100 risk signals
    - Pillar aggregation and weighted composite
    - Certainty from tier quality and signal agreement
    - Crash amplifiers, regime, canaries, playbook, summary

All scoring is deterministic. No language model takes part.
"""

from ccpi.services.scoring.aggregator import PillarAggregator
from ccpi.services.scoring.alerts import find_canaries, find_crash_amplifiers
from ccpi.services.scoring.certainty import CertaintyPolicy, compute_certainty
from ccpi.services.scoring.composite import CompositeEngine
from ccpi.services.scoring.regimes import build_summary, classify_regime, get_playbook

__all__ = [
    "PillarAggregator",
    "find_canaries",
    "find_crash_amplifiers",
    "CertaintyPolicy",
    "compute_certainty",
    "CompositeEngine",
    "build_summary",
    "classify_regime",
    "get_playbook",
]
