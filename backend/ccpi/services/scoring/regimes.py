"""
Regimes, Playbooks and Summaries

Pure functions of the score. Thresholds are inclusive lower bounds.
"""

from typing import Mapping

from ccpi.schemas.composite import Playbook, Regime, Summary

# (lower bound, regime), highest first
REGIMES = [
    (
        80,
        Regime(
            level=5,
            name="Crash Watch",
            color="red",
            description="Extreme risk across multiple pillars. Correction or crash increasingly likely.",
        ),
    ),
    (
        60,
        Regime(
            level=4,
            name="High Alert",
            color="orange",
            description="Elevated risk signals. Multiple warning indicators flashing.",
        ),
    ),
    (
        40,
        Regime(
            level=3,
            name="Caution",
            color="yellow",
            description="Caution warranted. Some metrics extended, defensive moves prudent.",
        ),
    ),
    (
        20,
        Regime(
            level=2,
            name="Normal",
            color="lightgreen",
            description="Market conditions normal but watchful. No major red flags.",
        ),
    ),
    (
        0,
        Regime(
            level=1,
            name="Low Risk",
            color="green",
            description="Healthy market conditions. Low crash probability.",
        ),
    ),
]


def classify_regime(score: float) -> Regime:
    for lower_bound, regime in REGIMES:
        if score >= lower_bound:
            return regime
    return REGIMES[-1][1]


PLAYBOOKS = {
    1: Playbook(
        bias="Risk-On / Bullish",
        strategies=[
            "Maintain or modestly increase exposure to AI leaders and proxies",
            "Use cash-secured puts on quality AI names (30-45 DTE, 0.30 delta)",
            "Sell covered calls above resistance on existing long positions",
            "Minimal index hedges, very small allocation to tail risk protection",
        ],
        allocation={
            "equities": "60-80% (focus on AI, tech, growth)",
            "defensive": "5-10% (value sectors)",
            "cash": "10-20%",
            "alternatives": "5-10% (optional: small gold/BTC allocation)",
        },
    ),
    2: Playbook(
        bias="Neutral / Watchful",
        strategies=[
            "Keep core AI/tech exposure but avoid large new leverage",
            "Continue income strategies: covered calls and moderate put selling",
            "Wheel strategy on robust AI-adjacent names",
            "Initiate small diagonal call spreads to reduce cost",
            "Small amount of index puts or inverse ETF as low-cost tail hedge",
        ],
        allocation={
            "equities": "50-70% (balanced across sectors)",
            "defensive": "10-20% (add some defensive sectors)",
            "cash": "15-25%",
            "alternatives": "5-10% (gold, BTC for diversification)",
        },
    ),
    3: Playbook(
        bias="Defensive / Cautious",
        strategies=[
            "Trim oversized AI positions, rotate capital to value sectors and cash",
            "Buy put spreads on AI-heavy indices or key names (30-90 DTE)",
            "Use collars on large long positions (long put + short call)",
            "Increase hedge notional to 20-40% of equity exposure",
            "Reduce use of leverage and margin",
        ],
        allocation={
            "equities": "40-60% (underweight AI/tech)",
            "defensive": "20-30% (utilities, consumer staples)",
            "cash": "20-30%",
            "alternatives": "10-15% (gold, BTC, defensive commodities)",
        },
    ),
    4: Playbook(
        bias="Heavily Defensive / Short Bias",
        strategies=[
            "Substantially reduce net long AI exposure",
            "Large put spreads on AI names and indices",
            "Ratio put spreads, calendars, diagonals to capture volatility",
            "Strategic short calls or call spreads against extended rallies",
            "Hedge 50-100% of AI equity exposure notionally",
        ],
        allocation={
            "equities": "20-40% (defensive sectors only)",
            "defensive": "30-40% (gold, bonds, defensive)",
            "cash": "30-40%",
            "alternatives": "10-20% (gold, BTC per risk tolerance)",
        },
    ),
    5: Playbook(
        bias="Maximum Defense / Crisis Mode",
        strategies=[
            "Very light or no net long AI exposure",
            "Deep OTM index puts or put spreads as tail risk",
            "Positions in volatility products via options structures",
            "Short or buy puts on most overextended AI names",
            "Focus on capital preservation and liquidity",
        ],
        allocation={
            "equities": "0-20% (only highest quality defensive)",
            "defensive": "40-50% (gold, bonds, cash equivalents)",
            "cash": "40-50%",
            "alternatives": "5-10% (optional BTC lottery ticket)",
        },
    ),
}


def get_playbook(regime: Regime) -> Playbook:
    return PLAYBOOKS[regime.level]


def build_summary(
    score: float,
    certainty: float,
    pillar_scores: Mapping[str, float],
) -> Summary:
    """Weekly headline plus one bullet per stressed pillar (top three, above 60)."""
    risk = round(score)
    confidence = round(certainty)

    if score >= 80:
        headline = (
            f"This week, we see a {risk} percent crash risk signal and we are "
            f"{confidence} percent confident in that assessment."
        )
    elif score >= 60:
        headline = (
            f"This week, we observe a {risk} percent elevated correction risk and we are "
            f"{confidence} percent confident in this reading."
        )
    elif score >= 40:
        headline = (
            f"This week, the CCPI reads {risk}, signaling moderate caution, "
            f"with {confidence} percent confidence."
        )
    else:
        headline = (
            f"This week, the CCPI reads {risk}, indicating relatively low crash risk, "
            f"with {confidence} percent confidence."
        )

    top = sorted(pillar_scores.items(), key=lambda item: item[1], reverse=True)[:3]
    bullets = [
        f"{label} stress elevated at {round(value)}/100, indicating concerning conditions in this area."
        for label, value in top
        if value > 60
    ]
    if not bullets:
        bullets.append("Most indicators remain within normal ranges with no extreme signals.")

    return Summary(headline=headline, bullets=bullets)
