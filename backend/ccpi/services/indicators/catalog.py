"""
Indicator Catalog

Every CCPI indicator, its source tiers, baseline, transform and
intra-pillar weight. Baselines are long-run typical readings.

Pillars:
- Momentum & Technical: trend and implied volatility of tech-heavy indices
- Risk Appetite & Volatility: positioning and sentiment
- Valuation & Market Structure: multiples and concentration
- Macro: rates, credit, dollar, liquidity
"""

from ccpi.core.config import ConfigurationError
from ccpi.schemas.indicators import Pillar
from ccpi.services.indicators.tiers import (
    BaselineTier,
    CanaryRule,
    IndicatorDefinition,
    LanguageModelChainTier,
    StructuredApiTier,
)
from ccpi.services.indicators.transforms import (
    AsymmetricReturn,
    DrawdownFromReference,
    LinearBand,
    TwoSided,
)

LLM = LanguageModelChainTier()


def fred(series: str) -> StructuredApiTier:
    return StructuredApiTier(provider="fred", series=series)


def yahoo(ticker: str, field: str = "last") -> StructuredApiTier:
    return StructuredApiTier(provider="yahoo_finance", series=ticker, field=field)


def fmp(symbol: str, field: str = "last") -> StructuredApiTier:
    return StructuredApiTier(provider="fmp", series=symbol, field=field)


def twelve_data(symbol: str, field: str = "last") -> StructuredApiTier:
    return StructuredApiTier(provider="twelve_data", series=symbol, field=field)


# =============================================================================
# MOMENTUM & TECHNICAL
# =============================================================================

MOMENTUM = [
    IndicatorDefinition(
        name="nvda_momentum",
        label="NVDA 1-Month Momentum",
        pillar=Pillar.MOMENTUM,
        description="NVIDIA (NVDA) stock price percent change over the last month",
        tiers=(yahoo("NVDA", "change_pct:21"), LLM, BaselineTier(0.0)),
        transform=LinearBand(calm=10, stressed=-20),
        weight=6,
        signed=True,
        unit="%",
        canary=CanaryRule(below_medium=-10, below_high=-20),
        group="tech_momentum",
    ),
    IndicatorDefinition(
        name="sox_index",
        label="SOX Semiconductor Index",
        pillar=Pillar.MOMENTUM,
        description="PHLX Semiconductor Index (SOX) current level",
        tiers=(yahoo("^SOX"), LLM, BaselineTier(5000.0)),
        transform=DrawdownFromReference(reference=5500, full_stress_pct=27),
        weight=6,
        canary=CanaryRule(below_medium=4500, below_high=4250),
        group="tech_momentum",
    ),
    IndicatorDefinition(
        name="qqq_daily_return",
        label="QQQ Daily Return",
        pillar=Pillar.MOMENTUM,
        description="Invesco QQQ ETF percent change on the most recent trading day",
        tiers=(
            twelve_data("QQQ", "change_pct"),
            yahoo("QQQ", "change_pct"),
            LLM,
            BaselineTier(0.0),
        ),
        transform=AsymmetricReturn(neutral=30, per_point=7, downside_multiplier=5),
        weight=8,
        signed=True,
        unit="%",
        canary=CanaryRule(below_medium=-1.5, below_high=-6),
        group="qqq_trend",
    ),
    IndicatorDefinition(
        name="qqq_sma50_gap",
        label="QQQ vs 50-Day SMA",
        pillar=Pillar.MOMENTUM,
        description="Percent distance of the QQQ ETF price above its 50-day simple moving average (negative if below)",
        tiers=(yahoo("QQQ", "sma_gap:50"), LLM, BaselineTier(3.0)),
        transform=LinearBand(calm=5, stressed=-3),
        weight=7,
        signed=True,
        unit="%",
        canary=CanaryRule(below_medium=1, below_high=0),
        group="qqq_trend",
    ),
    IndicatorDefinition(
        name="qqq_sma200_gap",
        label="QQQ vs 200-Day SMA",
        pillar=Pillar.MOMENTUM,
        description="Percent distance of the QQQ ETF price above its 200-day simple moving average (negative if below)",
        tiers=(yahoo("QQQ", "sma_gap:200"), LLM, BaselineTier(8.0)),
        transform=LinearBand(calm=10, stressed=-5),
        weight=10,
        signed=True,
        unit="%",
        canary=CanaryRule(below_medium=2, below_high=0),
        group="qqq_trend",
    ),
    IndicatorDefinition(
        name="vix",
        label="VIX",
        pillar=Pillar.MOMENTUM,
        description="CBOE Volatility Index (VIX) current level",
        tiers=(fred("VIXCLS"), yahoo("^VIX"), LLM, BaselineTier(18.0)),
        transform=LinearBand(calm=12, stressed=40),
        weight=9,
        canary=CanaryRule(above_medium=25, above_high=35),
        group="volatility",
    ),
    IndicatorDefinition(
        name="vxn",
        label="VXN (Nasdaq-100 Volatility)",
        pillar=Pillar.MOMENTUM,
        description="CBOE Nasdaq-100 Volatility Index (VXN) current level",
        tiers=(fred("VXNCLS"), yahoo("^VXN"), BaselineTier(20.0)),
        transform=LinearBand(calm=14, stressed=45),
        weight=7,
        canary=CanaryRule(above_medium=25, above_high=35),
        group="volatility",
    ),
    IndicatorDefinition(
        name="rvx",
        label="RVX (Russell 2000 Volatility)",
        pillar=Pillar.MOMENTUM,
        description="CBOE Russell 2000 Volatility Index (RVX) current level",
        tiers=(fred("RVXCLS"), yahoo("^RVX"), BaselineTier(22.0)),
        transform=LinearBand(calm=16, stressed=45),
        weight=5,
        canary=CanaryRule(above_medium=30, above_high=40),
        group="volatility",
    ),
    IndicatorDefinition(
        name="vix_term_structure",
        label="VIX Term Structure (VIX3M / VIX)",
        pillar=Pillar.MOMENTUM,
        description="Ratio of the CBOE 3-month volatility index (VIX3M) to the VIX",
        tiers=(yahoo("^VIX3M", "ratio:^VIX"), LLM, BaselineTier(1.1)),
        transform=LinearBand(calm=1.25, stressed=0.85),
        weight=6,
        canary=CanaryRule(below_medium=1.05, below_high=0.95),
        group="volatility",
    ),
]

# =============================================================================
# RISK APPETITE & VOLATILITY
# =============================================================================

RISK_APPETITE = [
    IndicatorDefinition(
        name="put_call_ratio",
        label="CBOE Put/Call Ratio",
        pillar=Pillar.RISK_APPETITE,
        description="CBOE total equity put/call ratio",
        tiers=(LLM, BaselineTier(0.95)),
        transform=TwoSided(ideal=0.95, width=0.45),
        weight=18,
        canary=CanaryRule(
            above_medium=1.10, above_high=1.30, below_medium=0.85, below_high=0.60
        ),
        group="sentiment",
    ),
    IndicatorDefinition(
        name="fear_greed",
        label="CNN Fear & Greed Index",
        pillar=Pillar.RISK_APPETITE,
        description="CNN Fear & Greed Index score (0-100)",
        tiers=(
            StructuredApiTier(provider="cnn_fear_greed", series="fear_and_greed", field="score"),
            LLM,
            BaselineTier(50.0),
        ),
        transform=TwoSided(ideal=50, width=40),
        weight=15,
        canary=CanaryRule(
            above_medium=70, above_high=80, below_medium=30, below_high=20
        ),
        group="sentiment",
    ),
    IndicatorDefinition(
        name="aaii_bullish",
        label="AAII Bullish Sentiment",
        pillar=Pillar.RISK_APPETITE,
        description="AAII Investor Sentiment Survey bullish percentage",
        tiers=(LLM, BaselineTier(35.0)),
        transform=LinearBand(calm=30, stressed=60),
        weight=16,
        unit="%",
        canary=CanaryRule(above_medium=45, above_high=55),
        group="sentiment",
    ),
    IndicatorDefinition(
        name="spy_short_interest",
        label="SPY Short Interest",
        pillar=Pillar.RISK_APPETITE,
        description="SPY ETF short interest ratio as percentage of float",
        tiers=(LLM, BaselineTier(1.8)),
        transform=LinearBand(calm=2, stressed=8),
        weight=13,
        unit="%",
        canary=CanaryRule(above_medium=5, above_high=8),
    ),
]

# =============================================================================
# VALUATION & MARKET STRUCTURE
# =============================================================================

VALUATION = [
    IndicatorDefinition(
        name="spx_forward_pe",
        label="S&P 500 Forward P/E",
        pillar=Pillar.VALUATION,
        description="S&P 500 forward 12-month price-to-earnings ratio",
        tiers=(fmp("SPY", "pe"), LLM, BaselineTier(22.5)),
        transform=LinearBand(calm=15, stressed=30),
        weight=18,
        unit="x",
        canary=CanaryRule(above_medium=22, above_high=30),
        group="valuation",
    ),
    IndicatorDefinition(
        name="spx_price_to_sales",
        label="S&P 500 Price/Sales",
        pillar=Pillar.VALUATION,
        description="S&P 500 price-to-sales ratio",
        tiers=(LLM, BaselineTier(2.8)),
        transform=LinearBand(calm=1.5, stressed=3.5),
        weight=12,
        unit="x",
        canary=CanaryRule(above_medium=2.5, above_high=3.5),
        group="valuation",
    ),
    IndicatorDefinition(
        name="buffett_indicator",
        label="Buffett Indicator",
        pillar=Pillar.VALUATION,
        description="Buffett Indicator (US total market cap to GDP ratio) as a percentage",
        tiers=(LLM, BaselineTier(180.0)),
        transform=LinearBand(calm=80, stressed=220),
        weight=16,
        unit="%",
        canary=CanaryRule(above_medium=150, above_high=180),
        group="valuation",
    ),
    IndicatorDefinition(
        name="qqq_forward_pe",
        label="QQQ Forward P/E",
        pillar=Pillar.VALUATION,
        description="QQQ ETF forward price-to-earnings ratio",
        tiers=(fmp("QQQ", "pe"), LLM, BaselineTier(32.0)),
        transform=LinearBand(calm=18, stressed=45),
        weight=16,
        unit="x",
        canary=CanaryRule(above_medium=30, above_high=40),
        group="valuation",
    ),
    IndicatorDefinition(
        name="mag7_concentration",
        label="Magnificent 7 Concentration",
        pillar=Pillar.VALUATION,
        description="Magnificent 7 stocks (AAPL, MSFT, GOOGL, AMZN, NVDA, TSLA, META) market cap as percentage of QQQ ETF",
        tiers=(LLM, BaselineTier(55.0)),
        transform=LinearBand(calm=40, stressed=70),
        weight=15,
        unit="%",
        canary=CanaryRule(above_medium=50, above_high=60),
    ),
    IndicatorDefinition(
        name="shiller_cape",
        label="Shiller CAPE",
        pillar=Pillar.VALUATION,
        description="Shiller CAPE ratio (cyclically adjusted price-to-earnings ratio for S&P 500)",
        tiers=(LLM, BaselineTier(30.0)),
        transform=LinearBand(calm=15, stressed=40),
        weight=13,
        unit="x",
        canary=CanaryRule(above_medium=28, above_high=35),
        group="valuation",
    ),
    IndicatorDefinition(
        name="equity_risk_premium",
        label="Equity Risk Premium",
        pillar=Pillar.VALUATION,
        description="S&P 500 equity risk premium (earnings yield minus 10-year Treasury yield) in percent",
        tiers=(LLM, BaselineTier(2.0)),
        transform=LinearBand(calm=6, stressed=0),
        weight=10,
        signed=True,
        unit="%",
        canary=CanaryRule(below_medium=3, below_high=1.5),
    ),
]

# =============================================================================
# MACRO
# =============================================================================

MACRO = [
    IndicatorDefinition(
        name="fed_funds_rate",
        label="Fed Funds Rate",
        pillar=Pillar.MACRO,
        description="Effective federal funds rate in percent",
        tiers=(fred("DFF"), LLM, BaselineTier(4.33)),
        transform=LinearBand(calm=1, stressed=6),
        weight=17,
        unit="%",
        canary=CanaryRule(above_medium=4.5, above_high=6),
        group="rates",
    ),
    IndicatorDefinition(
        name="yield_curve",
        label="Yield Curve (10Y-2Y)",
        pillar=Pillar.MACRO,
        description="US Treasury 10-year minus 2-year yield spread in percentage points",
        tiers=(fred("T10Y2Y"), LLM, BaselineTier(0.25)),
        transform=LinearBand(calm=1.5, stressed=-1.0),
        weight=10,
        signed=True,
        unit="%",
        canary=CanaryRule(below_medium=0, below_high=-0.5),
        group="rates",
    ),
    IndicatorDefinition(
        name="high_yield_spread",
        label="High-Yield Credit Spread",
        pillar=Pillar.MACRO,
        description="ICE BofA US High Yield option-adjusted spread in percent",
        tiers=(fred("BAMLH0A0HYM2"), BaselineTier(3.5)),
        transform=LinearBand(calm=2.5, stressed=8),
        weight=12,
        unit="%",
        canary=CanaryRule(above_medium=5, above_high=8),
        group="credit",
    ),
    IndicatorDefinition(
        name="dollar_index",
        label="US Dollar Index (DXY)",
        pillar=Pillar.MACRO,
        description="US Dollar Index (DXY) current level",
        tiers=(yahoo("DX-Y.NYB"), LLM, BaselineTier(103.0)),
        transform=LinearBand(calm=90, stressed=115),
        weight=14,
        canary=CanaryRule(above_medium=105, above_high=110),
    ),
    IndicatorDefinition(
        name="ism_pmi",
        label="ISM Manufacturing PMI",
        pillar=Pillar.MACRO,
        description="ISM Manufacturing PMI latest reading",
        tiers=(LLM, BaselineTier(48.0)),
        transform=LinearBand(calm=56, stressed=42),
        weight=18,
        canary=CanaryRule(below_medium=50, below_high=46),
    ),
    IndicatorDefinition(
        name="fed_reverse_repo",
        label="Fed Reverse Repo",
        pillar=Pillar.MACRO,
        description="Federal Reserve overnight reverse repurchase agreements in billions of USD",
        tiers=(fred("RRPONTSYD"), BaselineTier(250.0)),
        transform=LinearBand(calm=0, stressed=2500),
        weight=13,
        unit="B",
        canary=CanaryRule(above_medium=1000, above_high=2000),
        group="credit",
    ),
    IndicatorDefinition(
        name="debt_to_gdp",
        label="Federal Debt to GDP",
        pillar=Pillar.MACRO,
        description="US federal debt as a percentage of GDP",
        tiers=(fred("GFDEGDQ188S"), BaselineTier(120.0)),
        transform=LinearBand(calm=90, stressed=140),
        weight=11,
        unit="%",
        canary=CanaryRule(above_medium=110, above_high=130),
    ),
]


INDICATORS: list[IndicatorDefinition] = MOMENTUM + RISK_APPETITE + VALUATION + MACRO


def validate_catalog(definitions: list[IndicatorDefinition]) -> None:
    """Indicator names are unique."""
    seen = set()
    for definition in definitions:
        if definition.name in seen:
            raise ConfigurationError(f"Duplicate indicator: {definition.name}")
        seen.add(definition.name)


def get_indicator_catalog() -> list[IndicatorDefinition]:
    validate_catalog(INDICATORS)
    return list(INDICATORS)
