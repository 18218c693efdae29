"""Structured providers: payload handling with the HTTP layer stubbed out."""

import numpy as np
import pytest

from ccpi.services.base import ExternalAPIError, MalformedPayloadError, RateLimitError
from ccpi.services.providers.calculations import percent_change, sma, sma_gap_percent
from ccpi.services.providers.extractor import extract
from ccpi.services.providers.interface import FailureReason, Query
from ccpi.services.providers.market_data import (
    CNNFearGreedProvider,
    FMPProvider,
    FredProvider,
    TwelveDataProvider,
    YahooFinanceProvider,
)


def stub_json(provider, payload):
    """Replace the HTTP call with a canned payload, recording the request."""
    requests = []

    async def _get_json(url, params=None):
        requests.append((url, params))
        return payload

    provider._get_json = _get_json
    return requests


# =============================================================================
# CALCULATIONS
# =============================================================================


def test_sma():
    data = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    result = sma(data, 3)

    assert np.isnan(result[0]) and np.isnan(result[1])
    assert list(result[2:]) == [2.0, 3.0, 4.0]


def test_percent_change_and_sma_gap():
    closes = np.arange(1.0, 61.0)

    assert percent_change(np.array([100.0, 110.0])) == pytest.approx(10.0)
    assert sma_gap_percent(closes, 50) == pytest.approx((60 - 35.5) / 35.5 * 100)
    assert np.isnan(sma_gap_percent(closes[:10], 50))


# =============================================================================
# HTTP PROVIDERS
# =============================================================================


@pytest.mark.asyncio
async def test_fred_skips_missing_observations():
    provider = FredProvider(api_key="key", base_url="https://fred.test/fred")
    requests = stub_json(
        provider, {"observations": [{"value": "."}, {"value": "17.52"}, {"value": "16.9"}]}
    )

    value = await provider.fetch(Query(indicator="vix", description="VIX", series="VIXCLS"))

    assert value == 17.52
    url, params = requests[0]
    assert url == "https://fred.test/fred/series/observations"
    assert params["series_id"] == "VIXCLS"
    assert params["sort_order"] == "desc"


@pytest.mark.asyncio
async def test_fred_errors():
    provider = FredProvider(api_key="key")
    query = Query(indicator="vix", description="VIX", series="VIXCLS")

    stub_json(provider, {"observations": []})
    with pytest.raises(MalformedPayloadError):
        await provider.fetch(query)

    stub_json(provider, {"error_message": "Bad Request. The series does not exist."})
    with pytest.raises(ExternalAPIError):
        await provider.fetch(query)


@pytest.mark.asyncio
async def test_fmp_maps_fields():
    provider = FMPProvider(api_key="key")
    stub_json(provider, [{"symbol": "SPY", "price": 601.3, "pe": 27.4}])

    value = await provider.fetch(Query(indicator="pe", description="P/E", series="SPY", field="pe"))

    assert value == 27.4


@pytest.mark.asyncio
async def test_fmp_limit_message_is_rate_limit():
    provider = FMPProvider(api_key="key")
    stub_json(provider, {"Error Message": "Limit Reach . Please upgrade your plan"})

    with pytest.raises(RateLimitError):
        await provider.fetch(Query(indicator="pe", description="P/E", series="SPY", field="pe"))


@pytest.mark.asyncio
async def test_twelve_data_quote_and_errors():
    provider = TwelveDataProvider(api_key="key")
    query = Query(indicator="qqq", description="QQQ", series="QQQ", field="change_pct")

    stub_json(provider, {"symbol": "QQQ", "close": "512.10", "percent_change": "-1.84"})
    assert await provider.fetch(query) == -1.84

    stub_json(provider, {"status": "error", "code": 429, "message": "API credits exhausted"})
    with pytest.raises(RateLimitError):
        await provider.fetch(query)

    stub_json(provider, {"status": "error", "code": 400, "message": "symbol not found"})
    with pytest.raises(ExternalAPIError):
        await provider.fetch(query)


@pytest.mark.asyncio
async def test_cnn_fear_greed_score():
    provider = CNNFearGreedProvider(url="https://cnn.test/graphdata")
    query = Query(indicator="fear_greed", description="Fear & Greed")

    stub_json(provider, {"fear_and_greed": {"score": 62.3, "rating": "greed"}})
    assert await provider.fetch(query) == 62.3

    stub_json(provider, {"unexpected": True})
    with pytest.raises(MalformedPayloadError):
        await provider.fetch(query)


@pytest.mark.asyncio
async def test_keyed_providers_without_key_are_not_called():
    provider = FMPProvider(api_key=None)
    requests = stub_json(provider, [{"pe": 27.4}])

    outcome = await extract(provider, Query(indicator="pe", description="P/E", series="SPY"))

    assert outcome.reason == FailureReason.MISSING_CREDENTIAL
    assert requests == []


# =============================================================================
# YAHOO FINANCE
# =============================================================================


@pytest.fixture
def yahoo():
    provider = YahooFinanceProvider()
    series = {
        "QQQ": np.arange(1.0, 61.0),
        "^VIX3M": np.array([19.0, 20.0]),
        "^VIX": np.array([15.0, 16.0]),
        "NVDA": np.array([100.0, 105.0, 110.0]),
    }
    provider._closes = lambda ticker, sessions: series[ticker]
    return provider


@pytest.mark.asyncio
async def test_yahoo_fields(yahoo):
    def query(series, field):
        return Query(indicator="t", description="t", series=series, field=field)

    assert await yahoo.fetch(query("QQQ", "last")) == 60.0
    assert await yahoo.fetch(query("QQQ", "change_pct")) == pytest.approx(100 / 59)
    assert await yahoo.fetch(query("NVDA", "change_pct:2")) == pytest.approx(10.0)
    assert await yahoo.fetch(query("QQQ", "sma_gap:50")) == pytest.approx((60 - 35.5) / 35.5 * 100)
    assert await yahoo.fetch(query("^VIX3M", "ratio:^VIX")) == pytest.approx(1.25)


@pytest.mark.asyncio
async def test_yahoo_unknown_field(yahoo):
    with pytest.raises(MalformedPayloadError):
        await yahoo.fetch(Query(indicator="t", description="t", series="QQQ", field="rsi:14"))


def test_yahoo_can_be_disabled():
    assert YahooFinanceProvider(enabled=False).is_available() is False
