"""Value Extractor: one provider, one call, an explicit outcome."""

import math

import pytest

from ccpi.services.base import ExternalAPIError, MalformedPayloadError, RateLimitError
from ccpi.services.providers.extractor import extract, parse_numeric_text
from ccpi.services.providers.interface import (
    Failure,
    FailureReason,
    ProviderKind,
    Query,
    Success,
)
from fakes import FakeProvider

QUERY = Query(indicator="vix", description="CBOE Volatility Index (VIX) current level")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("34.2", 34.2),
        ("  34.2\n", 34.2),
        ("`34.2`", 34.2),
        ('"1,234.5"', 1234.5),
        ("$812.5", 812.5),
        ("18%", 18.0),
        ("0.89.", 0.89),
        ("-0.35", -0.35),
        ("12,345,678", 12345678.0),
    ],
)
def test_parse_numeric_text_accepts_single_numbers(text, expected):
    assert parse_numeric_text(text) == pytest.approx(expected)


@pytest.mark.parametrize(
    "text",
    [
        "null",
        "N/A",
        "",
        "The VIX is 34.2",
        "34.2 or 35",
        "about 20",
        "NaN",
        "34,2",
        "1,23,456",
        "1234,5",
    ],
)
def test_parse_numeric_text_rejects_prose(text):
    assert parse_numeric_text(text) is None


@pytest.mark.asyncio
async def test_numeric_answer_is_success():
    provider = FakeProvider("fred", 17.5)

    outcome = await extract(provider, QUERY)

    assert outcome == Success(value=17.5, provider="fred")
    assert provider.calls == [QUERY]


@pytest.mark.asyncio
async def test_text_answer_is_parsed():
    provider = FakeProvider("openai", " 34.2 ", kind=ProviderKind.LANGUAGE_MODEL)

    outcome = await extract(provider, QUERY)

    assert isinstance(outcome, Success)
    assert outcome.value == 34.2


@pytest.mark.asyncio
async def test_missing_credential_makes_no_call():
    provider = FakeProvider("fred", 17.5, available=False)

    outcome = await extract(provider, QUERY)

    assert isinstance(outcome, Failure)
    assert outcome.reason == FailureReason.MISSING_CREDENTIAL
    assert provider.calls == []


@pytest.mark.asyncio
async def test_slow_provider_times_out():
    provider = FakeProvider("fred", 17.5, delay=1.0)

    outcome = await extract(provider, QUERY, timeout=0.05)

    assert isinstance(outcome, Failure)
    assert outcome.reason == FailureReason.TIMEOUT


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error,reason",
    [
        (RateLimitError("fred", "HTTP 429"), FailureReason.RATE_LIMITED),
        (ExternalAPIError("fred", "HTTP 500"), FailureReason.UPSTREAM_ERROR),
        (MalformedPayloadError("fred", "no observations"), FailureReason.UPSTREAM_ERROR),
        (ConnectionResetError("peer reset"), FailureReason.UPSTREAM_ERROR),
    ],
)
async def test_errors_become_failures(error, reason):
    outcome = await extract(FakeProvider("fred", error), QUERY)

    assert isinstance(outcome, Failure)
    assert outcome.reason == reason
    assert outcome.provider == "fred"


@pytest.mark.asyncio
@pytest.mark.parametrize("answer", ["null", "I don't know", "34,2", 0.0, -3.0, math.nan, math.inf, None])
async def test_invalid_answers_are_unparseable(answer):
    outcome = await extract(FakeProvider("openai", answer), QUERY)

    assert isinstance(outcome, Failure)
    assert outcome.reason == FailureReason.UNPARSEABLE_VALUE


@pytest.mark.asyncio
async def test_signed_query_accepts_negative_values():
    query = Query(indicator="yield_curve", description="10Y-2Y spread", positive_only=False)

    outcome = await extract(FakeProvider("fred", "-0.42"), query)

    assert outcome == Success(value=-0.42, provider="fred")
