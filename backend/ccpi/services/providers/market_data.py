"""
Structured Market Data Providers

Plain request/response JSON APIs keyed by a series id or ticker:
- FRED (St. Louis Fed): macro and volatility series
- Financial Modeling Prep: quotes and P/E ratios
- Twelve Data: quotes
- CNN Fear & Greed: sentiment index (no key)
- Yahoo Finance (yfinance): closes, returns, SMA gaps and ratios (no key)

Each provider raises ExternalAPIError / RateLimitError / MalformedPayloadError
on failure; the Value Extractor turns those into Failure outcomes.
"""

import asyncio
import logging
from typing import Any, Optional

import aiohttp
import yfinance as yf

from ccpi.services.base import ExternalAPIError, MalformedPayloadError, RateLimitError
from ccpi.services.providers.calculations import (
    clean_closes,
    percent_change,
    sma_gap_percent,
)
from ccpi.services.providers.interface import Provider, ProviderKind, Query

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


def _to_float(raw: Any, provider: str, what: str) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise MalformedPayloadError(provider, f"{what} is not numeric: {raw!r}")


class HTTPMarketDataProvider(Provider):
    """Base class for aiohttp-backed JSON providers."""

    kind = ProviderKind.STRUCTURED

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = "",
        headers: Optional[dict] = None,
        session_timeout: float = 15.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._headers = headers or {}
        self._session_timeout = session_timeout
        self._session: Optional[aiohttp.ClientSession] = None

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._session_timeout),
                headers=self._headers,
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _get_json(self, url: str, params: Optional[dict] = None) -> Any:
        session = await self._ensure_session()
        try:
            async with session.get(url, params=params) as response:
                if response.status == 429:
                    raise RateLimitError(self.name, "HTTP 429")
                if response.status != 200:
                    raise ExternalAPIError(self.name, f"HTTP {response.status}")
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise MalformedPayloadError(self.name, f"invalid JSON: {e}")
        except aiohttp.ClientError as e:
            raise ExternalAPIError(self.name, f"{type(e).__name__}: {e}")


class FredProvider(HTTPMarketDataProvider):
    """
    FRED series observations.

    Query.series is the FRED series id (e.g. VIXCLS, DFF, T10Y2Y).
    Returns the latest non-missing observation.
    """

    @property
    def name(self) -> str:
        return "fred"

    async def fetch(self, query: Query) -> float:
        payload = await self._get_json(
            f"{self.base_url}/series/observations",
            params={
                "series_id": query.series,
                "api_key": self.api_key,
                "file_type": "json",
                "sort_order": "desc",
                "limit": 10,
            },
        )
        if not isinstance(payload, dict):
            raise MalformedPayloadError(self.name, "unexpected payload shape")
        if "error_message" in payload:
            raise ExternalAPIError(self.name, payload["error_message"])

        # FRED marks missing days with "."
        for observation in payload.get("observations", []):
            value = observation.get("value")
            if value not in (None, "", "."):
                return _to_float(value, self.name, query.series)

        raise MalformedPayloadError(self.name, f"no observations for {query.series}")


class FMPProvider(HTTPMarketDataProvider):
    """Financial Modeling Prep quote endpoint."""

    FIELD_MAP = {
        "last": "price",
        "pe": "pe",
        "change_pct": "changesPercentage",
    }

    @property
    def name(self) -> str:
        return "fmp"

    async def fetch(self, query: Query) -> float:
        payload = await self._get_json(
            f"{self.base_url}/quote/{query.series}",
            params={"apikey": self.api_key},
        )
        if isinstance(payload, dict) and "Error Message" in payload:
            message = payload["Error Message"]
            if "limit" in message.lower():
                raise RateLimitError(self.name, message)
            raise ExternalAPIError(self.name, message)
        if not isinstance(payload, list) or not payload:
            raise MalformedPayloadError(self.name, f"empty quote for {query.series}")

        key = self.FIELD_MAP.get(query.field, query.field)
        return _to_float(payload[0].get(key), self.name, f"{query.series}.{key}")


class TwelveDataProvider(HTTPMarketDataProvider):
    """Twelve Data quote endpoint."""

    FIELD_MAP = {
        "last": "close",
        "change_pct": "percent_change",
    }

    @property
    def name(self) -> str:
        return "twelve_data"

    async def fetch(self, query: Query) -> float:
        payload = await self._get_json(
            f"{self.base_url}/quote",
            params={"symbol": query.series, "apikey": self.api_key},
        )
        if not isinstance(payload, dict):
            raise MalformedPayloadError(self.name, "unexpected payload shape")
        # Errors come back as 200 with a status field
        if payload.get("status") == "error":
            message = payload.get("message", "unknown error")
            if payload.get("code") == 429:
                raise RateLimitError(self.name, message)
            raise ExternalAPIError(self.name, message)

        key = self.FIELD_MAP.get(query.field, query.field)
        return _to_float(payload.get(key), self.name, f"{query.series}.{key}")


class CNNFearGreedProvider(HTTPMarketDataProvider):
    """CNN Fear & Greed index (0-100). Public endpoint, no credential."""

    def __init__(self, url: str, enabled: bool = True):
        super().__init__(
            base_url=url,
            headers={"User-Agent": BROWSER_USER_AGENT, "Accept": "application/json"},
        )
        self.enabled = enabled

    @property
    def name(self) -> str:
        return "cnn_fear_greed"

    def is_available(self) -> bool:
        return self.enabled

    async def fetch(self, query: Query) -> float:
        payload = await self._get_json(self.base_url)
        try:
            score = payload["fear_and_greed"]["score"]
        except (KeyError, TypeError):
            raise MalformedPayloadError(self.name, "missing fear_and_greed.score")
        return _to_float(score, self.name, "score")


class YahooFinanceProvider(Provider):
    """
    Yahoo Finance through yfinance (synchronous, run in the executor).

    Query.field selects the reduction over daily closes:
    - last: latest close
    - change_pct / change_pct:N: percent change over N sessions (default 1)
    - sma_gap:N: percent distance of the latest close from its N-day SMA
    - ratio:TICKER: latest close divided by TICKER's latest close
    """

    kind = ProviderKind.STRUCTURED

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    @property
    def name(self) -> str:
        return "yahoo_finance"

    def is_available(self) -> bool:
        return self.enabled

    @staticmethod
    def _period_for(sessions: int) -> str:
        if sessions <= 20:
            return "3mo"
        if sessions <= 120:
            return "1y"
        return "2y"

    def _closes(self, ticker: str, sessions: int):
        history = yf.Ticker(ticker).history(period=self._period_for(sessions))
        if history is None or history.empty or "Close" not in history:
            raise MalformedPayloadError(self.name, f"no price history for {ticker}")
        closes = clean_closes(history["Close"].to_numpy())
        if len(closes) == 0:
            raise MalformedPayloadError(self.name, f"no closes for {ticker}")
        return closes

    def _fetch_sync(self, query: Query) -> float:
        kind, _, arg = query.field.partition(":")

        if kind == "last":
            return float(self._closes(query.series, 5)[-1])
        if kind == "change_pct":
            periods = int(arg) if arg else 1
            return percent_change(self._closes(query.series, periods + 1), periods)
        if kind == "sma_gap":
            period = int(arg)
            return sma_gap_percent(self._closes(query.series, period), period)
        if kind == "ratio":
            numerator = self._closes(query.series, 5)[-1]
            denominator = self._closes(arg, 5)[-1]
            if denominator == 0:
                raise MalformedPayloadError(self.name, f"zero close for {arg}")
            return float(numerator / denominator)

        raise MalformedPayloadError(self.name, f"unsupported field {query.field!r}")

    async def fetch(self, query: Query) -> float:
        logger.debug(f"Fetching {query.series} ({query.field}) from Yahoo Finance")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._fetch_sync, query)
