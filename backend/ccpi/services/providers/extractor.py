"""
Value Extractor

Asks exactly one provider for one scalar and validates the answer.

Every outcome is returned as a value (Success or Failure), never raised:
- missing_credential: provider not configured, nothing was sent
- timeout: provider did not answer within the timeout
- rate_limited: provider answered 429 / quota exceeded
- upstream_error: non-2xx, transport error or malformed payload
- unparseable_value: answer is not a single finite (positive) number

No retries here. Retrying means moving on to the next provider.
"""

import asyncio
import logging
import math
import re
from typing import Optional, Union

from ccpi.services.base import ExternalAPIError, RateLimitError
from ccpi.services.providers.interface import (
    Failure,
    FailureReason,
    Outcome,
    Provider,
    Query,
    Success,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

_NUMBER_RE = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")
_THOUSANDS_RE = re.compile(r"[-+]?\d{1,3}(?:,\d{3})+(?:\.\d+)?")


def parse_numeric_text(text: str) -> Optional[float]:
    """
    Reduce free text to a single number.

    Accepts "34.2", " 34.2\\n", "`34.2`", "\\"1,234\\"", "$812.5", "18%".
    Rejects prose, several numbers, "null", "N/A", empty answers and commas
    that are not thousands separators ("34,2").
    """
    cleaned = text.strip().strip("`").strip().strip("\"'").strip()
    cleaned = cleaned.rstrip(".").rstrip("%").strip()
    if cleaned.startswith("$"):
        cleaned = cleaned[1:]
    if "," in cleaned:
        if not _THOUSANDS_RE.fullmatch(cleaned):
            return None
        cleaned = cleaned.replace(",", "")

    if not _NUMBER_RE.fullmatch(cleaned):
        return None
    return float(cleaned)


def _coerce(raw: Union[float, int, str, None]) -> Optional[float]:
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        return parse_numeric_text(raw)
    return None


def validate_value(value: Optional[float], query: Query) -> bool:
    """Finite, and positive unless the query allows signed values."""
    if value is None or not math.isfinite(value):
        return False
    if query.positive_only and value <= 0:
        return False
    return True


async def extract(
    provider: Provider,
    query: Query,
    timeout: float = DEFAULT_TIMEOUT,
) -> Outcome:
    """Invoke one provider once, with a bounded timeout."""
    if not provider.is_available():
        return Failure(FailureReason.MISSING_CREDENTIAL, provider.name)

    try:
        raw = await asyncio.wait_for(provider.fetch(query), timeout=timeout)
    except asyncio.TimeoutError:
        logger.debug(f"{provider.name}: timeout after {timeout}s for {query.indicator}")
        return Failure(FailureReason.TIMEOUT, provider.name, f"no answer within {timeout}s")
    except RateLimitError as e:
        logger.debug(f"{provider.name}: rate limited for {query.indicator}")
        return Failure(FailureReason.RATE_LIMITED, provider.name, e.message)
    except ExternalAPIError as e:
        logger.debug(f"{provider.name}: upstream error for {query.indicator}: {e.message}")
        return Failure(FailureReason.UPSTREAM_ERROR, provider.name, e.message)
    except Exception as e:
        logger.warning(f"{provider.name} error for {query.indicator}: {e}")
        return Failure(
            FailureReason.UPSTREAM_ERROR, provider.name, f"{type(e).__name__}: {e}"
        )

    value = _coerce(raw)
    if not validate_value(value, query):
        logger.debug(f"{provider.name}: rejected {raw!r} for {query.indicator}")
        return Failure(
            FailureReason.UNPARSEABLE_VALUE, provider.name, f"rejected answer {str(raw)[:80]!r}"
        )

    return Success(value=value, provider=provider.name)
