"""
Data Providers

CONTRACT:
    Input:  Query (one scalar fact)
    Output: Success(value) | Failure(reason)

Structured market-data APIs resolve as "live"; language models (see
ccpi.services.llm) resolve as "best-effort" through the chain runner.
"""

from ccpi.services.providers.chain import (
    AllFailed,
    ChainSuccess,
    ProviderChainRunner,
    ProviderCooldowns,
    resolve_via_chain,
)
from ccpi.services.providers.extractor import extract, parse_numeric_text
from ccpi.services.providers.interface import (
    Failure,
    FailureReason,
    Provider,
    ProviderKind,
    Query,
    Success,
)

__all__ = [
    "AllFailed",
    "ChainSuccess",
    "ProviderChainRunner",
    "ProviderCooldowns",
    "resolve_via_chain",
    "extract",
    "parse_numeric_text",
    "Failure",
    "FailureReason",
    "Provider",
    "ProviderKind",
    "Query",
    "Success",
]
