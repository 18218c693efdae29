"""
CCPI API Endpoints

Read the composite index, inspect or seed its cache, and describe the
data sources behind it.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ccpi.schemas.composite import CompositeResult, ExecutiveSummary
from ccpi.services.engine import CCPIService, CycleRequest, get_ccpi_service

logger = logging.getLogger(__name__)

router = APIRouter()


class CachedResultResponse(BaseModel):
    result: CompositeResult
    cached_at: datetime
    cache_age_seconds: float


class SeedCacheResponse(BaseModel):
    success: bool
    cached_at: datetime


class ExecutiveSummaryRequest(BaseModel):
    """Summarize the given result, or the current one when omitted."""

    result: Optional[CompositeResult] = None


@router.get("", response_model=CompositeResult)
async def get_ccpi(
    refresh: bool = Query(False, description="Force a new resolution cycle"),
    service: CCPIService = Depends(get_ccpi_service),
):
    """
    Current CCPI reading.

    Served from cache while fresh (5 minutes by default). Always returns a
    numeric composite: indicators that no source could supply fall back to
    their baseline and are reported as such.
    """
    return await service.execute(CycleRequest(force_refresh=refresh))


@router.get("/cache", response_model=CachedResultResponse)
async def get_cached_ccpi(service: CCPIService = Depends(get_ccpi_service)):
    """Cached reading only. 404 when nothing fresh is cached."""
    entry = service.cached_entry()
    if entry is None:
        return JSONResponse(status_code=404, content={"cached": False})

    age = service.cache_age(entry)
    return CachedResultResponse(
        result=entry.result,
        cached_at=datetime.now(timezone.utc) - timedelta(seconds=age),
        cache_age_seconds=round(age, 1),
    )


@router.post("/cache", response_model=SeedCacheResponse)
async def seed_ccpi_cache(
    result: CompositeResult,
    service: CCPIService = Depends(get_ccpi_service),
):
    """Pre-seed the cache with a result computed by the scheduled refresher."""
    service.seed_cache(result)
    return SeedCacheResponse(success=True, cached_at=datetime.now(timezone.utc))


@router.get("/sources")
async def get_sources(service: CCPIService = Depends(get_ccpi_service)):
    """Provider availability and each indicator's source tiers."""
    return service.sources_status()


@router.post("/executive-summary", response_model=ExecutiveSummary)
async def executive_summary(
    request: ExecutiveSummaryRequest,
    service: CCPIService = Depends(get_ccpi_service),
):
    """One-sentence summary for the dashboard header."""
    result = request.result
    if result is None:
        result = await service.execute(CycleRequest())
    return await service.summarize(result)
