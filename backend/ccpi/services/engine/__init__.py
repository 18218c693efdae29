"""
CCPI Engine Service

CONTRACT:
    Input:  CycleRequest (force_refresh)
    Output: CompositeResult

The only stateful piece of the engine: it owns the provider registry,
the resolver's provider hints and the result cache.
"""

from ccpi.services.engine.service import (
    CCPIService,
    CycleRequest,
    close_ccpi_service,
    get_ccpi_service,
)

__all__ = [
    "CCPIService",
    "CycleRequest",
    "close_ccpi_service",
    "get_ccpi_service",
]
