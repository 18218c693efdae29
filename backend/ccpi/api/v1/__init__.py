"""
API v1 Router

All API endpoints for the dashboard and the scheduled refresher.
"""

from fastapi import APIRouter

from ccpi.api.v1.endpoints import ccpi

router = APIRouter()

# Include all endpoint routers
router.include_router(ccpi.router, prefix="/ccpi", tags=["CCPI"])
