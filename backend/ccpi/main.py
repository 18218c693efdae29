"""
CCPI Backend - FastAPI Application

Main entry point for the backend API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ccpi.core.config import settings
from ccpi.api.v1 import router as api_v1_router
from ccpi.services.engine import close_ccpi_service, get_ccpi_service

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    service = get_ccpi_service()
    logger.info(f"CCPI engine ready: {len(service.definitions)} indicators")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await close_ccpi_service()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    CCPI - Crash & Correction Prediction Index API

    ## Architecture
    - **Providers**: FRED, FMP, Twelve Data, CNN Fear & Greed, Yahoo Finance
    - **Best-effort tier**: LLM value extraction (OpenAI, Anthropic, Gemini, Groq, xAI, ...)
    - **Resolver**: per-indicator tier chain ending at a static baseline
    - **Composite Engine**: four weighted pillars, certainty, regime

    ## Core Principles
    - Always a number: every indicator resolves, at worst to its baseline
    - Every value says where it came from (live / best-effort / baseline)
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
# Add any additional origins from settings
if settings.allowed_origins:
    cors_origins.extend([o for o in settings.allowed_origins if o not in cors_origins])
if settings.frontend_url and settings.frontend_url not in cors_origins:
    cors_origins.append(settings.frontend_url)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "CCPI Backend API",
        "docs": "/docs",
        "health": "/health",
    }
