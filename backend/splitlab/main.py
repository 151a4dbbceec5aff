"""Main FastAPI application."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from splitlab.config import get_settings
from splitlab.middleware.logging import LoggingMiddleware, configure_logging, get_logger
from splitlab.middleware.ab_assignment import VISITOR_COOKIE_NAME
from splitlab.api import experiments, health, setup
from splitlab.database import engine, Base
from splitlab.dependencies import get_config_store
import splitlab.models  # noqa: F401  (registers tables on Base.metadata)

settings = get_settings()
configure_logging(logging.DEBUG if settings.debug else logging.INFO)
logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown."""
    # Startup
    Base.metadata.create_all(bind=engine)
    logger.info("database_tables_ready")

    logger.info(
        "splitlab_started",
        log_store=settings.log_store_backend,
        experiments_config=settings.experiments_config_path,
        experiments=get_config_store().load().test_ids()
    )

    yield  # App runs here

    # Shutdown
    logger.info("splitlab_shutdown")

# Create FastAPI app
app = FastAPI(
    title="SplitLab",
    description="A/B testing service: sticky assignment, exposure and event logging, results",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

# CORS middleware - credentials are required for the assignment cookies
allowed_origins = [
    "http://localhost:5173",  # Local development
    "http://localhost:3000",  # Alternative local port
    settings.frontend_url,     # Production frontend
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Trace-ID"]
)

# Logging middleware
app.add_middleware(LoggingMiddleware, visitor_cookie=VISITOR_COOKIE_NAME)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(experiments.router, tags=["experiments"])
app.include_router(setup.router, tags=["setup"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "SplitLab",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "disabled",
        "endpoints": {
            "health": "/health",
            "dashboard": "GET /api/experiments/dashboard",
            "pricing": "GET /api/experiments/pricing-view",
            "events": "POST /api/experiments/events",
            "config": "GET /api/experiments/config",
            "results": "GET /api/experiments/results"
        }
    }


# uvicorn splitlab.main:app --reload
