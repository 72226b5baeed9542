"""
SMS Job Search API - Main Application Entry Point

This module initializes the FastAPI application with:
- Dispatcher wiring (job store, preferences, sessions, vision model)
- Optional background session sweep
- Prometheus metrics
- API router registration

Architecture:
    FastAPI App
    ├── Lifespan Management (startup/shutdown)
    ├── Prometheus Middleware + /metrics
    └── API Router
        └── /api/sms - Inbound SMS gateway webhook
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from smsjobs.api import api_router
from smsjobs.config import get_settings
from smsjobs.logging_config import setup_logging
from smsjobs.middleware.metrics import setup_metrics
from smsjobs.scheduler import start_scheduler, stop_scheduler
from smsjobs.services.dispatcher import build_dispatcher

setup_logging()
logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle events.

    Startup:
        1. Build the dispatcher and its shared HTTP/OpenAI/Redis clients
        2. Start the background session sweep if configured

    Shutdown:
        1. Stop the scheduler
        2. Close collaborator clients
    """
    dispatcher = build_dispatcher(settings)
    app.state.dispatcher = dispatcher
    start_scheduler(dispatcher.sessions, settings.session_sweep_interval_seconds)
    logger.info(
        f"SMS job search ready (job_store={settings.has_job_store}, "
        f"vision_model={settings.has_vision_model}, sessions={settings.session_backend})"
    )
    yield
    stop_scheduler()
    await dispatcher.close()


app = FastAPI(
    title="SMS Job Search API",
    description="Natural-language job search and claiming over SMS",
    version="0.1.0",
    lifespan=lifespan,
)

if settings.metrics_enabled:
    setup_metrics(app)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
