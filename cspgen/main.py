"""FastAPI application for CSP generation."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from cspgen.api.csp_routes import request_validation_handler
from cspgen.api.csp_routes import router as csp_router
from cspgen.config.loader import get_settings, load_settings, register_reload_handler
from cspgen.health import router as health_router
from cspgen.logging_config import setup_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    settings = load_settings()
    setup_logging(log_level=settings.log_level, json_format=settings.log_json)
    register_reload_handler()

    logger.info("cspgen_started", port=settings.listen_port)

    yield

    logger.info("cspgen_stopped")


app = FastAPI(title="cspgen", lifespan=lifespan)
app.add_exception_handler(RequestValidationError, request_validation_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(csp_router)
