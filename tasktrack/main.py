"""
Main FastAPI application.

This is the entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from tasktrack import __version__
from tasktrack.core.config import settings
from tasktrack.core.logging_config import setup_logging
from tasktrack.errors import (
    TaskTrackError,
    app_error_handler,
    request_validation_handler,
    unhandled_error_handler,
)
from tasktrack.routers import health, task

logger = logging.getLogger(__name__)

ENDPOINTS = (
    ("GET", "/health", "Check API status"),
    ("GET", "/tasks", "Get all tasks"),
    ("POST", "/tasks", "Create new task"),
    ("PUT", "/tasks/:id", "Update task"),
    ("DELETE", "/tasks/:id", "Delete task"),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the startup banner; nothing to open or close for file storage."""
    setup_logging(settings.LOG_LEVEL)
    logger.info("%s is running on port %s (tasks file: %s)", settings.APP_NAME, settings.PORT, settings.TASKS_FILE)
    for method, path, summary in ENDPOINTS:
        logger.info("  %-6s %-12s - %s", method, path, summary)

    yield

    logger.info("Shutting down %s...", settings.APP_NAME)


# Create the FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="REST API for the task tracker, backed by a JSON file",
    version=__version__,
    lifespan=lifespan,
    debug=settings.DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.add_exception_handler(TaskTrackError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_error_handler)


# Include routers (API endpoints)
app.include_router(health.router, tags=["Health"])
app.include_router(task.router)
