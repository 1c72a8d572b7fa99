"""FastAPI application for the todoops API.

This module creates and configures the FastAPI application instance
with its routes, error handlers and startup hooks.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from .. import config
from ..database import check_db_connection, init_db
from ..routes.task_routes import task_router
from ..seed import seed_demo_tasks_on_startup
from .error_handlers import register_error_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the database schema and demo data before serving requests."""
    init_db()
    if config.SEED_DEMO_DATA:
        seed_demo_tasks_on_startup()
    logger.info(f"todoops API ready, routes under {config.API_PREFIX}")
    yield


# Create FastAPI application instance
app = FastAPI(
    title="ToDoOps API",
    description="REST API for task tracking with a NEW -> IN_PROGRESS -> COMPLETED workflow",
    version="1.0.0",
    lifespan=lifespan
)

register_error_handlers(app)

# Include routers with API prefix
app.include_router(task_router, prefix=config.API_PREFIX)


@app.get("/health")
def health_check():
    """Health check endpoint reporting database connectivity."""
    if check_db_connection():
        return {"status": "healthy"}
    return JSONResponse(status_code=503, content={"status": "unhealthy"})
