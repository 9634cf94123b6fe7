"""
FastAPI Application

Main FastAPI application for QueryBot with:
- Lifespan management for agent initialization/cleanup
- CORS middleware for frontend integration
- Global exception handler for agent errors
- Health and chat endpoints

Usage:
    uvicorn querybot.api.main:app --reload --port 8000
"""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from querybot import __version__
from querybot.api.routes import chat, health
from querybot.config import get_settings
from querybot.models.agent import AgentError, DataSourceError
from querybot.runtime import create_runtime

logger = logging.getLogger(__name__)

# Global state shared with the route modules
app_state = {
    "runtime": None,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the agent runtime on startup and close it on shutdown."""
    config = get_settings()
    logger.info(f"Starting {config.app_name} API server...")

    try:
        if config.database.url:
            app_state["runtime"] = await create_runtime(config)
        else:
            logger.warning("DATABASE_URL not set; chat endpoint disabled.")
            app_state["runtime"] = None

        yield

    finally:
        logger.info("Shutting down API server...")
        runtime = app_state["runtime"]
        if runtime is not None:
            try:
                await runtime.close()
                logger.info("Data source closed")
            except Exception as e:
                logger.error(f"Error closing data source: {e}")
        app_state["runtime"] = None


app = FastAPI(
    title="QueryBot API",
    description="Answers natural-language questions about your database with LLM-written SQL",
    version=__version__,
    lifespan=lifespan,
)

cors_origins_env = os.getenv("CORS_ORIGINS", "")
cors_origins = (
    [origin.strip() for origin in cors_origins_env.split(",") if origin.strip()]
    if cors_origins_env
    else ["http://localhost:3000"]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AgentError)
async def agent_error_handler(request: Request, exc: AgentError) -> JSONResponse:
    """Handle agent errors with context."""
    logger.error(
        f"Agent error: {exc}",
        extra={"agent": exc.agent, "recoverable": exc.recoverable},
    )
    status_code = (
        status.HTTP_503_SERVICE_UNAVAILABLE
        if isinstance(exc, DataSourceError)
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": "agent_error", **exc.to_dict()},
    )


app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(chat.router, prefix="/api/v1", tags=["chat"])
