"""
Code Interpreter - Main Application Entry Point.

HTTP tool-call surface for the TypeScript/JavaScript execution sandbox.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from code_interpreter.api import tools_router
from code_interpreter.config import get_settings
from code_interpreter.services import sandbox_lifespan

settings = get_settings()

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.environment == "production"
        else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        0 if settings.debug else 20
    )
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    async with sandbox_lifespan(app):
        yield


# Create FastAPI application
app = FastAPI(
    title="TypeScript/JavaScript Code Interpreter",
    description="""
Run untrusted TypeScript and JavaScript snippets behind static safety analysis.

## Tools

- **execute-typescript** / **execute-javascript**: analyze, then run in a short-lived child process
- **validate-code**: report analyzer findings without running anything
- **server-status**: active executions and sandbox limits

## Usage

1. List tools with `GET /api/v1/tools`
2. Invoke one with `POST /api/v1/tools/call`
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


# Exception handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "code": "INTERNAL_ERROR",
            "details": str(exc) if settings.debug else None
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures in the API error envelope."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "Invalid request body",
            "code": "VALIDATION_ERROR",
            "details": str(exc.errors())
        }
    )


# Include routers
app.include_router(tools_router, prefix="/api/v1")


# Health check endpoint
@app.get("/health", tags=["health"])
async def health_check() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment
    }


# Root endpoint
@app.get("/", tags=["root"])
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/health"
    }


def run() -> None:
    """Console entry point."""
    uvicorn.run(
        "code_interpreter.main:app",
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers,
        reload=settings.debug
    )


if __name__ == "__main__":
    run()
