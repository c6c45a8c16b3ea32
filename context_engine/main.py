# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Context Engine - two-stage (compactor + inference) chat service.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from context_engine.config import settings
from context_engine.routers import chat
from context_engine.schemas.errors import ErrorObject, ErrorResponse, ErrorType
from context_engine.services.providers.llm import CapabilityError
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Args:
        app (FastAPI): The FastAPI application instance.

    Yields:
        None: Control is yielded to the application between startup
            and shutdown.
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    logger.info(
        "Starting %s (inference=%s, compactor=%s, threshold=%d)",
        settings.APP_NAME,
        settings.INFERENCE_MODEL,
        settings.COMPACTOR_MODEL,
        settings.COMPACTOR_TOKEN_THRESHOLD,
    )
    yield
    logger.info("Shutting down %s", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description="Chat service that compacts long histories with a cheap model before inference",
    version="0.1.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat.router, prefix="/api", tags=["chat"])


@app.exception_handler(CapabilityError)
async def capability_error_handler(request: Request, exc: CapabilityError) -> JSONResponse:
    """Report a failed model call as a bad gateway."""
    logger.error("Model call failed on %s: %s", request.url.path, exc)
    body = ErrorResponse(
        error=ErrorObject(type=ErrorType.MODEL_ERROR, code=exc.model, message=str(exc)),
    )
    return JSONResponse(status_code=502, content=body.model_dump(mode="json"))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed request bodies before they reach the orchestrator."""
    errors = exc.errors()
    param = None
    if errors:
        loc = [p for p in errors[0]["loc"] if p != "body"]
        # JSON decode errors locate by byte offset, not by field
        if loc and isinstance(loc[0], str):
            param = ".".join(str(p) for p in loc)
    body = ErrorResponse(
        error=ErrorObject(
            type=ErrorType.INVALID_REQUEST,
            code=param,
            message="; ".join(e["msg"] for e in errors) or "Invalid request",
        ),
    )
    return JSONResponse(status_code=422, content=body.model_dump(mode="json"))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the failure and answer with a generic 500; details stay in the log."""
    logger.exception("Unhandled error on %s", request.url.path)
    body = ErrorResponse(
        error=ErrorObject(type=ErrorType.SERVER_ERROR, message="Internal server error"),
    )
    return JSONResponse(status_code=500, content=body.model_dump(mode="json"))


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint.

    Returns:
        dict[str, str]: A mapping containing a welcome message and links
            to documentation and health endpoints.
    """
    return {
        "message": "Context Engine Service",
        "docs": "/docs",
        "health": "/api/health",
    }
