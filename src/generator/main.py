"""Essay generation service — FastAPI server behind the web app.

Starts the service as a local HTTP server (port 8088).  The service is
stateless — every request makes exactly one provider call; nothing is
cached or retried.

Endpoints
---------
- ``GET  /health``         — health check
- ``POST /api/generate``   — generate an essay for ``{"keywords": ...}``
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from generator.config import config
from generator.essay import (
    EssayWriter,
    GenerationAborted,
    GenerationError,
    create_writer,
    generate_essay,
)

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)
for _name in ("httpx", "openai"):
    logging.getLogger(_name).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# nginx-style 499 "Client Closed Request"
HTTP_CLIENT_CLOSED_REQUEST = 499

ABORTED_MESSAGE = "Content generation was interrupted"
FAILED_MESSAGE = "Failed to generate content"


# ---------------------------------------------------------------------------
# Global state (initialised in lifespan)
# ---------------------------------------------------------------------------

writer: EssayWriter | None = None


# ---------------------------------------------------------------------------
# FastAPI lifespan — create the provider client on startup
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the EssayWriter on startup when a provider key is configured."""
    global writer

    logger.info("[GENERATOR] Server starting up...")
    try:
        writer = create_writer()
        logger.info("[GENERATOR] Writer created and ready.")
    except GenerationError as e:
        logger.warning("[GENERATOR] Writer not created: %s", e)

    yield

    logger.info("[GENERATOR] Server shutting down...")
    if writer is not None:
        await writer.aclose()
        writer = None


app = FastAPI(
    title="Academic Essay Generator",
    description="Generates scholarly essays with template references",
    version="0.1.0",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------

class GenerationRequest(BaseModel):
    """Request body for /api/generate."""
    keywords: str


class GenerationResult(BaseModel):
    content: str
    references: list[str]


class ErrorBody(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    model: str


# ---------------------------------------------------------------------------
# API Endpoints
# ---------------------------------------------------------------------------

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", model=config.model_name)


@app.post(
    "/api/generate",
    response_model=GenerationResult,
    responses={
        HTTP_CLIENT_CLOSED_REQUEST: {"model": ErrorBody},
        500: {"model": ErrorBody},
    },
)
async def generate(request: Request):
    """Generate an essay for the supplied keywords.

    The body is parsed by hand so that malformed JSON or a missing
    ``keywords`` field takes the same 500 path as a provider failure
    instead of FastAPI's 422.
    """
    try:
        payload = GenerationRequest.model_validate(await request.json())
        logger.info("[GENERATOR] Generating essay for: %s", payload.keywords[:100])

        essay = await generate_essay(
            writer or create_writer(),
            payload.keywords,
            timeout=config.generation_timeout_seconds,
            is_disconnected=request.is_disconnected,
        )
    except GenerationAborted as e:
        logger.warning("[GENERATOR] Generation aborted: %s", e)
        return JSONResponse(
            ErrorBody(error=ABORTED_MESSAGE).model_dump(),
            status_code=HTTP_CLIENT_CLOSED_REQUEST,
        )
    except Exception as e:
        logger.error("[GENERATOR] Content generation error: %s", e, exc_info=True)
        return JSONResponse(ErrorBody(error=FAILED_MESSAGE).model_dump(), status_code=500)

    logger.info("[GENERATOR] Essay generated (%d chars)", len(essay.content))
    return GenerationResult(content=essay.content, references=essay.references)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    """Launch the generation service."""
    port = config.port

    logger.info("[GENERATOR] Starting server on port %d", port)
    logger.info("[GENERATOR] Health:   http://localhost:%d/health", port)
    logger.info("[GENERATOR] Generate: http://localhost:%d/api/generate", port)

    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")


if __name__ == "__main__":
    main()
