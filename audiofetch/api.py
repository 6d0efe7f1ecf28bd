"""
audiofetch.api - FastAPI application.

Exposes the Info and Download flows as JSON endpoints. Errors are returned
as ``{"error": ..., "details": ...}`` with 400 for request problems
(including duration rejections) and 500 for everything else.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from audiofetch import __version__
from audiofetch.config import AudioFetchConfig, load_config
from audiofetch.exceptions import AudioFetchError
from audiofetch.logging import logger
from audiofetch.pipeline import Pipeline, build_pipeline
from audiofetch.utils import truncate


class DownloadBody(BaseModel):
    """Download request body. ``locator`` is accepted as an alias of ``url``."""

    url: str | None = None
    locator: str | None = None
    format: str | None = None


class DownloadResponse(BaseModel):
    url: str


def get_pipeline(request: Request) -> Pipeline:
    """Return the pipeline attached to the application."""
    return request.app.state.pipeline


PipelineDep = Annotated[Pipeline, Depends(get_pipeline)]


def create_app(
    config: AudioFetchConfig | None = None,
    pipeline: Pipeline | None = None,
) -> FastAPI:
    """Build the FastAPI app.

    Args:
        config: Service configuration (loaded from file/env when omitted)
        pipeline: Pre-built pipeline, e.g. with in-memory storage
    """
    if pipeline is None:
        config = config or load_config()
        pipeline = build_pipeline(config)

    app = FastAPI(title="audiofetch", version=__version__)
    app.state.pipeline = pipeline

    @app.exception_handler(AudioFetchError)
    async def handle_audiofetch_error(request: Request, exc: AudioFetchError) -> JSONResponse:
        status = 400 if exc.client_error else 500
        limit = request.app.state.pipeline.config.diagnostics_max_chars
        if status == 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=status,
            content={"error": exc.message, "details": truncate(exc.details, limit)},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": problems},
        )

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/info")
    def info(pipeline: PipelineDep, q: str | None = None) -> Any:
        """Full metadata for a URL or search query."""
        return pipeline.info(q)

    @app.post("/api/download", response_model=DownloadResponse)
    def download(body: DownloadBody, pipeline: PipelineDep) -> DownloadResponse:
        """Convert a source to audio and return its public URL."""
        request = pipeline.build_request(body.url or body.locator, body.format)
        artifact = pipeline.download(request)
        return DownloadResponse(url=artifact.public_url)

    return app
