"""
Module: api.app

Purpose:
    HTTP boundary for pattern merging.

Endpoints:
    GET    /health               → health check
    POST   /api/merge/upload     → PDF → stored page images (JSON or SSE progress)
    POST   /api/merge/process    → grid of stored pages → merged pattern
    DELETE /api/merge/cleanup    → delete a job's stored artifacts (authenticated)

Key Functions:
    - create_app(): Build the FastAPI application

Dependencies:
    - fastapi: Routing, uploads, streaming responses
    - pattern_toolkit.service: Job orchestration

Design Notes:
    Engine errors are translated here, once: the client receives the
    short user message, the internal kind and detail go to the log.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, File, Header, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, StreamingResponse

from .. import __version__
from ..core.errors import (
    BudgetExceeded,
    OperationCancelled,
    PatternError,
    RenderError,
)
from ..service import PatternService, ServiceConfig
from ..storage import ArtifactStore, LocalArtifactStore
from .auth import StaticTokenVerifier, TokenVerifier, bearer_token

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
SSE_MEDIA_TYPE = "text/event-stream"


def error_status(error: PatternError) -> int:
    """HTTP status for an engine error."""
    if isinstance(error, RenderError):
        return 422
    if isinstance(error, BudgetExceeded):
        return 504
    if isinstance(error, OperationCancelled):
        return 409
    return 400


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def create_app(
    config: Optional[ServiceConfig] = None,
    *,
    store: Optional[ArtifactStore] = None,
    verifier: Optional[TokenVerifier] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Service configuration (default: from environment)
        store: Artifact store (default: LocalArtifactStore at config.storage_root)
        verifier: Session verifier for cleanup (default: config.cleanup_token)

    Example:
        $ uvicorn --factory pattern_toolkit.api.app:create_app
    """
    config = config or ServiceConfig.from_env()
    store = store or LocalArtifactStore(config.storage_root)
    verifier = verifier or StaticTokenVerifier(config.cleanup_token)
    service = PatternService(store, config)

    app = FastAPI(title="Pattern Merge Service", version=__version__)
    app.state.service = service

    @app.exception_handler(PatternError)
    async def pattern_error_handler(request: Request, exc: PatternError) -> JSONResponse:
        logger.warning(f"{request.method} {request.url.path} failed ({exc.kind}): {exc}")
        return _error(exc.user_message, error_status(exc))

    @app.get("/health")
    def health():
        return {"status": "ok", "version": __version__}

    @app.post("/api/merge/upload")
    async def upload(
        request: Request,
        file: Optional[UploadFile] = File(None),
    ):
        if file is None:
            return _error("No file provided", 400)
        if file.content_type != PDF_MEDIA_TYPE:
            return _error("File must be a PDF", 400)

        data = await file.read()

        if request.headers.get("accept") == SSE_MEDIA_TYPE:
            return StreamingResponse(
                service.stream_upload(data),
                media_type=SSE_MEDIA_TYPE,
                headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
            )

        try:
            result = await run_in_threadpool(service.upload, data)
        except PatternError:
            raise
        except Exception:
            logger.exception("PDF upload error")
            return _error("Failed to process PDF", 500)
        return result.to_dict()

    @app.post("/api/merge/process")
    async def process(request: Request):
        try:
            body = await request.json()
        except ValueError:
            return _error("Invalid request body", 400)

        try:
            result = await run_in_threadpool(service.merge, body)
        except PatternError:
            raise
        except Exception:
            logger.exception("Merge process error")
            return _error("Failed to process merge", 500)
        return result.to_dict()

    @app.delete("/api/merge/cleanup")
    async def cleanup(
        request: Request,
        authorization: Optional[str] = Header(None),
    ):
        token = bearer_token(authorization)
        if token is None or not verifier.verify(token):
            return _error("Authentication required. Please sign in to cleanup resources.", 401)

        try:
            body = await request.json()
        except ValueError:
            return _error("Invalid request body", 400)
        job_id = body.get("jobId") if isinstance(body, dict) else None

        deleted = await run_in_threadpool(service.cleanup, job_id)
        return {"deleted": deleted, "jobId": job_id}

    return app
