"""FastAPI surface for contact submissions."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

import orjson
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from cip import __version__
from cip.config import Settings
from cip.ingestion.origin import client_address
from cip.ingestion.service import GENERIC_FAILURE_MESSAGE, IngestionService
from cip.models import SubmissionError
from cip.utils.logging import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["contact"])


@lru_cache(maxsize=1)
def get_ingestion_service() -> IngestionService:
    return IngestionService(Settings())


@router.post("/contact")
async def submit_contact(
    request: Request,
    service: IngestionService = Depends(get_ingestion_service),
) -> JSONResponse:
    """Accept one submission and acknowledge it."""
    peer = request.client.host if request.client else None
    address = client_address(request.headers, peer)

    body = await request.body()
    try:
        raw = orjson.loads(body) if body else None
    except orjson.JSONDecodeError:
        return _error(400, "Request body must be valid JSON")

    try:
        result = await run_in_threadpool(service.ingest, raw, address)
    except Exception:
        logger.exception("api.contact.unhandled address=%s", address)
        return _error(500, GENERIC_FAILURE_MESSAGE)

    return JSONResponse(
        status_code=result.status_code,
        content=result.body.model_dump(mode="json"),
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=SubmissionError(error=message).model_dump(mode="json"),
    )


def create_app(service: Optional[IngestionService] = None) -> FastAPI:
    """Build the application; ``service`` overrides the default wiring."""
    app = FastAPI(title="Contact Ingestion API", version=__version__)
    app.include_router(router)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    if service is not None:
        app.dependency_overrides[get_ingestion_service] = lambda: service

    return app
