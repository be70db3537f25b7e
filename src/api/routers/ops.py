import os
import logging

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api.backend import BackendAPI
from api.dependencies import get_backend, get_options_store
from storage.options_store import OptionsStore
from todo_planner.models import Options

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(backend: BackendAPI = Depends(get_backend)) -> dict:
    """Health check endpoint for container orchestration."""
    return {
        "status": "healthy",
        "profile": os.getenv("DEPLOYMENT_PROFILE", "unknown"),
        "canvas_base_url": backend.client.config.base_url,
        "cached_windows": len(backend.cache.entries()),
    }


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@router.get("/options")
async def get_options(store: OptionsStore = Depends(get_options_store)) -> dict:
    return store.load().model_dump()


@router.put("/options")
async def update_options(
    payload: Options,
    store: OptionsStore = Depends(get_options_store),
) -> dict:
    store.save(payload)
    logger.info(f"Options updated: {payload.model_dump()}")
    return payload.model_dump()
