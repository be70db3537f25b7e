import logging
import time
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.backend import BackendAPI
from api.dependencies import get_backend, get_options
from api.metrics import REQUESTS_TOTAL, REQUEST_LATENCY_SECONDS
from filtering.filters import unfinished
from scheduling.week import week_end, week_start
from todo_planner.dates import as_utc
from todo_planner.models import Options

router = APIRouter()
logger = logging.getLogger(__name__)


class InvalidateIn(BaseModel):
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    all: bool = False


def _resolve_window(
    start: Optional[datetime], end: Optional[datetime], options: Options
) -> tuple:
    """Default to the current week, starting on the configured weekday."""
    start = as_utc(start or week_start(options.start_day))
    end = as_utc(end or week_end(options.start_day))
    if end <= start:
        raise HTTPException(status_code=400, detail="end must be after start")
    return start, end


@router.get("/assignments")
async def get_assignments(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    course_id: Optional[str] = None,
    unfinished_only: bool = False,
    refresh: bool = False,
    backend: BackendAPI = Depends(get_backend),
    options: Options = Depends(get_options),
) -> dict:
    """Planner items due in [start, end), filtered for the given course or the dashboard."""
    t0 = time.time()
    start, end = _resolve_window(start, end, options)

    assignments = await backend.get_assignments(
        start, end, options, course_context=course_id, force=refresh
    )
    if unfinished_only:
        assignments = unfinished(assignments)

    REQUESTS_TOTAL.labels(endpoint="/assignments", status="ok").inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint="/assignments").observe(time.time() - t0)
    logger.info(f"Returning {len(assignments)} assignments for {start} - {end}")

    return {
        "start": start.isoformat(),
        "end": end.isoformat(),
        "assignments": [a.model_dump() for a in assignments],
        "total": len(assignments),
    }


@router.get("/courses")
async def get_courses(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    backend: BackendAPI = Depends(get_backend),
    options: Options = Depends(get_options),
) -> dict:
    """Courses that have items in the window, for course pickers."""
    start, end = _resolve_window(start, end, options)
    courses = await backend.get_courses(start, end, options)
    REQUESTS_TOTAL.labels(endpoint="/courses", status="ok").inc()
    return {"courses": [c.model_dump() for c in courses]}


@router.post("/assignments/invalidate")
async def invalidate(
    payload: InvalidateIn,
    backend: BackendAPI = Depends(get_backend),
) -> dict:
    if payload.all:
        backend.invalidate_all()
        return {"status": "cleared"}

    if payload.start is None or payload.end is None:
        raise HTTPException(status_code=400, detail="start and end are required unless all=true")

    key = backend.invalidate(payload.start, payload.end)
    return {"status": "invalidated", "window": list(key)}
