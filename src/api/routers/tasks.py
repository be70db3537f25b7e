import logging
import time
from datetime import date, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator

from api.backend import BackendAPI
from api.dependencies import get_backend, get_options
from api.metrics import REQUESTS_TOTAL, REQUEST_LATENCY_SECONDS
from scheduling.custom_tasks import DEFAULT_START_TIME, MINUTES_PER_DAY
from todo_planner.models import Options

router = APIRouter()
logger = logging.getLogger(__name__)


class CustomTaskIn(BaseModel):
    title: str = Field(..., min_length=1)
    start_date: date
    start_time: int = Field(DEFAULT_START_TIME, ge=0, lt=MINUTES_PER_DAY)  # minutes after midnight
    count: int = Field(1, ge=1, le=52)
    course_id: Optional[str] = None
    timezone: str = "UTC"

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2


@router.post("/custom-tasks")
async def create_custom_tasks(
    payload: CustomTaskIn,
    backend: BackendAPI = Depends(get_backend),
    options: Options = Depends(get_options),
) -> dict:
    """Create one custom task, or `count` weekly ones.

    Partial failures are not an error: the failed occurrences come back with
    their local ids and `error_message` is set.
    """
    t0 = time.time()
    try:
        tz = timezone.utc if payload.timezone == "UTC" else ZoneInfo(payload.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(status_code=400, detail=f"Unknown timezone: {payload.timezone}")

    logger.info(f"Creating {payload.count} custom task(s): {payload.title[:50]}")
    result = await backend.create_custom_tasks(
        payload.title,
        payload.start_date,
        options,
        start_time=payload.start_time,
        count=payload.count,
        course_id=payload.course_id,
        tz=tz,
    )

    status = "partial" if result.error_message else "ok"
    REQUESTS_TOTAL.labels(endpoint="/custom-tasks", status=status).inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint="/custom-tasks").observe(time.time() - t0)

    return {
        "status": status,
        "assignments": [a.model_dump() for a in result.assignments],
        "outcomes": [o.model_dump() for o in result.outcomes],
        "error_message": result.error_message,
    }
