from __future__ import annotations

import logging
import random
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional

from todo_planner.dates import to_iso
from todo_planner.models import (
    ASSIGNMENT_DEFAULTS,
    CUSTOM_TASK_LABEL,
    DEFAULT_THEME_COLOR,
    NO_COURSE_ID,
    AssignmentType,
    CourseMetadata,
    CustomTaskResult,
    OccurrenceOutcome,
)

logger = logging.getLogger(__name__)

RECUR_DELTA_DAYS = 7
DEFAULT_START_TIME = 1439  # 23:59, in minutes after midnight
MINUTES_PER_DAY = 24 * 60
ERROR_MESSAGE = "An error occurred. Make sure you are signed in to Canvas."


def provisional_id() -> str:
    return str(random.randrange(1_000_000))


def occurrence_due(start_date: date, start_time: int, index: int, tz: tzinfo = timezone.utc) -> datetime:
    """Due datetime of the `index`-th weekly occurrence, seconds zeroed."""
    day = date(start_date.year, start_date.month, start_date.day) + timedelta(
        days=index * RECUR_DELTA_DAYS
    )
    return datetime.combine(day, time(start_time // 60, start_time % 60), tzinfo=tz)


async def create_recurring(
    client,
    title: str,
    start_date: date,
    start_time: int = DEFAULT_START_TIME,
    count: int = 1,
    course_id: Optional[str] = None,
    metadata: Optional[CourseMetadata] = None,
    theme_color: str = DEFAULT_THEME_COLOR,
    tz: tzinfo = timezone.utc,
) -> CustomTaskResult:
    """
    Create `count` weekly custom tasks (planner notes), one request at a time.

    Each occurrence stands alone: when its request fails it keeps a
    client-side provisional id and the remaining occurrences are still sent.
    The result lists every occurrence in date order together with its
    outcome, plus one user-facing error message if anything failed.
    """
    if not 0 <= start_time < MINUTES_PER_DAY:
        raise ValueError(f"start_time must be within a day, got {start_time}")
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")

    metadata = metadata or CourseMetadata()
    course_id = course_id or NO_COURSE_ID

    result = CustomTaskResult()
    for i in range(count):
        due_at = to_iso(occurrence_due(start_date, start_time, i, tz))
        local_id = provisional_id()
        assignment = ASSIGNMENT_DEFAULTS.model_copy(
            update={
                "id": local_id,
                "name": title,
                "due_at": due_at,
                "type": AssignmentType.NOTE.value,
                "course_id": course_id,
                "course_name": metadata.names.get(course_id, CUSTOM_TASK_LABEL),
                "color": metadata.colors.get(course_id, theme_color),
                "position": metadata.positions.get(course_id, ASSIGNMENT_DEFAULTS.position),
            }
        )

        reason = None
        try:
            created = await client.create_planner_note(title, due_at, course_id)
            server_id = created.get("id") if isinstance(created, dict) else None
            if server_id is None:
                reason = "response did not include an id"
        except Exception as e:
            reason = str(e) or type(e).__name__

        if reason is None:
            # plannable_id lets the task be marked complete in this session
            assignment = assignment.model_copy(
                update={"id": str(server_id), "plannable_id": str(server_id)}
            )
            result.outcomes.append(OccurrenceOutcome(due_at=due_at, ok=True, id=assignment.id))
        else:
            logger.warning(f"Custom task '{title}' due {due_at} kept local id {local_id}: {reason}")
            result.outcomes.append(
                OccurrenceOutcome(due_at=due_at, ok=False, id=local_id, reason=reason)
            )
        result.assignments.append(assignment)

    if result.failed:
        result.error_message = ERROR_MESSAGE
    return result
