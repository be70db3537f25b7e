from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Mapping, Optional

from todo_planner.dates import parse_iso, to_millis
from todo_planner.models import (
    CUSTOM_TASK_LABEL,
    NO_COURSE_ID,
    Assignment,
    AssignmentType,
    Options,
)
from filtering.enrichment import (
    apply_course_color,
    apply_course_name,
    apply_course_positions,
)

logger = logging.getLogger(__name__)

VALID_TYPES = frozenset(t.value for t in AssignmentType)


def filter_assignment_types(assignments: List[Assignment]) -> List[Assignment]:
    """Only assignments, discussions, quizzes, planner notes and announcements."""
    return [a for a in assignments if a.type in VALID_TYPES]


def filter_time_bounds(
    start: datetime, end: datetime, assignments: List[Assignment]
) -> List[Assignment]:
    """Only assignments due in [start, end), compared to the millisecond.

    Items whose due date cannot be parsed are dropped.
    """
    lo, hi = to_millis(start), to_millis(end)
    kept = []
    for a in assignments:
        due = parse_iso(a.due_at)
        if due is None:
            logger.debug(f"Dropping {a.type} {a.id!r}: unparseable due date {a.due_at!r}")
            continue
        if lo <= to_millis(due) < hi:
            kept.append(a)
    return kept


def filter_courses(courses: Iterable[str], assignments: List[Assignment]) -> List[Assignment]:
    """Only assignments from the given courses."""
    course_set = set(courses)
    return [a for a in assignments if a.course_id and a.course_id in course_set]


def apply_custom_task_labels(assignments: List[Assignment]) -> List[Assignment]:
    """Notes without a course are labelled "Custom Task"."""
    return [
        a.model_copy(update={"course_name": CUSTOM_TASK_LABEL})
        if a.type == AssignmentType.NOTE and a.course_id == NO_COURSE_ID
        else a
        for a in assignments
    ]


def is_complete(assignment: Assignment) -> bool:
    return assignment.marked_complete or bool(assignment.submitted)


def unfinished(assignments: List[Assignment]) -> List[Assignment]:
    return [a for a in assignments if not is_complete(a)]


def process_assignment_list(
    assignments: List[Assignment],
    start: datetime,
    end: datetime,
    options: Options,
    colors: Optional[Mapping[str, str]] = None,
    names: Optional[Mapping[str, str]] = None,
    positions: Optional[Mapping[str, int]] = None,
    course_context: Optional[str] = None,
    dash_courses: Optional[Iterable[str]] = None,
) -> List[Assignment]:
    """
    Run the filter stages in order:

    1. drop unsupported item kinds
    2. keep the [start, end) window
    3. overlay course colors, names and positions (each only when given)
    4. label custom tasks
    5. restrict to one course (course page) or to the dashboard courses

    Stage 5 uses the single course when `course_context` is set and never
    consults the dashboard in that case.
    """
    assignments = filter_assignment_types(assignments)
    assignments = filter_time_bounds(start, end, assignments)
    if colors is not None:
        assignments = apply_course_color(colors, assignments)
    if names is not None:
        assignments = apply_course_name(names, assignments)
    if positions is not None:
        assignments = apply_course_positions(positions, assignments)
    assignments = apply_custom_task_labels(assignments)

    if course_context is not None:
        assignments = filter_courses([course_context], assignments)
    elif options.dash_courses and dash_courses is not None:
        assignments = filter_courses(list(dash_courses) + [NO_COURSE_ID], assignments)

    return assignments
