from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Awaitable, Callable, List, Optional, Set

from extraction.courses import extract_courses
from extraction.planner_items import convert_planner_items
from filtering.filters import process_assignment_list
from integration.canvas_client import CanvasClient
from scheduling.custom_tasks import DEFAULT_START_TIME, create_recurring
from storage.course_metadata import CourseMetadataCache
from storage.query_cache import QueryCache, WindowKey, window_key
from todo_planner.dates import as_utc
from todo_planner.models import Assignment, Course, CustomTaskResult, Options
from api.metrics import CUSTOM_TASKS_TOTAL, PLANNER_ITEMS_FETCHED_TOTAL

logger = logging.getLogger(__name__)

# the planner API filters by calendar date, so ask for a day more on each side
FETCH_SLACK = timedelta(days=1)

NeedsGradingSource = Callable[[datetime, Options], Awaitable[List[Assignment]]]


async def no_needs_grading(end: datetime, options: Options) -> List[Assignment]:
    return []


class BackendAPI:
    """Central orchestration component of the to-do aggregator.

    Normalized planner items are cached per requested window; the filter
    pipeline runs on every read, after the course metadata and the
    needs-grading items are available.
    """

    def __init__(
        self,
        client: Optional[CanvasClient] = None,
        metadata: Optional[CourseMetadataCache] = None,
        cache: Optional[QueryCache] = None,
        needs_grading: Optional[NeedsGradingSource] = None,
    ):
        self.client = client or CanvasClient()
        self.metadata = metadata or CourseMetadataCache(self.client)
        self.cache = cache or QueryCache()
        self.needs_grading = needs_grading or no_needs_grading

    async def fetch_assignments(self, start: datetime, end: datetime) -> List[Assignment]:
        """All planner items around [start, end), normalized but not filtered."""
        start_str = (as_utc(start) - FETCH_SLACK).date().isoformat()
        end_str = (as_utc(end) + FETCH_SLACK).date().isoformat()
        logger.info(f"Fetching planner items between {start_str} and {end_str}")

        raw = await self.client.get_planner_items(start_str, end_str)
        PLANNER_ITEMS_FETCHED_TOTAL.inc(len(raw))
        return convert_planner_items(raw)

    async def get_assignments(
        self,
        start: datetime,
        end: datetime,
        options: Options,
        course_context: Optional[str] = None,
        dash_courses: Optional[Set[str]] = None,
        force: bool = False,
    ) -> List[Assignment]:
        """Needs-grading items followed by the filtered planner items due in [start, end)."""
        # 1. Wait for every source the pipeline depends on
        metadata, needs_grading = await asyncio.gather(
            self.metadata.load(options.theme_color),
            self.needs_grading(end, options),
        )

        # 2. Normalized items for the window (cached)
        assignments = await self.cache.get_or_fetch(
            window_key(start, end),
            lambda: self.fetch_assignments(start, end),
            force=force,
        )

        # 3. Dashboard courses only matter outside a course page
        if course_context is None and options.dash_courses and dash_courses is None:
            dash_courses = await self.metadata.dashboard_courses()

        # 4. Filter and enrich
        processed = process_assignment_list(
            assignments,
            start,
            end,
            options,
            colors=metadata.colors,
            names=metadata.names,
            positions=metadata.positions,
            course_context=course_context,
            dash_courses=dash_courses,
        )
        return list(needs_grading) + processed

    async def get_courses(
        self,
        start: datetime,
        end: datetime,
        options: Options,
        force: bool = False,
    ) -> List[Course]:
        assignments = await self.get_assignments(start, end, options, force=force)
        return extract_courses(assignments)

    async def create_custom_tasks(
        self,
        title: str,
        start_date: date,
        options: Options,
        start_time: int = DEFAULT_START_TIME,
        count: int = 1,
        course_id: Optional[str] = None,
        tz: tzinfo = timezone.utc,
    ) -> CustomTaskResult:
        metadata = await self.metadata.load(options.theme_color)
        result = await create_recurring(
            self.client,
            title,
            start_date,
            start_time=start_time,
            count=count,
            course_id=course_id,
            metadata=metadata,
            theme_color=options.theme_color,
            tz=tz,
        )

        for outcome in result.outcomes:
            CUSTOM_TASKS_TOTAL.labels(outcome="created" if outcome.ok else "local_only").inc()

        # created tasks join the cached windows, and windows still being
        # fetched, instead of forcing a re-fetch; the time filter drops them
        # from windows they do not fall into
        self.cache.amend(lambda cached: cached + result.assignments)

        return result

    def invalidate(self, start: datetime, end: datetime) -> WindowKey:
        key = window_key(start, end)
        self.cache.invalidate(key)
        return key

    def invalidate_all(self) -> None:
        self.cache.clear()
        self.metadata.invalidate()
