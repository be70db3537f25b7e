from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Set

from todo_planner.models import DEFAULT_THEME_COLOR, NO_COURSE_ID, CourseMetadata

logger = logging.getLogger(__name__)


class CourseMetadataCache:
    """Course colors, names and dashboard positions, fetched once and kept.

    Colors are cached per theme color because the theme color is stored in
    the map under course "0".
    """

    def __init__(self, client):
        self.client = client
        self._colors: Dict[str, Dict[str, str]] = {}
        self._names: Optional[Dict[str, str]] = None
        self._positions: Optional[Dict[str, int]] = None
        self._dashboard: Optional[Set[str]] = None
        self._lock = asyncio.Lock()

    async def colors(self, theme_color: str = DEFAULT_THEME_COLOR) -> Dict[str, str]:
        if theme_color not in self._colors:
            colors = dict(await self.client.get_course_colors())
            colors[NO_COURSE_ID] = theme_color
            self._colors[theme_color] = colors
        return self._colors[theme_color]

    async def names(self) -> Dict[str, str]:
        if self._names is None:
            self._names = await self.client.get_course_names()
        return self._names

    async def positions(self) -> Dict[str, int]:
        if self._positions is None:
            self._positions = await self.client.get_dashboard_positions()
        return self._positions

    async def dashboard_courses(self) -> Optional[Set[str]]:
        """Courses pinned to the dashboard; None (not cached) when unavailable."""
        if self._dashboard is None:
            self._dashboard = await self.client.get_dashboard_course_ids()
        return self._dashboard

    async def load(self, theme_color: str = DEFAULT_THEME_COLOR) -> CourseMetadata:
        async with self._lock:
            colors, names, positions = await asyncio.gather(
                self.colors(theme_color), self.names(), self.positions()
            )
        logger.debug(
            f"Course metadata: {len(colors)} colors, {len(names)} names, {len(positions)} positions"
        )
        return CourseMetadata(colors=colors, names=names, positions=positions)

    def invalidate(self) -> None:
        self._colors.clear()
        self._names = None
        self._positions = None
        self._dashboard = None
