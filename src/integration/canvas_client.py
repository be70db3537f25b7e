import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

import httpx

logger = logging.getLogger(__name__)

LINK_RE = re.compile(r'<([^>]+)>\s*;\s*rel="([^"]+)"')
COURSE_KEY_PREFIX = "course_"
PLANNER_NOTES_PATH = "/api/v1/planner_notes"


@dataclass
class CanvasConfig:
    base_url: str = "http://localhost"
    api_token: str = ""
    per_page: int = 1000
    timeout_s: float = 30.0

    @classmethod
    def from_env(cls) -> "CanvasConfig":
        return cls(
            base_url=os.getenv("CANVAS_BASE_URL", "http://localhost").strip().rstrip("/"),
            api_token=os.getenv("CANVAS_API_TOKEN", "").strip(),
            per_page=int(os.getenv("CANVAS_PER_PAGE", "1000")),
            timeout_s=float(os.getenv("CANVAS_TIMEOUT_S", "30")),
        )


def parse_link_header(link: Optional[str]) -> Dict[str, str]:
    """Map each rel of a `<url>; rel="name"` header to its url."""
    if not link:
        return {}
    return {rel: url for url, rel in LINK_RE.findall(link)}


def strip_course_prefix(key: str) -> str:
    if key.startswith(COURSE_KEY_PREFIX):
        return key[len(COURSE_KEY_PREFIX):]
    return key


def is_real_course(course_id: Optional[str]) -> bool:
    if not course_id:
        return False
    try:
        return int(course_id) > 0
    except (TypeError, ValueError):
        return False


class CanvasClient:
    """Async client for the Canvas endpoints the planner needs.

    Reads never raise: a failed request is logged and turns into an empty
    result, so callers always get whatever could be fetched.
    """

    def __init__(
        self,
        config: Optional[CanvasConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or CanvasConfig.from_env()

        headers = {"Accept": "application/json"}
        if self.config.api_token:
            headers["Authorization"] = f"Bearer {self.config.api_token}"

        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            headers=headers,
            timeout=self.config.timeout_s,
            transport=transport,
        )

    async def __aenter__(self) -> "CanvasClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_paginated(self, url: str, recurse: bool = False) -> List[Any]:
        """
        Fetch a list endpoint, optionally following `next` links.

        Pages are returned in link order. A failing page ends the walk and the
        pages fetched before it are still returned.
        """
        results: List[Any] = []
        seen: Set[str] = set()
        current: Optional[str] = url

        while current is not None:
            seen.add(current)
            try:
                r = await self._client.get(current)
                r.raise_for_status()
                page = r.json()
            except Exception as e:
                logger.error(f"Failed to fetch page {current}: {e}")
                break

            if not isinstance(page, list):
                logger.warning(f"Expected a list from {current}, got {type(page).__name__}")
                break

            results.extend(page)
            if not recurse:
                break

            fetched_url = str(r.url)
            seen.add(fetched_url)
            next_url = parse_link_header(r.headers.get("link")).get("next")
            if next_url is None or next_url in (current, fetched_url):
                break
            if next_url in seen:
                logger.warning(f"Pagination loop detected at {next_url}, stopping")
                break
            current = next_url

        return results

    async def get_planner_items(
        self, start_date: str, end_date: Optional[str] = None, all_pages: bool = True
    ) -> List[Any]:
        """Raw planner items between two YYYY-MM-DD dates."""
        url = f"/api/v1/planner/items?start_date={start_date}"
        if end_date:
            url += f"&end_date={end_date}"
        url += f"&per_page={self.config.per_page}"
        return await self.get_paginated(url, recurse=all_pages)

    async def _get_json(self, url: str) -> Optional[Any]:
        try:
            r = await self._client.get(url)
            r.raise_for_status()
            return r.json()
        except Exception as e:
            logger.error(f"Failed to fetch {url}: {e}")
            return None

    async def get_dashboard_positions(self) -> Dict[str, int]:
        logger.info("Getting course positions")
        data = await self._get_json("/api/v1/users/self/dashboard_positions")
        if not isinstance(data, dict):
            return {}
        positions = data.get("dashboard_positions") or {}
        return {strip_course_prefix(k): v for k, v in positions.items()}

    async def get_course_colors(self) -> Dict[str, str]:
        data = await self._get_json("/api/v1/users/self/colors")
        if not isinstance(data, dict):
            return {}
        colors = data.get("custom_colors") or {}
        return {
            strip_course_prefix(k): v
            for k, v in colors.items()
            if k.startswith(COURSE_KEY_PREFIX)
        }

    async def get_course_names(self) -> Dict[str, str]:
        courses = await self.get_paginated("/api/v1/courses?per_page=100", recurse=True)
        return {
            str(c["id"]): c.get("name") or c.get("course_code") or ""
            for c in courses
            if isinstance(c, dict) and c.get("id") is not None
        }

    async def get_dashboard_course_ids(self) -> Optional[Set[str]]:
        """Ids of the courses pinned to the dashboard, or None if unknown."""
        cards = await self._get_json("/api/v1/dashboard/dashboard_cards")
        if not isinstance(cards, list):
            return None
        return {str(c["id"]) for c in cards if isinstance(c, dict) and c.get("id") is not None}

    async def create_planner_note(
        self, title: str, todo_date: str, course_id: Optional[str] = None
    ) -> dict:
        """Create a planner note and return the created record.

        Unlike the reads, failures propagate (httpx errors, bad JSON) so the
        caller can record why a given note was not created.
        """
        data: Dict[str, Any] = {
            "title": title,
            "todo_date": todo_date,
        }
        if is_real_course(course_id):
            data["course_id"] = int(course_id)

        r = await self._client.post(PLANNER_NOTES_PATH, json=data)
        r.raise_for_status()
        return r.json()
