import httpx
import pytest

from integration.canvas_client import CanvasClient, CanvasConfig

BASE_URL = "https://canvas.test"


class FakeCanvas:
    """Stands in for CanvasClient in pipeline tests."""

    def __init__(
        self,
        items=None,
        colors=None,
        names=None,
        positions=None,
        dashboard=None,
        fail_notes=(),
    ):
        self.config = CanvasConfig(base_url=BASE_URL)
        self.items = items or []
        self.colors = colors or {}
        self.names = names or {}
        self.positions = positions or {}
        self.dashboard = dashboard
        self.fail_notes = set(fail_notes)
        self.planner_calls = []
        self.note_calls = []
        self.color_calls = 0

    async def get_planner_items(self, start_date, end_date=None, all_pages=True):
        self.planner_calls.append((start_date, end_date))
        return list(self.items)

    async def get_course_colors(self):
        self.color_calls += 1
        return dict(self.colors)

    async def get_course_names(self):
        return dict(self.names)

    async def get_dashboard_positions(self):
        return dict(self.positions)

    async def get_dashboard_course_ids(self):
        return self.dashboard

    async def create_planner_note(self, title, todo_date, course_id=None):
        self.note_calls.append({"title": title, "todo_date": todo_date, "course_id": course_id})
        n = len(self.note_calls)
        if n in self.fail_notes:
            raise RuntimeError(f"note {n} rejected")
        return {"id": 9000 + n, "title": title, "todo_date": todo_date}

    async def aclose(self):
        return None


@pytest.fixture
def fake_canvas_factory():
    def _make(**kwargs):
        return FakeCanvas(**kwargs)
    return _make


@pytest.fixture
def mock_client_factory():
    """CanvasClient whose requests are answered by `handler(request)`."""
    def _make(handler):
        return CanvasClient(
            CanvasConfig(base_url=BASE_URL, api_token="secret"),
            transport=httpx.MockTransport(handler),
        )
    return _make


@pytest.fixture
def make_item():
    """Raw planner item as the API returns it."""
    def _make(
        plannable_id=1,
        plannable_type="assignment",
        course_id=10,
        due_at="2024-03-05T23:59:00Z",
        title="Homework",
        **extra,
    ):
        plannable = {"id": plannable_id, "title": title, "due_at": due_at}
        plannable_override = extra.pop("plannable", {})
        if isinstance(plannable_override, dict):
            plannable.update(plannable_override)
        else:
            plannable = plannable_override
        item = {
            "plannable_id": plannable_id,
            "plannable_type": plannable_type,
            "course_id": course_id,
            "plannable_date": due_at,
            "html_url": f"/courses/{course_id}/assignments/{plannable_id}",
            "plannable": plannable,
            "planner_override": None,
            "submissions": False,
        }
        item.update(extra)
        return item
    return _make
