from __future__ import annotations

import copy
import logging
from typing import Any, Iterable, List

from pydantic import ValidationError

from todo_planner.models import (
    ASSIGNMENT_DEFAULTS,
    PLANNER_ITEM_KINDS,
    AnnouncementItem,
    Assignment,
    OtherItem,
    RawPlannerItem,
    Submissions,
)

logger = logging.getLogger(__name__)


# max number of invalid fields dropped from one record before giving up on it
MAX_REPAIRS = 10


def _drop_invalid(data: dict, loc) -> bool:
    """Remove the deepest key of `data` named along an error location.

    Location parts that are not keys (union member tags such as
    "Submissions" or "literal[False]") are skipped.
    """
    parent, key, node = None, None, data
    for part in loc:
        if isinstance(node, dict) and part in node:
            parent, key, node = node, part, node[part]
        elif not isinstance(node, dict):
            break
    if parent is None:
        return False
    del parent[key]
    return True


def parse_planner_item(data: Any) -> RawPlannerItem:
    """Validate one raw planner item into the variant named by its `plannable_type`.

    Malformed records are never rejected: a field that fails validation is
    dropped, so it resolves to its default while the rest of the record is
    kept.
    """
    if isinstance(data, RawPlannerItem):
        return data
    if not isinstance(data, dict):
        logger.debug(f"Ignoring non-object planner item: {data!r}")
        return OtherItem()

    kind = data.get("plannable_type")
    model = PLANNER_ITEM_KINDS.get(kind, OtherItem) if isinstance(kind, str) else OtherItem
    data = copy.deepcopy(data)
    for _ in range(MAX_REPAIRS):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            loc = e.errors()[0]["loc"]
            logger.warning(
                f"Planner item {data.get('plannable_id')!r} ({kind}): "
                f"ignoring invalid field {'.'.join(str(p) for p in loc)}"
            )
            if not _drop_invalid(data, loc):
                break

    logger.warning(f"Could not repair planner item {data.get('plannable_id')!r} ({kind})")
    return OtherItem(plannable_type=kind if isinstance(kind, str) else None)


def _as_str(value: Any):
    return str(value) if value is not None else None


def normalize(item: Any) -> Assignment:
    """Merge a raw planner item into a canonical Assignment.

    A derived value replaces the default only when it is not None, so present
    falsy values such as 0, "" and False are kept.
    """
    raw = parse_planner_item(item)
    plannable = raw.plannable
    override = raw.planner_override
    subs = raw.submissions if isinstance(raw.submissions, Submissions) else None

    if raw.plannable_type is None:
        logger.debug(f"Planner item {raw.plannable_id!r} has no plannable_type")

    marked_complete = bool(
        (override is not None and (override.marked_complete or override.dismissed))
        or (isinstance(raw, AnnouncementItem) and plannable.read_state == "read")
    )

    converted = {
        "html_url": raw.html_url or plannable.linked_object_html_url,
        "type": raw.plannable_type,
        "id": _as_str(raw.plannable_id),
        "plannable_id": _as_str(raw.plannable_id),
        "override_id": _as_str(override.id) if override is not None else None,
        "course_id": _as_str(raw.course_id or plannable.course_id),
        "name": plannable.title,
        "due_at": plannable.due_at or plannable.todo_date or raw.plannable_date,
        "points_possible": plannable.points_possible,
        "submitted": subs.submitted if subs is not None else None,
        "graded": (subs.excused or subs.graded) if subs is not None else None,
        "graded_at": subs.posted_at if subs is not None else None,
        "marked_complete": marked_complete,
    }

    filled = {k: v for k, v in converted.items() if v is not None}
    return ASSIGNMENT_DEFAULTS.model_copy(update=filled)


def convert_planner_items(items: Iterable[Any]) -> List[Assignment]:
    return [normalize(item) for item in items]
