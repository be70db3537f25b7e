from typing import List, Mapping

from todo_planner.models import DEFAULT_THEME_COLOR, NO_COURSE_ID, Assignment


def apply_course_value(
    field: str, course_map: Mapping, assignments: List[Assignment]
) -> List[Assignment]:
    """Set `field` from `course_map[course_id]` where the course has an entry."""
    return [
        a.model_copy(update={field: course_map[a.course_id]}) if a.course_id in course_map else a
        for a in assignments
    ]


def apply_course_color(colors: Mapping[str, str], assignments: List[Assignment]) -> List[Assignment]:
    applied = apply_course_value("color", colors, assignments)
    # courses without a custom color get the theme color stored under "0"
    default = colors.get(NO_COURSE_ID, DEFAULT_THEME_COLOR)
    return [
        a if a.course_id in colors else a.model_copy(update={"color": default})
        for a in applied
    ]


def apply_course_name(names: Mapping[str, str], assignments: List[Assignment]) -> List[Assignment]:
    return apply_course_value("course_name", names, assignments)


def apply_course_positions(
    positions: Mapping[str, int], assignments: List[Assignment]
) -> List[Assignment]:
    return apply_course_value("position", positions, assignments)
