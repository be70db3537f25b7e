from typing import Dict, Iterable, List

from todo_planner.models import Assignment, AssignmentType, Course


def extract_courses(assignments: Iterable[Assignment]) -> List[Course]:
    """Unique courses of an assignment list, in first-seen order.

    Announcements are skipped. The first assignment seen for a course decides
    its name, color and position.
    """
    courses: Dict[str, Course] = {}
    for a in assignments:
        if a.type == AssignmentType.ANNOUNCEMENT or a.course_id in courses:
            continue
        courses[a.course_id] = Course(
            id=a.course_id,
            name=a.course_name,
            color=a.color,
            position=a.position,
        )
    return list(courses.values())
