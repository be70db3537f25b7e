from __future__ import annotations

from enum import Enum
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


DEFAULT_THEME_COLOR = "#1a73e8"

# course_id used for items that belong to no course (custom tasks)
NO_COURSE_ID = "0"
CUSTOM_TASK_LABEL = "Custom Task"


class AssignmentType(str, Enum):
    ASSIGNMENT = "assignment"
    DISCUSSION = "discussion_topic"
    QUIZ = "quiz"
    NOTE = "planner_note"
    ANNOUNCEMENT = "announcement"


# Raw planner items, as returned by /api/v1/planner/items.
# Every field is optional: the API omits or nulls fields depending on the kind
# of item and on whether an override or a submission record exists.


class Plannable(BaseModel):
    id: Optional[Union[int, str]] = None
    title: Optional[str] = None
    due_at: Optional[str] = None
    todo_date: Optional[str] = None
    points_possible: Optional[float] = None
    course_id: Optional[Union[int, str]] = None
    read_state: Optional[str] = None
    linked_object_html_url: Optional[str] = None


class PlannerOverride(BaseModel):
    id: Optional[Union[int, str]] = None
    marked_complete: Optional[bool] = None
    dismissed: Optional[bool] = None


class Submissions(BaseModel):
    submitted: Optional[bool] = None
    excused: Optional[bool] = None
    graded: Optional[bool] = None
    posted_at: Optional[str] = None


class RawPlannerItem(BaseModel):
    plannable_type: Optional[str] = None
    plannable_id: Optional[Union[int, str]] = None
    plannable_date: Optional[str] = None
    course_id: Optional[Union[int, str]] = None
    html_url: Optional[str] = None
    plannable: Plannable = Field(default_factory=Plannable)
    planner_override: Optional[PlannerOverride] = None
    # `false` means "submissions do not apply", which is not the same as "not submitted"
    submissions: Union[Submissions, Literal[False], None] = False


class AssignmentItem(RawPlannerItem):
    plannable_type: Literal["assignment"] = "assignment"


class DiscussionItem(RawPlannerItem):
    plannable_type: Literal["discussion_topic"] = "discussion_topic"


class QuizItem(RawPlannerItem):
    plannable_type: Literal["quiz"] = "quiz"


class NoteItem(RawPlannerItem):
    plannable_type: Literal["planner_note"] = "planner_note"


class AnnouncementItem(RawPlannerItem):
    plannable_type: Literal["announcement"] = "announcement"


class OtherItem(RawPlannerItem):
    """Any kind the pipeline does not display (wiki pages, calendar events...)."""


PLANNER_ITEM_KINDS: Dict[str, type] = {
    AssignmentType.ASSIGNMENT.value: AssignmentItem,
    AssignmentType.DISCUSSION.value: DiscussionItem,
    AssignmentType.QUIZ.value: QuizItem,
    AssignmentType.NOTE.value: NoteItem,
    AssignmentType.ANNOUNCEMENT.value: AnnouncementItem,
}


class Assignment(BaseModel):
    id: str = ""
    plannable_id: str = ""
    override_id: Optional[str] = None
    course_id: str = NO_COURSE_ID
    course_name: str = ""
    color: str = DEFAULT_THEME_COLOR
    position: int = 0
    # kept as a plain string so unknown kinds survive until the type filter
    type: str = AssignmentType.ASSIGNMENT.value
    name: str = ""
    due_at: str = ""
    points_possible: Optional[float] = None
    submitted: Optional[bool] = None
    graded: Optional[bool] = None
    graded_at: Optional[str] = None
    marked_complete: bool = False
    html_url: Optional[str] = None


ASSIGNMENT_DEFAULTS = Assignment()


class Course(BaseModel):
    id: str
    name: str
    color: str
    position: int = 0


class CourseMetadata(BaseModel):
    """Per-course lookups keyed by course id; the color map always carries "0"."""

    colors: Dict[str, str] = Field(default_factory=dict)
    names: Dict[str, str] = Field(default_factory=dict)
    positions: Dict[str, int] = Field(default_factory=dict)


class Options(BaseModel):
    theme_color: str = DEFAULT_THEME_COLOR
    dash_courses: bool = False
    dark_mode: bool = False

    # first day of the week, 0 = Sunday .. 6 = Saturday
    start_day: int = Field(0, ge=0, le=6)


class OccurrenceOutcome(BaseModel):
    due_at: str
    ok: bool
    id: str
    reason: Optional[str] = None


class CustomTaskResult(BaseModel):
    assignments: List[Assignment] = Field(default_factory=list)
    outcomes: List[OccurrenceOutcome] = Field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def failed(self) -> List[OccurrenceOutcome]:
        return [o for o in self.outcomes if not o.ok]
