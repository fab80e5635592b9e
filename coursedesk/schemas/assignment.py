from pydantic import Field, StrictInt, field_validator
from typing import Optional, List
from datetime import datetime, timezone
from coursedesk.schemas.base import CamelModel
from coursedesk.schemas.course import CourseTitle
from coursedesk.schemas.user import UserContact, UserName

class AssignmentBase(CamelModel):
    title: str = Field(..., min_length=1)
    instructions: str
    due_date: datetime

    @field_validator("due_date")
    @classmethod
    def as_naive_utc(cls, value: datetime) -> datetime:
        # Stored timestamps are naive UTC
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

class AssignmentCreate(AssignmentBase):
    course_id: str = Field(..., min_length=1)

class Assignment(AssignmentBase):
    id: str
    course_id: str
    created_at: datetime

class GradeCreate(CamelModel):
    submission_id: str = Field(..., min_length=1)
    grade: StrictInt = Field(..., ge=0, le=100)
    feedback: Optional[str] = None

class Grade(CamelModel):
    id: str
    submission_id: str
    grade: int
    feedback: Optional[str] = None
    graded_at: datetime

class SubmissionCreate(CamelModel):
    assignment_id: str = Field(..., min_length=1)
    content: str
    file_url: Optional[str] = None

class Submission(CamelModel):
    id: str
    assignment_id: str
    student_id: str
    content: str
    file_url: Optional[str] = None
    submitted_at: datetime

class GradedSubmission(Submission):
    student: UserContact
    grade: Optional[Grade] = None

class AssignmentDetail(Assignment):
    course: CourseTitle
    submissions: List[GradedSubmission] = []

class StudentAssignment(Assignment):
    course: CourseTitle
    submissions: List[Submission] = []

class TeacherAssignment(Assignment):
    course: CourseTitle
    submission_count: int

class AssignmentWithCourse(Assignment):
    course: CourseTitle

class SubmissionWithAssignment(Submission):
    assignment: AssignmentWithCourse

class StudentGrade(Grade):
    submission: SubmissionWithAssignment

class SubmissionWithStudent(SubmissionWithAssignment):
    student: UserName

class TeacherGrade(Grade):
    submission: SubmissionWithStudent
