import logging
from numbers import Integral
from typing import Any, List, Optional

from coursedesk.core.exceptions import NotFoundException, ValidationException
from coursedesk.models import postgresql as models
from coursedesk.schemas import assignment as schemas
from coursedesk.schemas.course import CourseTitle
from coursedesk.schemas.user import UserName
from coursedesk.services.event_log import log_event
from coursedesk.services.guard import Identity, require_course_owner, require_identity, require_role
from coursedesk.services.notification_service import NotificationService
from coursedesk.store.entity_store import EntityStore
from coursedesk.store.query import eq, in_

logger = logging.getLogger(__name__)

MIN_GRADE = 0
MAX_GRADE = 100


def validate_grade(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise ValidationException(detail="Grade must be an integer")
    if not MIN_GRADE <= value <= MAX_GRADE:
        raise ValidationException(detail=f"Grade must be between {MIN_GRADE} and {MAX_GRADE}")
    return int(value)


class GradeService:
    def __init__(self, store: EntityStore, notifier: NotificationService):
        self.store = store
        self.notifier = notifier

    def create_grade(
        self,
        identity: Optional[Identity],
        submission_id: str,
        grade: Any,
        feedback: Optional[str] = None,
    ) -> models.Grade:
        require_identity(identity)
        submission = self.store.find_one(models.Submission, submission_id)
        if submission is None:
            raise NotFoundException(detail="Submission not found")
        assignment = self.store.find_one(models.Assignment, submission.assignment_id)
        if assignment is None:
            raise NotFoundException(detail="Assignment not found")
        require_course_owner(self.store, identity, assignment.course_id)
        value = validate_grade(grade)

        db_grade = self.store.insert(
            models.Grade,
            {"submission_id": submission.id, "grade": value, "feedback": feedback},
            conflict="This submission has already been graded",
        )
        logger.info("Submission %s graded %s by %s", submission.id, value, identity.user_id)
        log_event("grade_given", identity.user_id, assignment.course_id, {
            "submission_id": submission.id, "student_id": submission.student_id, "grade": value,
        })

        self.notifier.notify(
            submission.student_id,
            models.NotificationType.GRADE.value,
            f'Your assignment "{assignment.title}" has been graded: {value}/{MAX_GRADE}',
        )
        return db_grade

    def list_student_grades(self, identity: Optional[Identity]) -> List[schemas.StudentGrade]:
        identity = require_role(identity, models.UserRole.STUDENT)
        submissions = {s.id: s for s in self.store.find(models.Submission, eq("student_id", identity.user_id))}
        grades = self.store.find(models.Grade, in_("submission_id", submissions), order_by="-graded_at")
        assignments = {a.id: a for a in self.store.find(
            models.Assignment, in_("id", {s.assignment_id for s in submissions.values()})
        )}
        titles = {c.id: c.title for c in self.store.find(
            models.Course, in_("id", {a.course_id for a in assignments.values()})
        )}

        result = []
        for g in grades:
            submission = submissions[g.submission_id]
            assignment = assignments[submission.assignment_id]
            result.append(schemas.StudentGrade(
                **schemas.Grade.model_validate(g).model_dump(),
                submission=schemas.SubmissionWithAssignment(
                    **schemas.Submission.model_validate(submission).model_dump(),
                    assignment=schemas.AssignmentWithCourse(
                        **schemas.Assignment.model_validate(assignment).model_dump(),
                        course=CourseTitle(title=titles[assignment.course_id]),
                    ),
                ),
            ))
        return result

    def list_teacher_grades(self, identity: Optional[Identity]) -> List[schemas.TeacherGrade]:
        identity = require_role(identity, models.UserRole.TEACHER)
        titles = {c.id: c.title for c in self.store.find(models.Course, eq("teacher_id", identity.user_id))}
        assignments = {a.id: a for a in self.store.find(models.Assignment, in_("course_id", titles))}
        submissions = {s.id: s for s in self.store.find(models.Submission, in_("assignment_id", assignments))}
        grades = self.store.find(models.Grade, in_("submission_id", submissions), order_by="-graded_at")
        students = {u.id: u.name for u in self.store.find(
            models.User, in_("id", {s.student_id for s in submissions.values()})
        )}

        result = []
        for g in grades:
            submission = submissions[g.submission_id]
            assignment = assignments[submission.assignment_id]
            result.append(schemas.TeacherGrade(
                **schemas.Grade.model_validate(g).model_dump(),
                submission=schemas.SubmissionWithStudent(
                    **schemas.Submission.model_validate(submission).model_dump(),
                    student=UserName(name=students[submission.student_id]),
                    assignment=schemas.AssignmentWithCourse(
                        **schemas.Assignment.model_validate(assignment).model_dump(),
                        course=CourseTitle(title=titles[assignment.course_id]),
                    ),
                ),
            ))
        return result
