import logging
from typing import Dict, List, Optional

from coursedesk.core.exceptions import ForbiddenException, NotFoundException
from coursedesk.models import postgresql as models
from coursedesk.schemas import assignment as schemas
from coursedesk.schemas.course import CourseTitle
from coursedesk.schemas.user import UserContact
from coursedesk.services.event_log import log_event
from coursedesk.services.guard import (
    Identity, can_access_course, is_teacher_owner, require_course_access, require_course_owner,
    require_identity, require_role,
)
from coursedesk.services.notification_service import NotificationService
from coursedesk.store.entity_store import EntityStore
from coursedesk.store.query import and_, eq, in_

logger = logging.getLogger(__name__)


class AssignmentService:
    def __init__(self, store: EntityStore, notifier: NotificationService):
        self.store = store
        self.notifier = notifier

    def create_assignment(self, identity: Optional[Identity], assignment_in: schemas.AssignmentCreate) -> models.Assignment:
        course = require_course_owner(self.store, identity, assignment_in.course_id)
        assignment = self.store.insert(models.Assignment, assignment_in.model_dump())
        logger.info("Assignment %s created in course %s", assignment.id, course.id)
        log_event("assignment_created", identity.user_id, course.id, {"assignment_id": assignment.id})

        # One notification per currently enrolled student
        enrollments = self.store.find(models.Enrollment, eq("course_id", course.id))
        self.notifier.notify_many(
            [e.student_id for e in enrollments],
            models.NotificationType.ASSIGNMENT.value,
            f"New assignment in {course.title}: {assignment.title}",
        )
        return assignment

    def get_assignment_detail(self, identity: Optional[Identity], assignment_id: str) -> schemas.AssignmentDetail:
        """The assignment with its course title and the submissions the caller may see.

        The owning teacher gets every submission; an enrolled student gets
        only their own.
        """
        identity = require_identity(identity)
        assignment = self.store.find_one(models.Assignment, assignment_id)
        if assignment is None:
            raise NotFoundException(detail="Assignment not found")
        course = self.store.find_one(models.Course, assignment.course_id)
        if course is None:
            raise NotFoundException(detail="Course not found")
        if not can_access_course(self.store, identity, course):
            raise ForbiddenException(detail="You don't have access to this assignment")

        where = eq("assignment_id", assignment.id)
        if not is_teacher_owner(identity, course):
            where = and_(where, eq("student_id", identity.user_id))
        submissions = self.store.find(models.Submission, where, order_by="submitted_at")

        students = {u.id: u for u in self.store.find(models.User, in_("id", {s.student_id for s in submissions}))}
        grades = {g.submission_id: g for g in self.store.find(models.Grade, in_("submission_id", [s.id for s in submissions]))}

        return schemas.AssignmentDetail(
            **schemas.Assignment.model_validate(assignment).model_dump(),
            course=CourseTitle(title=course.title),
            submissions=[
                schemas.GradedSubmission(
                    **schemas.Submission.model_validate(s).model_dump(),
                    student=UserContact(name=students[s.student_id].name, email=students[s.student_id].email),
                    grade=schemas.Grade.model_validate(grades[s.id]) if s.id in grades else None,
                )
                for s in submissions
            ],
        )

    def list_course_assignments(self, identity: Optional[Identity], course_id: str) -> List[models.Assignment]:
        course = require_course_access(self.store, identity, course_id)
        return self.store.find(models.Assignment, eq("course_id", course.id), order_by="due_date")

    def _enrolled_course_titles(self, student_id: str) -> Dict[str, str]:
        enrollments = self.store.find(models.Enrollment, eq("student_id", student_id))
        courses = self.store.find(models.Course, in_("id", {e.course_id for e in enrollments}))
        return {c.id: c.title for c in courses}

    def list_student_assignments(self, identity: Optional[Identity]) -> List[schemas.StudentAssignment]:
        identity = require_role(identity, models.UserRole.STUDENT)
        titles = self._enrolled_course_titles(identity.user_id)
        assignments = self.store.find(models.Assignment, in_("course_id", titles), order_by="due_date")
        own = self.store.find(models.Submission, and_(
            eq("student_id", identity.user_id),
            in_("assignment_id", [a.id for a in assignments]),
        ))
        by_assignment: Dict[str, List[models.Submission]] = {}
        for submission in own:
            by_assignment.setdefault(submission.assignment_id, []).append(submission)

        return [
            schemas.StudentAssignment(
                **schemas.Assignment.model_validate(a).model_dump(),
                course=CourseTitle(title=titles[a.course_id]),
                submissions=[schemas.Submission.model_validate(s) for s in by_assignment.get(a.id, [])],
            )
            for a in assignments
        ]

    def list_pending_assignments(self, identity: Optional[Identity]) -> List[models.Assignment]:
        """Assignments in the student's courses that they have not submitted yet."""
        identity = require_role(identity, models.UserRole.STUDENT)
        titles = self._enrolled_course_titles(identity.user_id)
        assignments = self.store.find(models.Assignment, in_("course_id", titles), order_by="due_date")
        submitted = {
            s.assignment_id
            for s in self.store.find(models.Submission, and_(
                eq("student_id", identity.user_id),
                in_("assignment_id", [a.id for a in assignments]),
            ))
        }
        return [a for a in assignments if a.id not in submitted]

    def list_teacher_assignments(self, identity: Optional[Identity]) -> List[schemas.TeacherAssignment]:
        identity = require_role(identity, models.UserRole.TEACHER)
        courses = {c.id: c for c in self.store.find(models.Course, eq("teacher_id", identity.user_id))}
        assignments = self.store.find(models.Assignment, in_("course_id", courses), order_by="due_date")
        submissions = self.store.find(models.Submission, in_("assignment_id", [a.id for a in assignments]))
        counts: Dict[str, int] = {}
        for submission in submissions:
            counts[submission.assignment_id] = counts.get(submission.assignment_id, 0) + 1

        return [
            schemas.TeacherAssignment(
                **schemas.Assignment.model_validate(a).model_dump(),
                course=CourseTitle(title=courses[a.course_id].title),
                submission_count=counts.get(a.id, 0),
            )
            for a in assignments
        ]
