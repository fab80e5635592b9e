import logging
from typing import List, Optional

from coursedesk.models import postgresql as models
from coursedesk.schemas import course as schemas
from coursedesk.schemas.user import UserContact
from coursedesk.services.course_service import teacher_names, with_teacher
from coursedesk.services.event_log import log_event
from coursedesk.services.guard import Identity, load_course, require_course_owner, require_role
from coursedesk.services.notification_service import NotificationService
from coursedesk.store.entity_store import EntityStore
from coursedesk.store.query import eq, in_

logger = logging.getLogger(__name__)


class EnrollmentService:
    def __init__(self, store: EntityStore, notifier: NotificationService):
        self.store = store
        self.notifier = notifier

    def create_enrollment(self, identity: Optional[Identity], course_id: str) -> models.Enrollment:
        identity = require_role(identity, models.UserRole.STUDENT)
        course = load_course(self.store, course_id)

        enrollment = self.store.insert(
            models.Enrollment,
            {"course_id": course.id, "student_id": identity.user_id},
            conflict="Already enrolled in this course",
        )
        logger.info("Student %s enrolled in course %s", identity.user_id, course.id)
        log_event("enrolled", identity.user_id, course.id, {"enrollment_id": enrollment.id})

        self.notifier.notify(
            identity.user_id,
            models.NotificationType.ENROLLMENT.value,
            f"You've been enrolled in {course.title}",
        )
        return enrollment

    def list_student_enrollments(self, identity: Optional[Identity]) -> List[schemas.StudentEnrollment]:
        identity = require_role(identity, models.UserRole.STUDENT)
        enrollments = self.store.find(models.Enrollment, eq("student_id", identity.user_id), order_by="-enrolled_at")
        courses = {c.id: c for c in self.store.find(models.Course, in_("id", {e.course_id for e in enrollments}))}
        names = teacher_names(self.store, (c.teacher_id for c in courses.values()))
        return [
            schemas.StudentEnrollment(
                **schemas.Enrollment.model_validate(e).model_dump(),
                course=with_teacher(courses[e.course_id], names),
            )
            for e in enrollments
        ]

    def list_course_enrollments(self, identity: Optional[Identity], course_id: str) -> List[schemas.CourseEnrollment]:
        course = require_course_owner(self.store, identity, course_id)
        enrollments = self.store.find(models.Enrollment, eq("course_id", course.id), order_by="enrolled_at")
        students = {u.id: u for u in self.store.find(models.User, in_("id", {e.student_id for e in enrollments}))}
        return [
            schemas.CourseEnrollment(
                **schemas.Enrollment.model_validate(e).model_dump(),
                student=UserContact(name=students[e.student_id].name, email=students[e.student_id].email),
            )
            for e in enrollments
        ]

    def list_teacher_students(self, identity: Optional[Identity]) -> List[schemas.TeacherStudent]:
        """One row per (student, owned course) enrollment."""
        identity = require_role(identity, models.UserRole.TEACHER)
        courses = {c.id: c for c in self.store.find(models.Course, eq("teacher_id", identity.user_id))}
        enrollments = self.store.find(models.Enrollment, in_("course_id", courses), order_by="enrolled_at")
        students = {u.id: u for u in self.store.find(models.User, in_("id", {e.student_id for e in enrollments}))}
        return [
            schemas.TeacherStudent(
                student=UserContact.model_validate(students[e.student_id]),
                course=schemas.CourseTitle(title=courses[e.course_id].title),
            )
            for e in enrollments
        ]
