"""
Authorization checks shared by every resource service.

Access to anything that hangs off a course is decided here: a teacher sees a
course only if they own it, a student only if they are enrolled in it. A
missing course is reported before any ownership check, so callers can tell
``NotFound`` from ``Forbidden``.
"""

from dataclasses import dataclass
from typing import Optional

from coursedesk.core.exceptions import ForbiddenException, NotFoundException, UnauthorizedException
from coursedesk.models import postgresql as models
from coursedesk.store.entity_store import EntityStore
from coursedesk.store.query import and_, eq


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: str

    @property
    def is_teacher(self) -> bool:
        return self.role == models.UserRole.TEACHER.value

    @property
    def is_student(self) -> bool:
        return self.role == models.UserRole.STUDENT.value


def is_teacher_owner(identity: Identity, course: models.Course) -> bool:
    return identity.is_teacher and course.teacher_id == identity.user_id


def is_enrolled_student(store: EntityStore, user_id: str, course_id: str) -> bool:
    return store.exists(
        models.Enrollment,
        and_(eq("student_id", user_id), eq("course_id", course_id)),
    )


def can_access_course(store: EntityStore, identity: Identity, course: models.Course) -> bool:
    if is_teacher_owner(identity, course):
        return True
    return identity.is_student and is_enrolled_student(store, identity.user_id, course.id)


def require_identity(identity: Optional[Identity]) -> Identity:
    if identity is None:
        raise UnauthorizedException()
    return identity


def require_role(identity: Optional[Identity], role: models.UserRole) -> Identity:
    identity = require_identity(identity)
    if identity.role != role.value:
        raise ForbiddenException(detail=f"Only {role.value}s can perform this action")
    return identity


def load_course(store: EntityStore, course_id: str) -> models.Course:
    course = store.find_one(models.Course, course_id)
    if course is None:
        raise NotFoundException(detail="Course not found")
    return course


def require_course_access(store: EntityStore, identity: Optional[Identity], course_id: str) -> models.Course:
    identity = require_identity(identity)
    course = load_course(store, course_id)
    if not can_access_course(store, identity, course):
        raise ForbiddenException(detail="You don't have access to this course")
    return course


def require_course_owner(store: EntityStore, identity: Optional[Identity], course_id: str) -> models.Course:
    identity = require_identity(identity)
    course = load_course(store, course_id)
    if not is_teacher_owner(identity, course):
        raise ForbiddenException(detail="You don't have permission to manage this course")
    return course
