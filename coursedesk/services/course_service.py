import logging
from typing import Dict, Iterable, List, Optional

from coursedesk.models import postgresql as models
from coursedesk.schemas import course as schemas
from coursedesk.services.event_log import log_event
from coursedesk.services.guard import (
    Identity, require_course_access, require_course_owner, require_identity, require_role,
)
from coursedesk.store.entity_store import EntityStore
from coursedesk.store.query import eq, in_

logger = logging.getLogger(__name__)


def teacher_names(store: EntityStore, teacher_ids: Iterable[str]) -> Dict[str, str]:
    users = store.find(models.User, in_("id", set(teacher_ids)))
    return {user.id: user.name for user in users}


def with_teacher(course: models.Course, names: Dict[str, str]) -> schemas.CourseWithTeacher:
    return schemas.CourseWithTeacher(
        **schemas.Course.model_validate(course).model_dump(),
        teacher=schemas.UserName(name=names.get(course.teacher_id, "Unknown")),
    )


class CourseService:
    def __init__(self, store: EntityStore):
        self.store = store

    def list_catalog(self, identity: Optional[Identity]) -> List[schemas.CourseWithTeacher]:
        """Every course with its teacher's name, for browsing before enrolling."""
        require_identity(identity)
        courses = self.store.find(models.Course, order_by="-created_at")
        names = teacher_names(self.store, (c.teacher_id for c in courses))
        return [with_teacher(course, names) for course in courses]

    def get_course(self, identity: Optional[Identity], course_id: str) -> schemas.CourseWithTeacher:
        course = require_course_access(self.store, identity, course_id)
        return with_teacher(course, teacher_names(self.store, [course.teacher_id]))

    def create_course(self, identity: Optional[Identity], course_in: schemas.CourseCreate) -> models.Course:
        identity = require_role(identity, models.UserRole.TEACHER)
        course = self.store.insert(models.Course, {
            **course_in.model_dump(),
            "teacher_id": identity.user_id,
        })
        logger.info("Teacher %s created course %s", identity.user_id, course.id)
        log_event("course_created", identity.user_id, course.id, {"title": course.title})
        return course

    def list_teacher_courses(self, identity: Optional[Identity]) -> List[models.Course]:
        identity = require_role(identity, models.UserRole.TEACHER)
        return self.store.find(models.Course, eq("teacher_id", identity.user_id), order_by="-created_at")

    def delete_course(self, identity: Optional[Identity], course_id: str):
        course = require_course_owner(self.store, identity, course_id)
        self.store.delete(models.Course, course.id)
        logger.info("Teacher %s deleted course %s", identity.user_id, course_id)
        log_event("course_deleted", identity.user_id, course_id, {})
