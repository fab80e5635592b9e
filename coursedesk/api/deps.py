from fastapi import Depends, Request
from sqlalchemy.orm import Session

from coursedesk.core import database
from coursedesk.services.assignment_service import AssignmentService
from coursedesk.services.connection_registry import ConnectionRegistry
from coursedesk.services.course_service import CourseService
from coursedesk.services.discussion_service import DiscussionService
from coursedesk.services.enrollment_service import EnrollmentService
from coursedesk.services.grade_service import GradeService
from coursedesk.services.material_service import MaterialService
from coursedesk.services.notification_service import NotificationService
from coursedesk.services.submission_service import SubmissionService
from coursedesk.store.entity_store import EntityStore


def get_store(db: Session = Depends(database.get_db)) -> EntityStore:
    return EntityStore(db)


def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.connections


def get_notifier(
    store: EntityStore = Depends(get_store),
    registry: ConnectionRegistry = Depends(get_registry),
) -> NotificationService:
    return NotificationService(store, registry)


def get_course_service(store: EntityStore = Depends(get_store)) -> CourseService:
    return CourseService(store)


def get_enrollment_service(
    store: EntityStore = Depends(get_store),
    notifier: NotificationService = Depends(get_notifier),
) -> EnrollmentService:
    return EnrollmentService(store, notifier)


def get_assignment_service(
    store: EntityStore = Depends(get_store),
    notifier: NotificationService = Depends(get_notifier),
) -> AssignmentService:
    return AssignmentService(store, notifier)


def get_submission_service(
    store: EntityStore = Depends(get_store),
    notifier: NotificationService = Depends(get_notifier),
) -> SubmissionService:
    return SubmissionService(store, notifier)


def get_grade_service(
    store: EntityStore = Depends(get_store),
    notifier: NotificationService = Depends(get_notifier),
) -> GradeService:
    return GradeService(store, notifier)


def get_discussion_service(store: EntityStore = Depends(get_store)) -> DiscussionService:
    return DiscussionService(store)


def get_material_service(store: EntityStore = Depends(get_store)) -> MaterialService:
    return MaterialService(store)
