import logging
from typing import Optional

from coursedesk.core.exceptions import ForbiddenException, NotFoundException
from coursedesk.models import postgresql as models
from coursedesk.services.event_log import log_event
from coursedesk.services.guard import Identity, is_enrolled_student, load_course, require_role
from coursedesk.services.notification_service import NotificationService
from coursedesk.store.entity_store import EntityStore

logger = logging.getLogger(__name__)


class SubmissionService:
    def __init__(self, store: EntityStore, notifier: NotificationService):
        self.store = store
        self.notifier = notifier

    def create_submission(
        self,
        identity: Optional[Identity],
        assignment_id: str,
        content: str,
        file_url: Optional[str] = None,
    ) -> models.Submission:
        identity = require_role(identity, models.UserRole.STUDENT)
        assignment = self.store.find_one(models.Assignment, assignment_id)
        if assignment is None:
            raise NotFoundException(detail="Assignment not found")
        if not is_enrolled_student(self.store, identity.user_id, assignment.course_id):
            raise ForbiddenException(detail="You are not enrolled in this course")

        # One submission per student per assignment, enforced by the unique constraint
        submission = self.store.insert(
            models.Submission,
            {
                "assignment_id": assignment.id,
                "student_id": identity.user_id,
                "content": content,
                "file_url": file_url,
            },
            conflict="You have already submitted this assignment",
        )
        logger.info("Student %s submitted assignment %s", identity.user_id, assignment.id)
        log_event("assignment_submitted", identity.user_id, assignment.course_id, {
            "assignment_id": assignment.id, "submission_id": submission.id,
        })

        course = load_course(self.store, assignment.course_id)
        self.notifier.notify(
            course.teacher_id,
            models.NotificationType.SUBMISSION.value,
            f"New submission for {assignment.title}",
        )
        return submission
