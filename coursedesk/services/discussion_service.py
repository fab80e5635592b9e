from typing import List, Optional

from coursedesk.core.exceptions import NotFoundException, ValidationException
from coursedesk.models import postgresql as models
from coursedesk.schemas import discussion as schemas
from coursedesk.schemas.user import UserName
from coursedesk.services.guard import Identity, require_course_access
from coursedesk.store.entity_store import EntityStore
from coursedesk.store.query import eq, in_


class DiscussionService:
    def __init__(self, store: EntityStore):
        self.store = store

    def list_course_discussions(self, identity: Optional[Identity], course_id: str) -> List[schemas.DiscussionWithUser]:
        course = require_course_access(self.store, identity, course_id)
        posts = self.store.find(models.Discussion, eq("course_id", course.id), order_by="-created_at")
        names = {u.id: u.name for u in self.store.find(models.User, in_("id", {p.user_id for p in posts}))}
        return [
            schemas.DiscussionWithUser(
                **schemas.Discussion.model_validate(p).model_dump(),
                user=UserName(name=names.get(p.user_id, "Unknown")),
            )
            for p in posts
        ]

    def create_discussion(self, identity: Optional[Identity], discussion_in: schemas.DiscussionCreate) -> models.Discussion:
        course = require_course_access(self.store, identity, discussion_in.course_id)
        if discussion_in.parent_id:
            parent = self.store.find_one(models.Discussion, discussion_in.parent_id)
            if parent is None:
                raise NotFoundException(detail="Parent post not found")
            if parent.course_id != course.id:
                raise ValidationException(detail="Replies must stay in the parent's course")

        return self.store.insert(models.Discussion, {
            "course_id": course.id,
            "user_id": identity.user_id,
            "content": discussion_in.content,
            "parent_id": discussion_in.parent_id or None,
        })
