import logging
from typing import Iterable, List, Optional

from coursedesk.core.exceptions import ForbiddenException, NotFoundException
from coursedesk.models import postgresql as models
from coursedesk.schemas import notification as schemas
from coursedesk.services.connection_registry import ConnectionRegistry
from coursedesk.services.guard import Identity, require_identity
from coursedesk.store.entity_store import EntityStore
from coursedesk.store.query import and_, eq

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, store: EntityStore, registry: ConnectionRegistry):
        self.store = store
        self.registry = registry

    def notify(self, user_id: str, type: str, content: str) -> models.Notification:
        # 1. Persist first; the stored row is the source of truth
        db_notif = self.store.insert(models.Notification, {
            "user_id": user_id,
            "type": type,
            "content": content,
            "is_read": False,
        })

        # 2. Best-effort push to the user's live connection, if any
        connection = self.registry.get(user_id)
        if connection is None or not connection.is_open:
            logger.debug("No live connection for user %s, %s notification kept for pull", user_id, type)
            return db_notif

        message = schemas.NotificationMessage(data=schemas.Notification.model_validate(db_notif))
        connection.send(message.model_dump(mode="json", by_alias=True))
        return db_notif

    def notify_many(self, user_ids: Iterable[str], type: str, content: str) -> List[models.Notification]:
        # Not atomic: rows created before a failing insert stay in place
        return [self.notify(user_id, type, content) for user_id in user_ids]

    def list_notifications(self, identity: Optional[Identity]) -> List[models.Notification]:
        identity = require_identity(identity)
        return self.store.find(models.Notification, eq("user_id", identity.user_id), order_by="-created_at")

    def mark_as_read(self, identity: Optional[Identity], notification_id: str):
        identity = require_identity(identity)
        db_notif = self.store.find_one(models.Notification, notification_id)
        if db_notif is None:
            raise NotFoundException(detail="Notification not found")
        if db_notif.user_id != identity.user_id:
            raise ForbiddenException(detail="You don't have permission to modify this notification")
        self.store.update(models.Notification, notification_id, {"is_read": True})

    def mark_all_as_read(self, identity: Optional[Identity]) -> int:
        identity = require_identity(identity)
        return self.store.update_where(
            models.Notification,
            and_(eq("user_id", identity.user_id), eq("is_read", False)),
            {"is_read": True},
        )
