from fastapi import APIRouter, Depends
from typing import List
from coursedesk.api.deps import get_notifier
from coursedesk.api.v1.endpoints.auth import get_identity
from coursedesk.schemas import notification as schemas
from coursedesk.services.guard import Identity
from coursedesk.services.notification_service import NotificationService

router = APIRouter()

@router.get("", response_model=List[schemas.Notification])
def list_notifications(
    identity: Identity = Depends(get_identity),
    service: NotificationService = Depends(get_notifier),
):
    return service.list_notifications(identity)

@router.patch("/{notification_id}/read")
def mark_read(
    notification_id: str,
    identity: Identity = Depends(get_identity),
    service: NotificationService = Depends(get_notifier),
):
    service.mark_as_read(identity, notification_id)
    return {"success": True}

@router.post("/read-all")
def mark_all_read(
    identity: Identity = Depends(get_identity),
    service: NotificationService = Depends(get_notifier),
):
    updated = service.mark_all_as_read(identity)
    return {"success": True, "updated": updated}
