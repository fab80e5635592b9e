from datetime import datetime
from coursedesk.schemas.base import CamelModel

class Notification(CamelModel):
    id: str
    user_id: str
    type: str
    content: str
    is_read: bool
    created_at: datetime

class NotificationMessage(CamelModel):
    """Frame pushed over a live connection."""
    type: str = "notification"
    data: Notification
