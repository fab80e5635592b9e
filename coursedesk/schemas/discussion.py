from pydantic import Field
from typing import Optional
from datetime import datetime
from coursedesk.schemas.base import CamelModel
from coursedesk.schemas.user import UserName

class DiscussionCreate(CamelModel):
    course_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    parent_id: Optional[str] = None

class Discussion(CamelModel):
    id: str
    course_id: str
    user_id: str
    content: str
    parent_id: Optional[str] = None
    created_at: datetime

class DiscussionWithUser(Discussion):
    user: UserName
