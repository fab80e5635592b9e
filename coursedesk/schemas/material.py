from pydantic import Field
from datetime import datetime
from coursedesk.schemas.base import CamelModel

class MaterialCreate(CamelModel):
    course_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    file_url: str = Field(..., min_length=1)
    file_type: str = Field(..., min_length=1)

class Material(CamelModel):
    id: str
    course_id: str
    title: str
    file_url: str
    file_type: str
    uploaded_at: datetime
