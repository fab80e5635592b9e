from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime
from coursedesk.models.postgresql import UserRole
from coursedesk.schemas.base import CamelModel

class UserBase(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr

class UserCreate(UserBase):
    password: str = Field(..., min_length=8)
    role: UserRole

class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class User(UserBase):
    id: str
    role: UserRole
    created_at: datetime

class UserName(CamelModel):
    name: str

class UserContact(CamelModel):
    id: Optional[str] = None
    name: str
    email: str

class Token(CamelModel):
    access_token: str
    token_type: str
    user: User
