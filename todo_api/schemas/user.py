from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import EmailStr, Field

from todo_api.schemas.base import CamelModel


class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8)
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class UserUpdate(CamelModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=8)
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class PreferencesUpdate(CamelModel):
    preferences: Dict[str, Any]


class UserOut(CamelModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserProfileOut(UserOut):
    preferences: Optional[Dict[str, Any]] = None


class PreferencesOut(CamelModel):
    id: int
    preferences: Optional[Dict[str, Any]] = None
