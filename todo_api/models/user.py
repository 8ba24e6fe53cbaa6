from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    timestamptz that always hands back aware UTC datetimes.
    SQLite keeps no offset, so values read back from it are tagged as UTC.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


def utc_column(nullable: bool = False) -> Column:
    return Column(UTCDateTime(timezone=True), nullable=nullable)


JSONType = JSON().with_variant(JSONB(), "postgresql")


class User(SQLModel, table=True):
    __tablename__ = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool = Field(default=True)
    preferences: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSONType))

    # 세션/비밀번호 재설정 상태 (응답에 절대 포함하지 않음)
    refresh_token_hash: Optional[str] = None
    reset_token: Optional[str] = Field(default=None, index=True)
    reset_token_expires_at: Optional[datetime] = Field(
        default=None, sa_column=utc_column(nullable=True)
    )

    created_at: datetime = Field(default_factory=utcnow, sa_column=utc_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=utc_column())
