from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from sqlmodel import Session, select

from todo_api.models.user import User, utcnow


class RecordNotFound(Exception):
    """Mutation targeted a user id that does not exist."""


class UserStore:
    """User persistence. Each mutating call is one read plus one commit."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.exec(select(User).where(User.email == email)).first()

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_by_reset_token(self, token: str, now: datetime) -> Optional[User]:
        stmt = select(User).where(
            User.reset_token == token,
            User.reset_token_expires_at > now,
        )
        return self.db.exec(stmt).first()

    def list_all(self) -> List[User]:
        return list(self.db.exec(select(User).order_by(User.id)).all())

    def create(self, **fields: Any) -> User:
        user = User(**fields)
        self.db.add(user)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user

    def update_fields(self, user_id: int, **fields: Any) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise RecordNotFound(user_id)
        for name, value in fields.items():
            setattr(user, name, value)
        user.updated_at = utcnow()
        self.db.add(user)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user

    def delete_by_id(self, user_id: int) -> None:
        user = self.db.get(User, user_id)
        if user is None:
            raise RecordNotFound(user_id)
        self.db.delete(user)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
