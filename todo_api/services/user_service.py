from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from todo_api.core.errors import EmailAlreadyExists, InternalError, UserNotFound
from todo_api.core.security import PasswordHasher, get_password_hasher
from todo_api.db.session import get_session
from todo_api.models.user import User
from todo_api.schemas.user import PreferencesUpdate, UserCreate, UserUpdate
from todo_api.services.user_store import RecordNotFound, UserStore

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, store: UserStore, hasher: PasswordHasher) -> None:
        self.store = store
        self.hasher = hasher

    def register(self, body: UserCreate) -> User:
        if self.store.find_by_email(body.email) is not None:
            raise EmailAlreadyExists()
        try:
            user = self.store.create(
                email=body.email,
                password_hash=self.hasher.hash(body.password),
                first_name=body.first_name,
                last_name=body.last_name,
            )
        except IntegrityError as exc:
            # 동시 가입으로 unique 제약에 걸린 경우
            raise EmailAlreadyExists() from exc
        logger.info("registered user_id=%s", user.id)
        return user

    def list_users(self) -> List[User]:
        return self.store.list_all()

    def get(self, user_id: int) -> User:
        user = self.store.find_by_id(user_id)
        if user is None:
            raise UserNotFound(f"User with ID {user_id} not found")
        return user

    def update(self, user_id: int, body: UserUpdate) -> User:
        self.get(user_id)
        fields: Dict[str, Any] = body.model_dump(exclude_unset=True, exclude_none=True)
        if "password" in fields:
            fields["password_hash"] = self.hasher.hash(fields.pop("password"))
        try:
            return self.store.update_fields(user_id, **fields)
        except IntegrityError as exc:
            raise EmailAlreadyExists() from exc
        except RecordNotFound as exc:
            raise UserNotFound(f"User with ID {user_id} not found") from exc

    def update_preferences(self, user_id: int, body: PreferencesUpdate) -> User:
        self.get(user_id)
        return self.store.update_fields(user_id, preferences=body.preferences)

    def remove(self, user_id: int) -> None:
        try:
            self.store.delete_by_id(user_id)
        except RecordNotFound as exc:
            raise UserNotFound(f"User with ID {user_id} not found") from exc
        except Exception as exc:
            logger.exception("delete failed user_id=%s", user_id)
            raise InternalError(f"Error deleting user with ID {user_id}") from exc
        logger.info("deleted user_id=%s", user_id)


def get_user_service(db: Session = Depends(get_session)) -> UserService:
    return UserService(UserStore(db), get_password_hasher())
