from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import Any, Dict

from fastapi import Depends
from sqlmodel import Session

from todo_api.core.cache import Cache, get_cache
from todo_api.core.config import Settings, get_settings
from todo_api.core.errors import (
    InternalError,
    InvalidCredentials,
    InvalidOrExpiredToken,
    InvalidRefreshToken,
    UserNotFound,
)
from todo_api.core.security import PasswordHasher, get_password_hasher
from todo_api.core.tokens import InvalidToken, TokenIssuer, TokenPair, get_token_issuer
from todo_api.db.session import get_session
from todo_api.models.user import User, utcnow
from todo_api.services.user_store import UserStore

logger = logging.getLogger(__name__)

RESET_TOKEN_BYTES = 32


def access_token_cache_key(user_id: int) -> str:
    return f"user_token:{user_id}"


class AuthService:
    """
    Login / refresh / logout / password reset.

    - 사용자당 refresh token 해시는 하나만 유지(재로그인 시 이전 토큰 무효화)
    - 현재 access token은 캐시에 `user_token:{id}`로 미러링 (logout 시 삭제)
    - 로그인/리프레시 실패 원인은 호출자에게 구분되지 않는다
    - 두 요청이 동시에 같은 사용자를 갱신하면 마지막 쓰기가 이긴다 (CAS 없음)
    """

    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        cache: Cache,
        settings: Settings,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.issuer = issuer
        self.cache = cache
        self.settings = settings

    # ---- 내부 ----
    def _rotate(self, user: User) -> TokenPair:
        tokens = self.issuer.issue_pair(user.id, user.email)
        self.store.update_fields(user.id, refresh_token_hash=self.hasher.hash(tokens.refresh_token))
        self.cache.set(access_token_cache_key(user.id), tokens.access_token, self.issuer.access_ttl_ms)
        return tokens

    # ---- 공개 API ----
    def login(self, email: str, password: str) -> Dict[str, Any]:
        try:
            user = self.store.find_by_email(email)
            if user is None or not self.hasher.compare(password, user.password_hash):
                logger.warning("login rejected")
                raise InvalidCredentials()

            tokens = self._rotate(user)
        except InvalidCredentials:
            raise
        except Exception as exc:
            logger.exception("login failed")
            raise InternalError("Error during login") from exc

        logger.info("login ok user_id=%s", user.id)
        return {
            "user": {
                "id": user.id,
                "email": user.email,
                "first_name": user.first_name,
                "last_name": user.last_name,
            },
            "access_token": tokens.access_token,
            "refresh_token": tokens.refresh_token,
        }

    def refresh(self, refresh_token: str) -> TokenPair:
        try:
            claims = self.issuer.verify(refresh_token)
            user = self.store.find_by_id(int(claims["sub"]))
            if user is None:
                raise InvalidRefreshToken()
            if not self.hasher.compare(refresh_token, user.refresh_token_hash):
                raise InvalidRefreshToken()

            tokens = self._rotate(user)
        except InvalidRefreshToken:
            logger.warning("refresh rejected")
            raise
        except (InvalidToken, KeyError, TypeError, ValueError) as exc:
            logger.warning("refresh rejected: %s", type(exc).__name__)
            raise InvalidRefreshToken() from exc
        except Exception as exc:
            # 저장소 오류도 사용자 존재 여부를 드러내지 않도록 같은 결과로 접는다
            logger.exception("refresh failed")
            raise InvalidRefreshToken() from exc

        logger.info("refresh ok user_id=%s", user.id)
        return tokens

    def logout(self, user_id: int) -> Dict[str, str]:
        try:
            self.store.update_fields(user_id, refresh_token_hash=None)
            self.cache.delete(access_token_cache_key(user_id))
        except Exception as exc:
            logger.exception("logout failed user_id=%s", user_id)
            raise InternalError("Error during logout") from exc

        logger.info("logout user_id=%s", user_id)
        return {"message": "Logout successful"}

    def forgot_password(self, email: str) -> Dict[str, str]:
        try:
            user = self.store.find_by_email(email)
            if user is None:
                raise UserNotFound()

            reset_token = secrets.token_hex(RESET_TOKEN_BYTES)
            expires_at = utcnow() + timedelta(seconds=self.settings.reset_token_ttl_seconds)
            self.store.update_fields(
                user.id,
                reset_token=reset_token,
                reset_token_expires_at=expires_at,
            )
        except UserNotFound:
            raise
        except Exception as exc:
            logger.exception("forgot-password failed")
            raise InternalError("Error generating password reset token") from exc

        logger.info("password reset token issued user_id=%s", user.id)
        # TODO: deliver the token by email and stop returning it in the response body
        return {
            "message": "Password reset token generated successfully",
            "reset_token": reset_token,
        }

    def reset_password(self, token: str, new_password: str) -> Dict[str, str]:
        try:
            user = self.store.find_by_reset_token(token, utcnow())
            if user is None:
                raise InvalidOrExpiredToken()

            self.store.update_fields(
                user.id,
                password_hash=self.hasher.hash(new_password),
                reset_token=None,
                reset_token_expires_at=None,
            )
        except InvalidOrExpiredToken:
            logger.warning("password reset rejected")
            raise
        except Exception as exc:
            logger.exception("reset-password failed")
            raise InternalError("Error resetting password") from exc

        logger.info("password reset user_id=%s", user.id)
        return {"message": "Password has been reset successfully"}


def get_auth_service(
    db: Session = Depends(get_session),
    cache: Cache = Depends(get_cache),
) -> AuthService:
    """FastAPI Depends(get_auth_service)."""
    return AuthService(
        UserStore(db),
        get_password_hasher(),
        get_token_issuer(),
        cache,
        get_settings(),
    )
