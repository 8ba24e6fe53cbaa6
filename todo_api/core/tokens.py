from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict
from uuid import uuid4

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

from todo_api.core.config import get_settings

DEFAULT_LIFETIME_MS = 15 * 60 * 1000

_UNIT_MS = {
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
}
_INT_RE = re.compile(r"^\s*[+-]?\d+\s*$")


class InvalidToken(Exception):
    """Bad signature, malformed token or missing claims."""


class TokenExpired(InvalidToken):
    pass


def parse_lifetime_ms(value: str | None) -> int:
    """
    "15m" / "1h" / "7d" / "30s" 형식의 수명을 밀리초로 변환한다.
    알 수 없는 단위, 숫자가 아닌 값, 0 이하 값은 기본값(15분)으로 처리.
    """
    if not value:
        return DEFAULT_LIFETIME_MS
    value = value.strip()
    unit_ms = _UNIT_MS.get(value[-1:])
    number = value[:-1]
    if unit_ms is None or not _INT_RE.match(number):
        return DEFAULT_LIFETIME_MS
    amount = int(number)
    if amount <= 0:
        return DEFAULT_LIFETIME_MS
    return amount * unit_ms


# ---- 공통 ----
def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenIssuer:
    """Signs and verifies the access/refresh JWTs. Both share one secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        access_lifetime: str = "15m",
        refresh_lifetime: str = "7d",
    ) -> None:
        if not secret:
            raise ValueError("a signing secret is required")
        self._secret = secret
        self._algorithm = algorithm
        self.access_lifetime = access_lifetime
        self.refresh_lifetime = refresh_lifetime

    @property
    def access_ttl_ms(self) -> int:
        return parse_lifetime_ms(self.access_lifetime)

    def issue(self, claims: Dict[str, Any], lifetime: str) -> str:
        now = _utcnow()
        exp = now + timedelta(milliseconds=parse_lifetime_ms(lifetime))
        to_encode = dict(claims)
        to_encode["iat"] = int(now.timestamp())
        to_encode["exp"] = int(exp.timestamp())
        # 같은 초에 발급된 토큰도 서로 달라야 회전이 의미가 있음
        to_encode["jti"] = uuid4().hex
        return jwt.encode(to_encode, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as exc:
            raise TokenExpired("token expired") from exc
        except JWTError as exc:
            raise InvalidToken(str(exc)) from exc

    def issue_pair(self, user_id: int, email: str) -> TokenPair:
        claims = {"sub": str(user_id), "email": email}
        return TokenPair(
            access_token=self.issue(claims, self.access_lifetime),
            refresh_token=self.issue(claims, self.refresh_lifetime),
        )


@lru_cache
def get_token_issuer() -> TokenIssuer:
    settings = get_settings()
    return TokenIssuer(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        access_lifetime=settings.jwt_access_expiration,
        refresh_lifetime=settings.jwt_refresh_expiration,
    )
