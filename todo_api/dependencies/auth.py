from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from todo_api.core.errors import Unauthorized
from todo_api.core.tokens import InvalidToken, TokenIssuer, get_token_issuer

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: int
    email: str


def authenticate_token(token: str | None, issuer: TokenIssuer) -> CurrentUser:
    """
    서명/만료만 확인하는 stateless 검증.
    사용자 저장소나 토큰 캐시는 보지 않으므로 logout 이후에도
    만료 전 access token은 그대로 통과한다.
    """
    if not token:
        raise Unauthorized("Missing bearer token")
    try:
        payload = issuer.verify(token)
        return CurrentUser(id=int(payload["sub"]), email=payload.get("email", ""))
    except (InvalidToken, KeyError, TypeError, ValueError) as exc:
        raise Unauthorized("Invalid or expired token") from exc


def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> CurrentUser:
    """Strict auth dependency; raises when no/invalid token."""
    return authenticate_token(token, issuer)
