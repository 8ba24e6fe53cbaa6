from typing import Optional

from pydantic import EmailStr, Field

from todo_api.schemas.base import CamelModel


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=8)


class UserSummary(CamelModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class TokenPairOut(CamelModel):
    access_token: str
    refresh_token: str


class LoginResponse(TokenPairOut):
    user: UserSummary


class MessageOut(CamelModel):
    message: str


class ForgotPasswordResponse(MessageOut):
    # 메일 발송 대신 응답으로 토큰을 그대로 돌려준다
    reset_token: str
