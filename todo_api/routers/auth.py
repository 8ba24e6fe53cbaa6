from fastapi import APIRouter, Depends

from todo_api.dependencies.auth import CurrentUser, get_current_user
from todo_api.schemas.auth import (
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    LoginResponse,
    MessageOut,
    RefreshRequest,
    ResetPasswordRequest,
    TokenPairOut,
)
from todo_api.services.auth_service import AuthService, get_auth_service

auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)):
    return service.login(body.email, body.password)


@auth_router.post("/refresh", response_model=TokenPairOut)
def refresh(body: RefreshRequest, service: AuthService = Depends(get_auth_service)):
    return service.refresh(body.refresh_token)


@auth_router.post("/logout", response_model=MessageOut)
def logout(
    current: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return service.logout(current.id)


@auth_router.post("/forgot-password", response_model=ForgotPasswordResponse)
def forgot_password(body: ForgotPasswordRequest, service: AuthService = Depends(get_auth_service)):
    return service.forgot_password(body.email)


@auth_router.post("/reset-password", response_model=MessageOut)
def reset_password(body: ResetPasswordRequest, service: AuthService = Depends(get_auth_service)):
    return service.reset_password(body.token, body.new_password)
