from typing import List

from fastapi import APIRouter, Depends, Response, status

from todo_api.dependencies.auth import CurrentUser, get_current_user
from todo_api.schemas.user import (
    PreferencesOut,
    PreferencesUpdate,
    UserCreate,
    UserOut,
    UserProfileOut,
    UserUpdate,
)
from todo_api.services.user_service import UserService, get_user_service

user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(body: UserCreate, service: UserService = Depends(get_user_service)):
    return service.register(body)


@user_router.get("", response_model=List[UserOut])
def list_users(
    _: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return service.list_users()


@user_router.get("/profile", response_model=UserProfileOut)
def get_profile(
    current: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return service.get(current.id)


@user_router.patch("/profile", response_model=UserOut)
def update_profile(
    body: UserUpdate,
    current: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return service.update(current.id, body)


@user_router.patch("/preferences", response_model=PreferencesOut)
def update_preferences(
    body: PreferencesUpdate,
    current: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return service.update_preferences(current.id, body)


@user_router.get("/{user_id}", response_model=UserProfileOut)
def get_user(
    user_id: int,
    _: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return service.get(user_id)


@user_router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    _: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    service.remove(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
