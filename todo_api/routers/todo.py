from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from todo_api.dependencies.auth import CurrentUser, get_current_user
from todo_api.models.todo import Priority
from todo_api.schemas.todo import (
    SortField,
    TodoCreate,
    TodoOut,
    TodoPage,
    TodoQuery,
    TodoStats,
    TodoUpdate,
)
from todo_api.services.todo_service import TodoService, get_todo_service

router = APIRouter(prefix="/todos", tags=["todos"])


def todo_query(
    is_completed: Optional[bool] = Query(None, alias="isCompleted"),
    priority: Optional[Priority] = Query(None),
    search: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    sort_by: SortField = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> TodoQuery:
    return TodoQuery(
        is_completed=is_completed,
        priority=priority,
        search=search,
        tag=tag,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )


@router.post("", response_model=TodoOut, status_code=status.HTTP_201_CREATED)
def create_todo(
    body: TodoCreate,
    user: CurrentUser = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    return service.create(user.id, body)


@router.get("", response_model=TodoPage)
def list_todos(
    query: TodoQuery = Depends(todo_query),
    user: CurrentUser = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    return service.find_all(user.id, query)


@router.get("/statistics", response_model=TodoStats)
def todo_statistics(
    user: CurrentUser = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    return service.statistics(user.id)


@router.get("/{todo_id}", response_model=TodoOut)
def get_todo(
    todo_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    return service.find_one(user.id, todo_id)


@router.patch("/{todo_id}", response_model=TodoOut)
def update_todo(
    todo_id: int,
    body: TodoUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    return service.update(user.id, todo_id, body)


@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_todo(
    todo_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    service.remove(user.id, todo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
