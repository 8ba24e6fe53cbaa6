from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import Field

from todo_api.models.todo import Priority
from todo_api.schemas.base import CamelModel

SortField = Literal["title", "dueDate", "createdAt", "priority"]


class TodoCreate(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[Priority] = None
    tags: Optional[List[str]] = None


class TodoUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[Priority] = None
    tags: Optional[List[str]] = None
    is_completed: Optional[bool] = None


class TodoQuery(CamelModel):
    is_completed: Optional[bool] = None
    priority: Optional[Priority] = None
    search: Optional[str] = None
    tag: Optional[str] = None
    sort_by: SortField = "createdAt"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class TodoOut(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    is_completed: bool
    priority: Priority
    due_date: Optional[datetime] = None
    tags: List[str] = []
    user_id: int
    created_at: datetime
    updated_at: datetime


class PageMeta(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class TodoPage(CamelModel):
    data: List[TodoOut]
    meta: PageMeta


class TodoStats(CamelModel):
    total: int
    completed: int
    pending: int
    completion_rate: float
    by_priority: Dict[str, int]
