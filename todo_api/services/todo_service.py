"""
Per-user todo CRUD, filtered listing and statistics.

Reads go through the cache:
- `todos:{user_id}:{query}`  list pages, CACHE_DEFAULT_TTL_MS (5 min)
- `todo:{id}`                single todo, CACHE_DEFAULT_TTL_MS (5 min)
- `todo:stats:{user_id}`     statistics, 10 min

Writes only delete `todo:{id}` and the stats entry. Cached list pages are not
invalidated (the cache has no pattern delete) and expire on their TTL.
"""
from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy import case, func, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from todo_api.core.cache import Cache, get_cache
from todo_api.core.config import get_settings
from todo_api.core.errors import InvalidTodoData, TodoNotFound
from todo_api.db.session import get_session
from todo_api.models.todo import Priority, Todo, TodoTag
from todo_api.models.user import utcnow
from todo_api.schemas.todo import (
    PageMeta,
    TodoCreate,
    TodoOut,
    TodoPage,
    TodoQuery,
    TodoStats,
    TodoUpdate,
)

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 300_000
STATS_TTL_MS = 600_000

_PRIORITY_RANK = case(
    (col(Todo.priority) == Priority.LOW, 0),
    (col(Todo.priority) == Priority.MEDIUM, 1),
    (col(Todo.priority) == Priority.HIGH, 2),
    else_=1,
)

_SORT_COLUMNS = {
    "title": col(Todo.title),
    "dueDate": col(Todo.due_date),
    "createdAt": col(Todo.created_at),
    "priority": _PRIORITY_RANK,
}


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # offset 없는 입력은 UTC로 간주
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _tag_links(tags: List[str], existing: Optional[List[TodoTag]] = None) -> List[TodoTag]:
    # 순서 유지 + 중복 제거, 남는 태그는 기존 행을 재사용 (unique 제약)
    current = {t.name: t for t in existing or []}
    return [current.get(name) or TodoTag(name=name) for name in dict.fromkeys(tags)]


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


class TodoService:
    def __init__(self, db: Session, cache: Cache, ttl_ms: int = DEFAULT_TTL_MS) -> None:
        self.db = db
        self.cache = cache
        self.ttl_ms = ttl_ms

    # ---- 캐시 키 ----
    @staticmethod
    def list_key(user_id: int, query: TodoQuery) -> str:
        params = query.model_dump(mode="json", by_alias=True, exclude_none=True)
        return f"todos:{user_id}:{json.dumps(params, sort_keys=True)}"

    @staticmethod
    def item_key(todo_id: int) -> str:
        return f"todo:{todo_id}"

    @staticmethod
    def stats_key(user_id: int) -> str:
        return f"todo:stats:{user_id}"

    def _invalidate(self, user_id: int, todo_id: Optional[int] = None) -> None:
        if todo_id is not None:
            self.cache.delete(self.item_key(todo_id))
        self.cache.delete(self.stats_key(user_id))

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise InvalidTodoData() from exc

    def _get_owned(self, user_id: int, todo_id: int) -> Todo:
        todo = self.db.get(Todo, todo_id)
        if todo is None or todo.user_id != user_id:
            raise TodoNotFound(f"Todo with ID {todo_id} not found")
        return todo

    # ---- CRUD ----
    def create(self, user_id: int, body: TodoCreate) -> TodoOut:
        todo = Todo(
            title=body.title,
            description=body.description,
            due_date=_as_utc(body.due_date),
            priority=body.priority or Priority.MEDIUM,
            user_id=user_id,
        )
        todo.tag_links = _tag_links(body.tags or [])
        self.db.add(todo)
        self._commit()
        self.db.refresh(todo)

        self._invalidate(user_id)
        logger.info("todo created id=%s user_id=%s", todo.id, user_id)
        return TodoOut.model_validate(todo)

    def find_all(self, user_id: int, query: TodoQuery) -> TodoPage:
        cache_key = self.list_key(user_id, query)
        cached = self.cache.get(cache_key)
        if cached:
            return TodoPage.model_validate(cached)

        conditions = [col(Todo.user_id) == user_id]
        if query.is_completed is not None:
            conditions.append(col(Todo.is_completed) == query.is_completed)
        if query.priority:
            conditions.append(col(Todo.priority) == query.priority)
        if query.search:
            pattern = f"%{_escape_like(query.search)}%"
            conditions.append(
                or_(
                    col(Todo.title).ilike(pattern, escape="\\"),
                    col(Todo.description).ilike(pattern, escape="\\"),
                )
            )
        if query.tag:
            tagged = select(TodoTag.todo_id).where(TodoTag.name == query.tag)
            conditions.append(col(Todo.id).in_(tagged))

        total = self.db.exec(select(func.count()).select_from(Todo).where(*conditions)).one()

        sort_col = _SORT_COLUMNS[query.sort_by]
        order = sort_col.asc() if query.sort_order == "asc" else sort_col.desc()
        stmt = (
            select(Todo)
            .where(*conditions)
            .order_by(order, col(Todo.id).asc())
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        )
        todos = self.db.exec(stmt).all()

        page = TodoPage(
            data=[TodoOut.model_validate(t) for t in todos],
            meta=PageMeta(
                total=total,
                page=query.page,
                limit=query.limit,
                total_pages=math.ceil(total / query.limit),
            ),
        )
        self.cache.set(cache_key, _dump(page), self.ttl_ms)
        return page

    def find_one(self, user_id: int, todo_id: int) -> TodoOut:
        cached = self.cache.get(self.item_key(todo_id))
        if cached:
            todo = TodoOut.model_validate(cached)
            if todo.user_id != user_id:
                raise TodoNotFound(f"Todo with ID {todo_id} not found")
            return todo

        todo = TodoOut.model_validate(self._get_owned(user_id, todo_id))
        self.cache.set(self.item_key(todo_id), _dump(todo), self.ttl_ms)
        return todo

    def update(self, user_id: int, todo_id: int, body: TodoUpdate) -> TodoOut:
        todo = self._get_owned(user_id, todo_id)

        fields = body.model_dump(exclude_unset=True)
        tags = fields.pop("tags", None)
        if "due_date" in fields:
            fields["due_date"] = _as_utc(fields["due_date"])
        for name, value in fields.items():
            if value is None and name in ("title", "priority", "is_completed"):
                continue
            setattr(todo, name, value)
        if tags is not None:
            todo.tag_links = _tag_links(tags, todo.tag_links)
        todo.updated_at = utcnow()

        self.db.add(todo)
        self._commit()
        self.db.refresh(todo)

        self._invalidate(user_id, todo_id)
        return TodoOut.model_validate(todo)

    def remove(self, user_id: int, todo_id: int) -> TodoOut:
        todo = self._get_owned(user_id, todo_id)
        deleted = TodoOut.model_validate(todo)

        self.db.delete(todo)
        self.db.commit()

        self._invalidate(user_id, todo_id)
        logger.info("todo deleted id=%s user_id=%s", todo_id, user_id)
        return deleted

    # ---- 통계 ----
    def statistics(self, user_id: int) -> TodoStats:
        cache_key = self.stats_key(user_id)
        cached = self.cache.get(cache_key)
        if cached:
            return TodoStats.model_validate(cached)

        owned = col(Todo.user_id) == user_id
        total = self.db.exec(select(func.count()).select_from(Todo).where(owned)).one()
        completed = self.db.exec(
            select(func.count()).select_from(Todo).where(owned, col(Todo.is_completed).is_(True))
        ).one()

        by_priority = {p.value: 0 for p in Priority}
        rows = self.db.exec(
            select(Todo.priority, func.count()).where(owned).group_by(Todo.priority)
        ).all()
        for priority, count in rows:
            by_priority[Priority(priority).value] = count

        stats = TodoStats(
            total=total,
            completed=completed,
            pending=total - completed,
            completion_rate=(completed / total) * 100 if total > 0 else 0,
            by_priority=by_priority,
        )
        self.cache.set(cache_key, _dump(stats), STATS_TTL_MS)
        return stats


def get_todo_service(
    db: Session = Depends(get_session),
    cache: Cache = Depends(get_cache),
) -> TodoService:
    return TodoService(db, cache, ttl_ms=get_settings().cache_default_ttl_ms)
