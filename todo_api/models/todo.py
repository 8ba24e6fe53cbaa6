from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import Column, ForeignKey, Integer, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from todo_api.models.user import utc_column, utcnow


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Todo(SQLModel, table=True):
    __tablename__ = "todo"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: Optional[str] = None
    is_completed: bool = Field(default=False)
    priority: Priority = Field(default=Priority.MEDIUM)
    due_date: Optional[datetime] = Field(default=None, sa_column=utc_column(nullable=True))
    user_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    created_at: datetime = Field(default_factory=utcnow, sa_column=utc_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=utc_column())

    tag_links: List["TodoTag"] = Relationship(
        back_populates="todo",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "lazy": "selectin"},
    )

    @property
    def tags(self) -> List[str]:
        return [t.name for t in self.tag_links]


class TodoTag(SQLModel, table=True):
    __tablename__ = "todotag"

    __table_args__ = (
        UniqueConstraint("todo_id", "name", name="uq_todotag_todo_name"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    todo_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("todo.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    name: str = Field(index=True)

    todo: Optional[Todo] = Relationship(back_populates="tag_links")
