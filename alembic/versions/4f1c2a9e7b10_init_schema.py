"""init_schema

Revision ID: 4f1c2a9e7b10
Revises:
Create Date: 2026-10-19 09:12:31.418220

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = '4f1c2a9e7b10'
down_revision = None
branch_labels = None
depends_on = None

priority_enum = sa.Enum("LOW", "MEDIUM", "HIGH", name="priority")


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column(
            "preferences",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=True,
        ),
        sa.Column("refresh_token_hash", sa.String(), nullable=True),
        sa.Column("reset_token", sa.String(), nullable=True),
        sa.Column("reset_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)
    op.create_index("ix_user_reset_token", "user", ["reset_token"], unique=False)

    op.create_table(
        "todo",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("is_completed", sa.Boolean(), nullable=False),
        sa.Column("priority", priority_enum, nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_todo_user_id", "todo", ["user_id"], unique=False)

    op.create_table(
        "todotag",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("todo_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.ForeignKeyConstraint(["todo_id"], ["todo.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("todo_id", "name", name="uq_todotag_todo_name"),
    )
    op.create_index("ix_todotag_todo_id", "todotag", ["todo_id"], unique=False)
    op.create_index("ix_todotag_name", "todotag", ["name"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_todotag_name", table_name="todotag")
    op.drop_index("ix_todotag_todo_id", table_name="todotag")
    op.drop_table("todotag")
    op.drop_index("ix_todo_user_id", table_name="todo")
    op.drop_table("todo")
    priority_enum.drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_user_reset_token", table_name="user")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
