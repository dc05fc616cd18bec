from sqlmodel import SQLModel, Field
from sqlalchemy import Index
from datetime import datetime
from uuid import uuid4

class Task(SQLModel, table=True):
    """Task model for todo items.

    ``month`` and ``year`` are derived from ``date`` on every write.
    """
    __tablename__ = "todos"
    __table_args__ = (
        Index("ix_todos_user_month_year", "user_id", "month", "year"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str
    description: str
    status: str = Field(default="Pending")
    priority: str = Field(default="Medium")
    date: str
    month: int
    year: int
    user_id: str = Field(index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
