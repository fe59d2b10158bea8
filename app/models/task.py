from sqlmodel import SQLModel, Field
from datetime import datetime
from uuid import uuid4

from .timestamps import utc_now


class Task(SQLModel, table=True):
    """A to-do item owned by exactly one user."""
    __tablename__ = "tasks"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    description: str
    completed: bool = Field(default=False)
    # Set from the authenticated caller on creation, never updated.
    owner_id: str = Field(index=True, foreign_key="users.id")
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)
