from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, LargeBinary
from datetime import datetime
from typing import Optional, List
from uuid import uuid4

from .timestamps import utc_now


class User(SQLModel, table=True):
    """User model for authentication and profile data.

    Never returned directly: responses go through ``schemas.user.User``,
    which leaves out the password hash, session tokens and avatar bytes.
    """
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str
    email: str = Field(unique=True, index=True)
    hashed_password: str
    age: int = Field(default=0)
    avatar: Optional[bytes] = Field(default=None, sa_column=Column(LargeBinary, nullable=True))
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    # Active session tokens
    tokens: List["UserToken"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class UserToken(SQLModel, table=True):
    """One issued bearer token; removing the row revokes the token."""
    __tablename__ = "user_tokens"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True, foreign_key="users.id")
    token: str = Field(index=True)
    created_at: datetime = Field(default_factory=utc_now)

    user: Optional[User] = Relationship(back_populates="tokens")
