from pydantic import AfterValidator, BaseModel, BeforeValidator, EmailStr, Field, model_validator
from typing import Annotated, Optional
from datetime import datetime

MIN_PASSWORD_LENGTH = 7
UPDATABLE_FIELDS = frozenset({"name", "email", "password", "age"})


def _clean_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value


def _clean_email(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _check_password(value: str) -> str:
    value = value.strip()
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if "password" in value.lower():
        raise ValueError("Password cannot contain 'password'")
    return value


Name = Annotated[str, AfterValidator(_clean_name)]
Email = Annotated[EmailStr, BeforeValidator(_clean_email)]
Password = Annotated[str, AfterValidator(_check_password)]


class UserBase(BaseModel):
    name: str
    email: EmailStr


class UserCreate(BaseModel):
    name: Name
    email: Email
    password: Password
    age: int = Field(default=0, ge=0)


class UserUpdate(BaseModel):
    """Profile changes; only the keys present in the request are applied."""
    name: Optional[Name] = None
    email: Optional[Email] = None
    password: Optional[Password] = None
    age: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _reject_nulls(cls, data):
        if isinstance(data, dict):
            nulls = sorted(key for key, value in data.items() if value is None)
            if nulls:
                raise ValueError(f"Fields may not be null: {', '.join(nulls)}")
        return data


class UserLogin(BaseModel):
    email: str
    password: str


class User(UserBase):
    """Public view of a user."""
    id: str
    age: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User
