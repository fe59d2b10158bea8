from pydantic import AfterValidator, BaseModel, model_validator
from datetime import datetime
from typing import Annotated, Optional

UPDATABLE_FIELDS = frozenset({"description", "completed"})


def _clean_description(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Description is required")
    return value


Description = Annotated[str, AfterValidator(_clean_description)]


class TaskCreate(BaseModel):
    """Schema for creating new tasks."""
    description: Description
    completed: bool = False


class TaskUpdate(BaseModel):
    """Schema for updating existing tasks."""
    description: Optional[Description] = None
    completed: Optional[bool] = None

    @model_validator(mode="before")
    @classmethod
    def _reject_nulls(cls, data):
        if isinstance(data, dict):
            nulls = sorted(key for key, value in data.items() if value is None)
            if nulls:
                raise ValueError(f"Fields may not be null: {', '.join(nulls)}")
        return data


class Task(BaseModel):
    """Complete task schema with all fields."""
    id: str
    description: str
    completed: bool
    owner_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
