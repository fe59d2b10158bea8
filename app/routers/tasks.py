from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlmodel import Session, select

from ..dependencies import get_current_user, get_db
from ..errors import NotFound
from ..models import Task as TaskModel, User, utc_now
from ..queries import TaskQuery, run_task_query
from ..schemas.task import UPDATABLE_FIELDS, Task as TaskSchema, TaskCreate, TaskUpdate
from ..updates import parse_update

router = APIRouter()


def _get_owned_task(db: Session, task_id: str, current_user: User) -> TaskModel:
    # Someone else's task looks exactly like a missing one.
    task = db.exec(
        select(TaskModel).where(TaskModel.id == task_id, TaskModel.owner_id == current_user.id)
    ).first()
    if not task:
        raise NotFound("Task not found")
    return task


@router.post("", response_model=TaskSchema, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a new task for the current user."""
    db_task = TaskModel(
        description=task.description,
        completed=task.completed,
        owner_id=current_user.id,
    )
    db.add(db_task)
    db.commit()
    db.refresh(db_task)
    return db_task


@router.get("", response_model=List[TaskSchema])
def get_tasks(
    completed: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    limit: Optional[str] = None,
    skip: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the current user's tasks.

    Examples:
        /tasks?completed=false
        /tasks?limit=10&skip=10
        /tasks?sortBy=createdAt_desc
    """
    query = TaskQuery.from_params(completed=completed, sort_by=sort_by, limit=limit, skip=skip)
    return list(run_task_query(db, current_user.id, query))


@router.get("/{task_id}", response_model=TaskSchema)
def get_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get a specific task by ID."""
    return _get_owned_task(db, task_id, current_user)


@router.patch("/{task_id}", response_model=TaskSchema)
def update_task(
    task_id: str,
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update description and/or completed; any other key rejects the update."""
    changes = parse_update(payload, UPDATABLE_FIELDS, TaskUpdate)
    task = _get_owned_task(db, task_id, current_user)

    for field, value in changes.items():
        setattr(task, field, value)
    task.updated_at = utc_now()

    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@router.delete("/{task_id}", response_model=TaskSchema)
def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a specific task and return it."""
    task = _get_owned_task(db, task_id, current_user)
    deleted = TaskSchema.model_validate(task)

    db.delete(task)
    db.commit()
    return deleted
