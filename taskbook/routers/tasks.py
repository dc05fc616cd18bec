from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from ..dependencies import get_current_principal, get_task_gateway
from ..errors import ValidationError
from ..gateways.tasks import TaskGateway
from ..schemas.task import TaskInput, TaskRecord
from ..schemas.user import Principal

router = APIRouter()


@router.get("/tasks", response_model=List[TaskRecord])
def get_tasks(
    month: Optional[int] = None,
    year: Optional[int] = None,
    principal: Optional[Principal] = Depends(get_current_principal),
    tasks: TaskGateway = Depends(get_task_gateway),
):
    """List the current user's tasks, optionally filtered to one month."""
    if month is None and year is None:
        return tasks.list_all(principal)
    if month is None or year is None:
        raise ValidationError("Both month and year are required to filter")
    return tasks.list_by_month(principal, month, year)


@router.post("/tasks", response_model=TaskRecord, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskInput,
    principal: Optional[Principal] = Depends(get_current_principal),
    tasks: TaskGateway = Depends(get_task_gateway),
):
    """Create a new task for the current user."""
    return tasks.create(
        principal, task.title, task.description, task.status, task.priority, task.date
    )


@router.get("/tasks/{task_id}", response_model=TaskRecord)
def get_task(
    task_id: str,
    principal: Optional[Principal] = Depends(get_current_principal),
    tasks: TaskGateway = Depends(get_task_gateway),
):
    return tasks.get(principal, task_id)


@router.put("/tasks/{task_id}", response_model=TaskRecord)
def update_task(
    task_id: str,
    task: TaskInput,
    principal: Optional[Principal] = Depends(get_current_principal),
    tasks: TaskGateway = Depends(get_task_gateway),
):
    """Replace the editable fields of a task."""
    return tasks.update(
        principal, task_id, task.title, task.description, task.status, task.priority, task.date
    )


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: str,
    principal: Optional[Principal] = Depends(get_current_principal),
    tasks: TaskGateway = Depends(get_task_gateway),
):
    tasks.delete(principal, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
