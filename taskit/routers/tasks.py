from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from ..core.auth import AuthContext, get_current_account
from ..core.errors import NotFoundError
from ..schemas.task import TaskCreate, TaskUpdate, TaskResponse
from ..services.tasks import Page, TaskFilter, TaskSort, TaskStore, parse_completed
from .deps import get_task_store

router = APIRouter()


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    auth: AuthContext = Depends(get_current_account),
    store: TaskStore = Depends(get_task_store),
):
    """Create a new task owned by the authenticated account"""
    return store.create(auth.account.id, task_data)


@router.get("", response_model=List[TaskResponse])
def get_tasks(
    completed: Optional[str] = Query(None, description="Filter by completion: true or false"),
    limit: Optional[int] = Query(None, ge=0, description="Maximum number of tasks; 0 for no limit"),
    skip: Optional[int] = Query(None, ge=0, description="Number of tasks to skip"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="field:asc or field:desc"),
    auth: AuthContext = Depends(get_current_account),
    store: TaskStore = Depends(get_task_store),
):
    """Get the authenticated account's tasks with filtering, sorting and pagination"""
    return store.list(
        auth.account.id,
        TaskFilter(completed=parse_completed(completed)),
        TaskSort.parse(sort_by),
        Page(skip=skip, limit=limit),
    )


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    auth: AuthContext = Depends(get_current_account),
    store: TaskStore = Depends(get_task_store),
):
    task = store.get(auth.account.id, task_id)
    if task is None:
        raise NotFoundError("Task")
    return task


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    auth: AuthContext = Depends(get_current_account),
    store: TaskStore = Depends(get_task_store),
):
    return store.update(auth.account.id, task_id, task_update)


@router.delete("/{task_id}", response_model=TaskResponse)
def delete_task(
    task_id: int,
    auth: AuthContext = Depends(get_current_account),
    store: TaskStore = Depends(get_task_store),
):
    task = store.delete(auth.account.id, task_id)
    if task is None:
        raise NotFoundError("Task")
    return task
