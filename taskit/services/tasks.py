"""
Task store. Every operation is scoped to the owning account: a task that
belongs to someone else behaves exactly like one that does not exist.
"""
import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Union
from sqlalchemy import asc, desc
from sqlalchemy.orm import Session

from ..core.errors import NotFoundError, ValidationError
from ..models.task import Task
from ..schemas.task import TaskCreate, TaskUpdate
from .validators import clean_task_fields

logger = logging.getLogger(__name__)

# Query names accepted by sortBy, mapped to columns
SORTABLE_FIELDS = {
    "description": Task.description,
    "completed": Task.completed,
    "createdAt": Task.created_at,
    "created_at": Task.created_at,
    "updatedAt": Task.updated_at,
    "updated_at": Task.updated_at,
}


@dataclass
class TaskFilter:
    completed: Optional[bool] = None


@dataclass
class TaskSort:
    field: str
    descending: bool = False

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["TaskSort"]:
        """Parse ``field:asc`` / ``field:desc``; a bare field sorts ascending"""
        if not value:
            return None
        field, _, direction = value.partition(":")
        if field not in SORTABLE_FIELDS:
            raise ValidationError({"sortBy": f"Cannot sort by '{field}'"})
        if direction not in ("", "asc", "desc"):
            raise ValidationError({"sortBy": "Sort direction must be asc or desc"})
        return cls(field=field, descending=direction == "desc")


@dataclass
class Page:
    skip: Optional[int] = None
    limit: Optional[int] = None

    def __post_init__(self):
        for name in ("skip", "limit"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValidationError({name: "Must be zero or greater"})


def parse_completed(value: Optional[str]) -> Optional[bool]:
    """Interpret the ``completed`` query string"""
    if value is None or value == "":
        return None
    lowered = value.lower()
    if lowered not in ("true", "false"):
        raise ValidationError({"completed": "Must be true or false"})
    return lowered == "true"


class TaskStore:

    def __init__(self, db: Session):
        self.db = db

    def _owned(self, owner_id: int):
        return self.db.query(Task).filter(Task.owner_id == owner_id)

    def create(self, owner_id: int, fields: Union[TaskCreate, Mapping[str, Any]]) -> Task:
        if isinstance(fields, TaskCreate):
            fields = fields.model_dump()
        payload = {"completed": False, **{k: v for k, v in fields.items() if k in ("description", "completed")}}
        if "description" not in payload:
            raise ValidationError({"description": "Description is required"})
        cleaned = clean_task_fields(payload)

        task = Task(owner_id=owner_id, **cleaned)
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        logger.info(f"Created task {task.id} for account {owner_id}")
        return task

    def get(self, owner_id: int, task_id: int) -> Optional[Task]:
        return self._owned(owner_id).filter(Task.id == task_id).first()

    def list(
        self,
        owner_id: int,
        task_filter: Optional[TaskFilter] = None,
        sort: Optional[TaskSort] = None,
        page: Optional[Page] = None,
    ) -> List[Task]:
        """List the owner's tasks; without a sort the store order is kept"""
        query = self._owned(owner_id)

        if task_filter is not None and task_filter.completed is not None:
            query = query.filter(Task.completed == task_filter.completed)

        if sort is not None:
            direction = desc if sort.descending else asc
            query = query.order_by(direction(SORTABLE_FIELDS[sort.field]), direction(Task.id))

        if page is not None:
            if page.skip:
                query = query.offset(page.skip)
            # A limit of zero means no limit
            if page.limit:
                query = query.limit(page.limit)

        return query.all()

    def update(self, owner_id: int, task_id: int, fields: Union[TaskUpdate, Mapping[str, Any]]) -> Task:
        """
        Apply an allow-listed update. The whole set is validated before the
        task is touched; nothing is applied if any part is rejected.
        """
        changes = TaskUpdate.from_payload(fields).changes()

        task = self.get(owner_id, task_id)
        if task is None:
            raise NotFoundError("Task")

        cleaned = clean_task_fields(changes)
        for name, value in cleaned.items():
            setattr(task, name, value)
        self.db.commit()
        self.db.refresh(task)
        return task

    def delete(self, owner_id: int, task_id: int) -> Optional[Task]:
        task = self.get(owner_id, task_id)
        if task is None:
            return None
        self.db.delete(task)
        self.db.commit()
        logger.info(f"Deleted task {task_id} for account {owner_id}")
        return task

    def delete_all_for_owner(self, owner_id: int) -> int:
        """Remove every task of ``owner_id`` without committing"""
        return self._owned(owner_id).delete(synchronize_session=False)
