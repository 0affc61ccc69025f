from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..core.database import get_db
from ..services.accounts import AccountManager
from ..services.tasks import TaskStore


def get_account_manager(request: Request, db: Session = Depends(get_db)) -> AccountManager:
    state = request.app.state
    return AccountManager(db, state.jwt_handler, state.notifier, state.avatars)


def get_task_store(db: Session = Depends(get_db)) -> TaskStore:
    return TaskStore(db)
