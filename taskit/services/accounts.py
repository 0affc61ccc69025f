"""
Account lifecycle: registration, login, profile changes, avatars and
deletion with its cascade over owned tasks.
"""
import logging
from typing import Any, Callable, Mapping, Optional, Tuple, Union
from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from ..core.errors import NotFoundError
from ..core.jwt_handler import JWTHandler
from ..mail.notifications import Notifier
from ..models.account import Account
from ..schemas.account import AccountCreate, AccountOut, AccountUpdate
from .avatars import AvatarProcessor
from .credentials import CredentialStore
from .tasks import TaskStore
from .tokens import TokenService

logger = logging.getLogger(__name__)


class AccountManager:
    """Orchestrates account changes across the credential, token and task stores"""

    def __init__(
        self,
        db: Session,
        jwt_handler: JWTHandler,
        notifier: Notifier,
        avatars: Optional[AvatarProcessor] = None,
    ):
        self.db = db
        self.credentials = CredentialStore(db)
        self.tokens = TokenService(db, jwt_handler)
        self.tasks = TaskStore(db)
        self.notifier = notifier
        self.avatars = avatars or AvatarProcessor()

    def register(
        self,
        fields: Union[AccountCreate, Mapping[str, Any]],
        background: Optional[BackgroundTasks] = None,
    ) -> Tuple[Account, str]:
        """
        Create an account and its first session.

        The account row and its token are committed together; the welcome
        message goes out only after that.
        """
        account = self.credentials.create(fields, commit=False)
        try:
            token = self.tokens.issue(account)
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Registered account {account.id}")
        self._notify(background, self.notifier.send_welcome, account.email, account.name)
        return account, token

    def login(self, email: str, password: str) -> Tuple[Account, str]:
        account = self.credentials.find_by_credentials(email, password)
        token = self.tokens.issue(account)
        logger.info(f"Account {account.id} logged in")
        return account, token

    def logout(self, account: Account, token: str) -> None:
        self.tokens.revoke(account, token)

    def logout_all(self, account: Account) -> None:
        self.tokens.revoke_all(account)

    def update_profile(self, account: Account, fields: Union[AccountUpdate, Mapping[str, Any]]) -> Account:
        changes = AccountUpdate.from_payload(fields).changes()
        return self.credentials.update(account, changes)

    def delete_account(self, account: Account, background: Optional[BackgroundTasks] = None) -> AccountOut:
        """
        Delete the account together with every task it owns.

        Both deletions share one transaction: either the account and all its
        tasks are gone, or nothing changed. Returns the account as it was.
        """
        snapshot = AccountOut.model_validate(account)
        email, name = account.email, account.name
        try:
            removed = self.tasks.delete_all_for_owner(account.id)
            self.db.delete(account)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Failed to delete account {snapshot.id}; rolled back")
            raise
        logger.info(f"Deleted account {snapshot.id} and {removed} owned task(s)")
        self._notify(background, self.notifier.send_cancellation, email, name)
        return snapshot

    def set_avatar(self, account: Account, image: bytes, filename: Optional[str] = None) -> None:
        if filename is not None:
            self.avatars.check_upload(filename, image)
        account.avatar = self.avatars.normalize(image)
        self.db.commit()
        logger.info(f"Updated avatar for account {account.id}")

    def clear_avatar(self, account: Account) -> None:
        if account.avatar is None:
            raise NotFoundError("Avatar", "No avatar found")
        account.avatar = None
        self.db.commit()

    def get_avatar(self, account_id: int) -> bytes:
        """Public avatar lookup; a missing account and a missing avatar look the same"""
        account = self.credentials.get(account_id)
        if account is None or account.avatar is None:
            raise NotFoundError("Avatar")
        return account.avatar

    @staticmethod
    def _notify(background: Optional[BackgroundTasks], send: Callable[[str, str], None], email: str, name: str):
        if background is not None:
            background.add_task(_deliver, send, email, name)
        else:
            _deliver(send, email, name)


def _deliver(send: Callable[[str, str], None], email: str, name: str) -> None:
    try:
        send(email, name)
    except Exception as e:
        # Notifications never affect the outcome of the request
        logger.error(f"Notification {getattr(send, '__name__', send)} to {email} failed: {e}")
