"""
Credential store: account records and password verification.
"""
import logging
from typing import Any, Mapping, Optional, Union
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import LoginError, ValidationError
from ..models.account import Account
from ..schemas.account import AccountCreate
from ..utils.security import get_password_hash, verify_password
from .validators import clean_account_fields, normalize_email

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "Email already registered"


class CredentialStore:
    """Persists accounts; plaintext passwords never reach the database"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, account_id: int) -> Optional[Account]:
        return self.db.get(Account, account_id)

    def find_by_email(self, email: str) -> Optional[Account]:
        if not email:
            return None
        return self.db.query(Account).filter(Account.email == normalize_email(email)).first()

    def verify_password(self, account: Account, plaintext: str) -> bool:
        return verify_password(plaintext, account.password_hash)

    def find_by_credentials(self, email: str, password: str) -> Account:
        """Unknown email and wrong password fail identically"""
        account = self.find_by_email(email)
        if account is None or not self.verify_password(account, password):
            raise LoginError()
        return account

    def create(self, fields: Union[AccountCreate, Mapping[str, Any]], commit: bool = True) -> Account:
        """
        Validate and store a new account.

        With ``commit=False`` the row is only flushed, so the caller can finish
        related writes in the same transaction.
        """
        if isinstance(fields, AccountCreate):
            fields = fields.model_dump()
        payload = {"age": 0, **fields}
        missing = {name: "This field is required" for name in ("name", "email", "password") if name not in payload}
        if missing:
            raise ValidationError(missing)

        cleaned = clean_account_fields(payload)
        self._ensure_email_free(cleaned["email"])

        account = Account(
            name=cleaned["name"],
            email=cleaned["email"],
            age=cleaned["age"],
            password_hash=get_password_hash(cleaned["password"]),
        )
        self.db.add(account)
        self._save(commit)
        logger.info(f"Created account {account.id}")
        return account

    def update(self, account: Account, changes: Mapping[str, Any], commit: bool = True) -> Account:
        """
        Validate ``changes`` and apply them to ``account``.

        A new password is hashed here, on every change of the field, before
        the row is written.
        """
        cleaned = clean_account_fields(changes)
        if "email" in cleaned and cleaned["email"] != account.email:
            self._ensure_email_free(cleaned["email"], exclude_id=account.id)

        password = cleaned.pop("password", None)
        if password is not None:
            account.password_hash = get_password_hash(password)
        for name, value in cleaned.items():
            setattr(account, name, value)

        self._save(commit)
        return account

    def _ensure_email_free(self, email: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(Account.id).filter(Account.email == email)
        if exclude_id is not None:
            query = query.filter(Account.id != exclude_id)
        if query.first() is not None:
            raise ValidationError({"email": DUPLICATE_EMAIL})

    def _save(self, commit: bool) -> None:
        # The unique index still guards against a concurrent registration
        # slipping past _ensure_email_free
        try:
            if commit:
                self.db.commit()
            else:
                self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error while saving account: {e.orig}")
            raise ValidationError({"email": DUPLICATE_EMAIL}) from e
