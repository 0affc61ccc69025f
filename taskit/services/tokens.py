"""
Session token issuance, validation and revocation.
"""
import logging
from sqlalchemy.orm import Session

from ..core.errors import AuthenticationError
from ..core.jwt_handler import JWTHandler
from ..models import utcnow
from ..models.account import Account, AccountToken

logger = logging.getLogger(__name__)


class TokenService:
    """
    Issues signed tokens and keeps the per-account list of active ones.

    A token is only valid while its signature checks out, its account exists
    and the exact string is still in that account's token list.
    """

    def __init__(self, db: Session, jwt_handler: JWTHandler):
        self.db = db
        self.jwt_handler = jwt_handler

    def issue(self, account: Account) -> str:
        """Sign a token for ``account`` and persist it as an active session"""
        if account.id is None:
            self.db.flush()
        token = self.jwt_handler.create_access_token(account.id)
        # One row per token: issuing is an insert, so concurrent logins for
        # the same account do not overwrite each other
        account.tokens.append(AccountToken(token=token))
        account.updated_at = utcnow()
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.debug(f"Issued token for account {account.id}")
        return token

    def validate(self, token: str) -> Account:
        payload = self.jwt_handler.verify_access_token(token) if token else None
        if not payload:
            raise AuthenticationError()
        try:
            account_id = int(payload.get("sub"))
        except (TypeError, ValueError):
            raise AuthenticationError()

        account = (
            self.db.query(Account)
            .join(AccountToken, AccountToken.account_id == Account.id)
            .filter(Account.id == account_id, AccountToken.token == token)
            .first()
        )
        if account is None:
            raise AuthenticationError()
        return account

    def revoke(self, account: Account, token: str) -> None:
        """End one session"""
        account.tokens = [item for item in account.tokens if item.token != token]
        account.updated_at = utcnow()
        self.db.commit()

    def revoke_all(self, account: Account) -> None:
        """End every session of the account"""
        account.tokens = []
        account.updated_at = utcnow()
        self.db.commit()
        logger.info(f"Revoked all tokens for account {account.id}")

    def active_tokens(self, account: Account) -> list:
        return [item.token for item in account.tokens]
