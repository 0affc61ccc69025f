"""
Authentication gate: turns an ``Authorization`` header into the account and
session token it belongs to.
"""
import logging
from typing import Optional
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from .database import get_db
from .errors import AuthenticationError
from .jwt_handler import JWTHandler
from ..models.account import Account
from ..services.tokens import TokenService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class AuthContext:
    """The authenticated account and the token it presented"""

    def __init__(self, account: Account, token: str):
        self.account = account
        self.token = token

    def __str__(self):
        return f"AuthContext(account={self.account.id})"

    def __repr__(self):
        return self.__str__()


class AuthGate:
    """
    Request-level authentication holding its own signing configuration.

    Every failure raises the same AuthenticationError; the reason is only
    logged.
    """

    def __init__(self, jwt_handler: JWTHandler):
        self.jwt_handler = jwt_handler

    @staticmethod
    def extract_token(authorization: Optional[str]) -> Optional[str]:
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            return None
        token = authorization[len(BEARER_PREFIX):].strip()
        return token or None

    def authenticate(self, authorization: Optional[str], db: Session) -> AuthContext:
        token = self.extract_token(authorization)
        if token is None:
            logger.warning("Rejected request with missing or malformed Authorization header")
            raise AuthenticationError()
        try:
            account = TokenService(db, self.jwt_handler).validate(token)
        except AuthenticationError:
            logger.warning("Rejected request with invalid session token")
            raise
        return AuthContext(account, token)


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate


def get_current_account(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    gate: AuthGate = Depends(get_auth_gate),
) -> AuthContext:
    """
    Dependency to get the current authenticated account.

    Raises:
        AuthenticationError: for any missing, malformed, forged or revoked token
    """
    return gate.authenticate(authorization, db)
