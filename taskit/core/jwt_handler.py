import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError

from .config import Settings


class JWTHandler:
    """Signs and verifies session tokens with a fixed secret and algorithm"""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_minutes: Optional[int] = None):
        if not secret_key:
            raise ValueError("A signing secret is required")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "JWTHandler":
        return cls(settings.jwt_secret, settings.jwt_algorithm, settings.token_expire_minutes)

    def create_access_token(self, subject) -> str:
        """
        Sign a token for ``subject``.

        Every token carries a random ``jti`` so two tokens issued for the same
        account in the same second are still different strings.
        """
        now = datetime.now(timezone.utc)
        payload = {"sub": str(subject), "iat": now, "jti": uuid.uuid4().hex}
        if self.expires_minutes:
            payload["exp"] = now + timedelta(minutes=self.expires_minutes)
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_access_token(self, token: str) -> Optional[dict]:
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None
