"""
Error taxonomy shared by services and the HTTP layer.
"""
from typing import Dict, Optional


class TaskItError(Exception):
    """Base class for errors raised by Task-It services"""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(TaskItError):
    """One or more fields failed validation; nothing was persisted"""

    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        super().__init__(message)
        self.errors = dict(errors)

    def to_dict(self) -> dict:
        return {"error": self.message, "fields": self.errors}


class InvalidUpdateError(ValidationError):
    """An update set was empty or named a field outside the allow-list"""

    message = "Invalid updates being applied"


class AuthenticationError(TaskItError):
    """
    Raised for every kind of authentication failure.

    The message never varies: callers must not learn whether the token was
    forged, revoked, or issued for an account that no longer exists.
    """

    status_code = 403
    message = "Please authenticate."

    def __init__(self):
        super().__init__(self.message)


class LoginError(TaskItError):
    """Unknown email or wrong password"""

    status_code = 400
    message = "Unable to login"

    def __init__(self):
        super().__init__(self.message)


class NotFoundError(TaskItError):
    status_code = 404

    def __init__(self, resource: str = "Resource", message: Optional[str] = None):
        super().__init__(message or f"{resource} not found")
        self.resource = resource
