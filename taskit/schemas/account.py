from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from .base import UpdateRequest


class AccountCreate(BaseModel):
    """Registration payload. Content rules are applied by the credential store."""
    name: StrictStr
    email: StrictStr
    password: StrictStr
    age: StrictInt = 0


class AccountUpdate(UpdateRequest):
    """Profile fields an account may change about itself"""
    name: Optional[StrictStr] = None
    age: Optional[StrictInt] = None
    email: Optional[StrictStr] = None
    password: Optional[StrictStr] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class AccountOut(BaseModel):
    """
    External representation of an account.

    Deliberately has no password, token or avatar fields: anything returned
    through this schema is stripped of them.
    """
    id: int
    name: str
    email: str
    age: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    user: AccountOut
    token: str = Field(..., description="Bearer token for the new session")


class MessageResponse(BaseModel):
    success: str
