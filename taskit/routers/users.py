import logging
from fastapi import APIRouter, BackgroundTasks, Depends, File, Response, UploadFile, status

from ..core.auth import AuthContext, get_current_account
from ..schemas.account import (
    AccountCreate, AccountOut, AccountUpdate, AuthResponse, LoginRequest, MessageResponse
)
from ..services.accounts import AccountManager
from .deps import get_account_manager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    account_in: AccountCreate,
    background_tasks: BackgroundTasks,
    manager: AccountManager = Depends(get_account_manager),
):
    """Create an account and start its first session"""
    account, token = manager.register(account_in, background_tasks)
    return {"user": account, "token": token}


@router.post("/login", response_model=AuthResponse)
def login(credentials: LoginRequest, manager: AccountManager = Depends(get_account_manager)):
    account, token = manager.login(credentials.email, credentials.password)
    return {"user": account, "token": token}


@router.post("/logout", response_model=MessageResponse)
def logout(
    auth: AuthContext = Depends(get_current_account),
    manager: AccountManager = Depends(get_account_manager),
):
    """End the session that made this request"""
    manager.logout(auth.account, auth.token)
    return {"success": "Logged out successfully"}


@router.post("/logoutAll", response_model=MessageResponse)
def logout_all(
    auth: AuthContext = Depends(get_current_account),
    manager: AccountManager = Depends(get_account_manager),
):
    manager.logout_all(auth.account)
    return {"success": "Logged out of all sessions"}


@router.get("/me", response_model=AccountOut)
def read_me(auth: AuthContext = Depends(get_current_account)):
    return auth.account


@router.patch("/me", response_model=AccountOut)
def update_me(
    update: AccountUpdate,
    auth: AuthContext = Depends(get_current_account),
    manager: AccountManager = Depends(get_account_manager),
):
    return manager.update_profile(auth.account, update)


@router.delete("/me", response_model=AccountOut)
def delete_me(
    background_tasks: BackgroundTasks,
    auth: AuthContext = Depends(get_current_account),
    manager: AccountManager = Depends(get_account_manager),
):
    """Delete the account and every task it owns"""
    return manager.delete_account(auth.account, background_tasks)


@router.post("/me/avatar", response_model=MessageResponse)
def upload_avatar(
    avatar: UploadFile = File(...),
    auth: AuthContext = Depends(get_current_account),
    manager: AccountManager = Depends(get_account_manager),
):
    # Read one byte past the cap so oversize uploads are detected without
    # buffering the whole file
    data = avatar.file.read(manager.avatars.max_bytes + 1)
    manager.set_avatar(auth.account, data, filename=avatar.filename or "")
    return {"success": "Uploaded successfully"}


@router.delete("/me/avatar", response_model=MessageResponse)
def delete_avatar(
    auth: AuthContext = Depends(get_current_account),
    manager: AccountManager = Depends(get_account_manager),
):
    manager.clear_avatar(auth.account)
    return {"success": "Deleted successfully"}


@router.get("/{account_id}/avatar", response_class=Response)
def read_avatar(account_id: int, manager: AccountManager = Depends(get_account_manager)):
    return Response(content=manager.get_avatar(account_id), media_type="image/png")
