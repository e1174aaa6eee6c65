"""Users API — signup, login/logout, profile and avatar.

- POST /users → create account, returns profile + token
- POST /users/login → email/password → profile + token
- POST /users/logout → revoke the token used for this request
- POST /users/logoutAll → revoke every token of the user
- GET/PATCH/DELETE /users/me → own profile
- POST/DELETE /users/me/avatar → upload or clear own avatar
- GET /users/{id}/avatar → public PNG

Signup and login are open; everything under /users/me needs a bearer
token. Welcome and cancellation mails go out after the response.
"""

import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, File, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from taskmanager.auth.dependencies import (
    CurrentIdentity,
    get_current_user,
    get_token_service,
)
from taskmanager.auth.tokens import TokenService
from taskmanager.config import settings
from taskmanager.db.engine import get_db
from taskmanager.errors import NotFoundError
from taskmanager.schemas.user import (
    AuthResponse,
    LoginRequest,
    UserCreate,
    UserRead,
    UserUpdate,
)
from taskmanager.services.avatar import normalize_avatar, validate_upload
from taskmanager.services.mail import Mailer, get_mailer
from taskmanager.services.user_service import UserService

router = APIRouter(prefix="/users")


def _user_svc(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


# ─── Signup / login ─────────────────────────────────────


@router.post("", response_model=AuthResponse, status_code=201)
async def create_user(
    body: UserCreate,
    background_tasks: BackgroundTasks,
    svc: UserService = Depends(_user_svc),
    tokens: TokenService = Depends(get_token_service),
    mailer: Mailer = Depends(get_mailer),
):
    """Create an account and log it in."""
    user = await svc.create(body)
    background_tasks.add_task(mailer.send_welcome_email, user.email, user.name)
    token = await tokens.issue(user.id)
    return AuthResponse(user=UserRead.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    svc: UserService = Depends(_user_svc),
    tokens: TokenService = Depends(get_token_service),
):
    """Email/password → new session token. Failures are always generic."""
    user = await svc.find_by_credentials(body.email, body.password)
    token = await tokens.issue(user.id)
    return AuthResponse(user=UserRead.model_validate(user), token=token)


@router.post("/logout")
async def logout(
    identity: CurrentIdentity = Depends(get_current_user),
    tokens: TokenService = Depends(get_token_service),
):
    """End the current session only."""
    await tokens.revoke(identity.user.id, identity.token)
    return {"logged_out": True}


@router.post("/logoutAll")
async def logout_all(
    identity: CurrentIdentity = Depends(get_current_user),
    tokens: TokenService = Depends(get_token_service),
):
    """End every session of the current user."""
    await tokens.revoke_all(identity.user.id)
    return {"logged_out": True}


# ─── Profile ────────────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def read_profile(identity: CurrentIdentity = Depends(get_current_user)):
    return identity.user


@router.patch("/me", response_model=UserRead)
async def update_profile(
    body: UserUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    """Update name, email, password or age. Any other key → 400, nothing applied."""
    return await svc.update(identity.user, body)


@router.delete("/me", response_model=UserRead)
async def delete_profile(
    background_tasks: BackgroundTasks,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
    mailer: Mailer = Depends(get_mailer),
):
    """Delete the account and all of its tasks. Returns the removed profile."""
    profile = UserRead.model_validate(identity.user)
    await svc.delete(identity.user)
    background_tasks.add_task(mailer.send_cancellation_email, profile.email, profile.name)
    return profile


# ─── Avatar ─────────────────────────────────────────────


@router.post("/me/avatar")
async def upload_avatar(
    avatar: UploadFile = File(...),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    """Store the upload as a 250×250 PNG."""
    data = await avatar.read(settings.avatar_max_bytes + 1)
    validate_upload(avatar.filename, len(data), settings.avatar_max_bytes)
    png = await run_in_threadpool(normalize_avatar, data, settings.avatar_size)
    await svc.set_avatar(identity.user, png)
    return {"uploaded": True}


@router.delete("/me/avatar")
async def delete_avatar(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_user_svc),
):
    await svc.set_avatar(identity.user, None)
    return {"deleted": True}


@router.get("/{user_id}/avatar")
async def get_avatar(user_id: str, svc: UserService = Depends(_user_svc)):
    """Serve a user's avatar as image/png. Open to anyone with the id."""
    try:
        uid = uuid.UUID(user_id)
    except ValueError:
        raise NotFoundError("User not found")

    avatar = await svc.get_avatar(uid)
    if not avatar:
        raise NotFoundError("Avatar not found")
    return Response(content=avatar, media_type="image/png")
