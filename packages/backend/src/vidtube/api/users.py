"""Users API — registration, sessions, account and channel endpoints.

Learn: Routes for the account lifecycle:
- POST /users/register → multipart form + avatar/cover files → new account
- POST /users/login → username/email + password → tokens (body + cookies)
- POST /users/refresh-token → refresh token → new pair (one-time use)
- POST /users/logout → clears stored refresh token and cookies
- GET/PATCH the current account, avatar and cover image
- GET /users/c/{username} → channel profile, GET /users/history

Register, login and refresh are open; everything else resolves the caller
through get_current_user.
"""

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, File, Form, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth.dependencies import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    CurrentIdentity,
    get_current_user,
)
from vidtube.config import settings
from vidtube.db.engine import get_db
from vidtube.media.host import MediaHost, get_media_host
from vidtube.media.uploads import TempUploads
from vidtube.schemas.common import ApiResponse
from vidtube.schemas.user import (
    ChangePasswordRequest,
    ChannelProfile,
    LoginRequest,
    LoginResult,
    RefreshRequest,
    TokenPair,
    UpdateAccountRequest,
    UserRead,
    WatchedVideo,
)
from vidtube.services.auth_service import AuthService
from vidtube.services.user_service import UserService

router = APIRouter(prefix="/users")


def _users(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def _auth(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


def _set_session_cookies(response: Response, tokens: TokenPair) -> None:
    for key, value in (
        (ACCESS_COOKIE, tokens.access_token),
        (REFRESH_COOKIE, tokens.refresh_token),
    ):
        response.set_cookie(
            key,
            value,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=ApiResponse[UserRead], status_code=201)
async def register(
    full_name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    username: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None),
    svc: UserService = Depends(_users),
    media: MediaHost = Depends(get_media_host),
):
    """Create a new account. Temp files never outlive the request."""
    async with TempUploads() as temp:
        avatar_path = await temp.save(avatar)
        cover_path = await temp.save(cover_image)
        user = await svc.register(
            media,
            full_name=full_name,
            email=email,
            username=username,
            password=password,
            avatar_path=avatar_path,
            cover_image_path=cover_path,
        )
    return ApiResponse(
        status_code=201,
        data=UserRead.model_validate(user),
        message="User registered successfully",
    )


# ─── Sessions ────────────────────────────────────────────


@router.post("/login", response_model=ApiResponse[LoginResult])
async def login(
    body: LoginRequest,
    response: Response,
    svc: AuthService = Depends(_auth),
):
    """Login with username or email + password → JWT pair."""
    user, tokens = await svc.login(
        body.password, username=body.username, email=body.email
    )
    _set_session_cookies(response, tokens)
    return ApiResponse(
        data=LoginResult(user=UserRead.model_validate(user), **tokens.model_dump()),
        message="User logged in successfully",
    )


@router.post("/refresh-token", response_model=ApiResponse[TokenPair])
async def refresh_token(
    response: Response,
    body: Optional[RefreshRequest] = None,
    refresh_cookie: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    svc: AuthService = Depends(_auth),
):
    """Exchange a refresh token (cookie or body) for a new pair."""
    incoming = refresh_cookie or (body.refresh_token if body else None)
    tokens = await svc.refresh_session(incoming)
    _set_session_cookies(response, tokens)
    return ApiResponse(data=tokens, message="Access token refreshed")


@router.post("/logout", response_model=ApiResponse[dict])
async def logout(
    response: Response,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AuthService = Depends(_auth),
):
    await svc.logout(identity.user)
    for key in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            key, httponly=True, secure=settings.cookie_secure, samesite="lax"
        )
    return ApiResponse(data={}, message="User logged out successfully")


# ─── Current account ─────────────────────────────────────


@router.patch("/change-password", response_model=ApiResponse[dict])
async def change_password(
    body: ChangePasswordRequest,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: AuthService = Depends(_auth),
):
    await svc.change_password(identity.user, body.old_password, body.new_password)
    return ApiResponse(data={}, message="Password changed successfully")


@router.get("/current-user", response_model=ApiResponse[UserRead])
async def current_user(identity: CurrentIdentity = Depends(get_current_user)):
    return ApiResponse(
        data=UserRead.model_validate(identity.user),
        message="Current user fetched successfully",
    )


@router.patch("/update-account", response_model=ApiResponse[UserRead])
async def update_account(
    body: UpdateAccountRequest,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_users),
):
    user = await svc.update_account(identity.user, body.full_name, body.email)
    return ApiResponse(
        data=UserRead.model_validate(user),
        message="Account details updated successfully",
    )


@router.patch("/avatar", response_model=ApiResponse[UserRead])
async def update_avatar(
    avatar: Optional[UploadFile] = File(None),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_users),
    media: MediaHost = Depends(get_media_host),
):
    async with TempUploads() as temp:
        path = await temp.save(avatar)
        user = await svc.replace_avatar(media, identity.user, path)
    return ApiResponse(
        data=UserRead.model_validate(user), message="Avatar updated successfully"
    )


@router.patch("/cover-image", response_model=ApiResponse[UserRead])
async def update_cover_image(
    cover_image: Optional[UploadFile] = File(None),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_users),
    media: MediaHost = Depends(get_media_host),
):
    async with TempUploads() as temp:
        path = await temp.save(cover_image)
        user = await svc.replace_cover_image(media, identity.user, path)
    return ApiResponse(
        data=UserRead.model_validate(user), message="Cover image updated successfully"
    )


# ─── Channels ────────────────────────────────────────────


@router.get("/c/{username}", response_model=ApiResponse[ChannelProfile])
async def channel_profile(
    username: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_users),
):
    profile = await svc.get_channel_profile(username, identity.user_id)
    return ApiResponse(data=profile, message="Channel fetched successfully")


@router.get("/history", response_model=ApiResponse[list[WatchedVideo]])
async def watch_history(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: UserService = Depends(_users),
):
    videos = await svc.get_watch_history(identity.user_id)
    return ApiResponse(
        data=[WatchedVideo.model_validate(v) for v in videos],
        message="Watch history fetched successfully",
    )
