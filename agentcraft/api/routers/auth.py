"""Authentication API endpoints: accounts, sessions and password reset."""

import logging
from datetime import timedelta
from urllib.parse import urlencode
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from agentcraft.api.dependencies import get_db, get_reset_notifier, get_settings
from agentcraft.api.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenPair,
    UserResponse,
)
from agentcraft.api.schemas.common import SuccessResponse
from agentcraft.auth.dependencies import get_current_user
from agentcraft.auth.jwt import (
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_refresh_token,
)
from agentcraft.auth.password import hash_password, verify_password
from agentcraft.auth.reset_tokens import (
    clear_reset_token,
    issue_reset_token,
    parse_reset_token,
    reset_token_matches,
    store_reset_token,
)
from agentcraft.db.base import as_utc, utcnow
from agentcraft.db.repositories.user_repo import UserRepository
from agentcraft.errors import InvalidInputError, NotFoundError, UnauthorizedError
from agentcraft.models.auth_models import AuthContext
from agentcraft.services.notifications import ResetNotifier
from agentcraft.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/auth", tags=["auth"])

FORGOT_PASSWORD_MESSAGE = "If an account exists for that email, a reset link has been sent."
INVALID_RESET_TOKEN = "Invalid or expired reset token"


async def _issue_tokens(repo: UserRepository, user_id: UUID, settings: Settings) -> TokenPair:
    """Create an access/refresh pair and store the refresh token hash."""
    now = utcnow()
    access_token = create_access_token(user_id, settings, now=now)
    refresh_token, expires_at = create_refresh_token(user_id, settings, now=now)
    await repo.add_refresh_token(user_id, hash_refresh_token(refresh_token), expires_at)
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


@router.post("/register", response_model=LoginResponse, status_code=201)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    """
    Register a new account and sign it in.

    Raises:
        InvalidInputError: 400 if the email is taken or the password is weak
    """
    repo = UserRepository(db)
    email = request.email

    if await repo.get_by_email(email) is not None:
        logger.warning("register_error: reason=email_exists")
        raise InvalidInputError("Email already registered")

    try:
        password_hash = hash_password(request.password)
    except ValueError as e:
        logger.warning("register_error: reason=weak_password")
        raise InvalidInputError(str(e)) from e

    user = await repo.create(
        email=email,
        password_hash=password_hash,
        first_name=request.first_name,
        last_name=request.last_name,
        is_active=True,
    )
    tokens = await _issue_tokens(repo, user.id, settings)
    await repo.commit()

    logger.info(f"register_success: user_id={user.id}")
    return LoginResponse(tokens=tokens, user_id=user.id)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    """
    Authenticate with email and password.

    Wrong password and unknown email produce the same error.

    Raises:
        UnauthorizedError: 401 if credentials are invalid or the user is inactive
    """
    repo = UserRepository(db)
    user = await repo.get_by_email(request.email)

    if not user or not verify_password(request.password, user.password_hash):
        logger.warning("login_error: reason=invalid_credentials")
        raise UnauthorizedError("Invalid email or password")

    if not user.is_active:
        logger.warning(f"login_error: reason=user_inactive, user_id={user.id}")
        raise UnauthorizedError("User account is inactive")

    tokens = await _issue_tokens(repo, user.id, settings)
    await repo.commit()

    logger.info(f"login_success: user_id={user.id}")
    return LoginResponse(tokens=tokens, user_id=user.id)


@router.post("/refresh", response_model=TokenPair)
async def refresh_token(
    request: RefreshRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> TokenPair:
    """
    Exchange a refresh token for a new pair, revoking the old one.

    Raises:
        UnauthorizedError: 401 if the refresh token is invalid, expired or revoked
    """
    try:
        payload = decode_token(request.refresh_token, settings)
    except ValueError as e:
        logger.warning(f"refresh_error: reason=invalid_token, error={str(e)}")
        raise UnauthorizedError(str(e)) from e

    if payload.token_type != REFRESH:
        logger.warning(f"refresh_error: reason=invalid_token_type, type={payload.token_type}")
        raise UnauthorizedError("Invalid token type")

    repo = UserRepository(db)
    stored_token = await repo.get_refresh_token(hash_refresh_token(request.refresh_token))
    if stored_token is None or stored_token.user_id != payload.sub:
        logger.warning(f"refresh_error: reason=token_not_found, user_id={payload.sub}")
        raise UnauthorizedError("Invalid refresh token")

    if stored_token.revoked_at is not None:
        logger.warning(f"refresh_error: reason=token_revoked, user_id={payload.sub}")
        raise UnauthorizedError("Refresh token has been revoked")

    now = utcnow()
    if as_utc(stored_token.expires_at) < now:
        logger.warning(f"refresh_error: reason=token_expired, user_id={payload.sub}")
        raise UnauthorizedError("Refresh token has expired")

    user = await repo.get_by_id(payload.sub)
    if user is None or not user.is_active:
        raise UnauthorizedError("User account is inactive")

    stored_token.revoked_at = now
    tokens = await _issue_tokens(repo, user.id, settings)
    await repo.commit()

    logger.info(f"refresh_success: user_id={user.id}, old_token_revoked=True")
    return tokens


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    request: RefreshRequest,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    """
    Revoke a refresh token. Unknown or already revoked tokens are ignored.
    """
    repo = UserRepository(db)
    stored_token = await repo.get_refresh_token(hash_refresh_token(request.refresh_token))
    if stored_token is not None and stored_token.revoked_at is None:
        stored_token.revoked_at = utcnow()
        await repo.commit()
        logger.info(f"logout_success: user_id={stored_token.user_id}")
    return SuccessResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
async def me(
    auth: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    user = await UserRepository(db).get_by_id(auth.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return UserResponse.model_validate(user)


@router.post("/forgot-password", response_model=SuccessResponse)
async def forgot_password(
    request: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    notifier: ResetNotifier = Depends(get_reset_notifier),
) -> SuccessResponse:
    """
    Issue a password reset token and hand the reset link to the notifier.

    The response is identical whether or not the email belongs to an account.
    Issuing a new token replaces any outstanding one.
    """
    repo = UserRepository(db)
    user = await repo.get_by_email(request.email)

    if user is not None and user.is_active:
        issued = issue_reset_token(
            utcnow(), timedelta(minutes=settings.password_reset_token_expire_minutes)
        )
        store_reset_token(user, issued)
        await repo.commit()

        reset_url = f"{settings.password_reset_url}?{urlencode({'token': issued.token})}"
        await notifier.send_reset_link(user.email, reset_url)
        logger.info(f"forgot_password_issued: user_id={user.id}")
    else:
        logger.info("forgot_password_ignored: reason=no_active_account")

    return SuccessResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=SuccessResponse)
async def reset_password(
    request: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    """
    Set a new password using a "selector:verifier" reset token.

    On success the token is cleared, so it cannot be used again, and every
    refresh token of the account is revoked.

    Raises:
        InvalidInputError: 400 if the token is malformed, unknown, expired
            or does not verify, or the new password is weak
    """
    parsed = parse_reset_token(request.token)
    if parsed is None:
        logger.warning("reset_password_error: reason=malformed_token")
        raise InvalidInputError(INVALID_RESET_TOKEN)
    selector, verifier = parsed

    repo = UserRepository(db)
    user = await repo.get_by_reset_selector(selector)
    now = utcnow()
    if user is None or not reset_token_matches(user, verifier, now):
        logger.warning("reset_password_error: reason=token_rejected")
        raise InvalidInputError(INVALID_RESET_TOKEN)

    try:
        user.password_hash = hash_password(request.password)
    except ValueError as e:
        raise InvalidInputError(str(e)) from e

    clear_reset_token(user)
    await repo.revoke_refresh_tokens(user.id, now)
    await repo.commit()

    logger.info(f"reset_password_success: user_id={user.id}")
    return SuccessResponse(message="Password has been reset")
