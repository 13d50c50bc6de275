"""Auth service: registration, login, password reset lifecycle, and token verification."""

import logging
from datetime import timedelta

import aiosmtplib
from sqlalchemy.orm import Session

import app.repositories.password_reset_token as reset_token_repo
import app.repositories.user as user_repo
from app.core.config import settings
from app.core.security import (
    TokenClaim,
    TokenCodec,
    dummy_verify_password,
    get_password_hash,
    verify_password,
)
from app.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    NotFoundError,
)
from app.schemas.user import AuthResult, ForgotPasswordResult, UserPublic
from app.services.email import build_reset_url, send_password_reset_email

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = (
    "If an account exists with this email, a password reset link has been sent."
)


def _issue(codec: TokenCodec, user) -> AuthResult:
    token = codec.encode(TokenClaim(user_id=user.id, email=user.email))
    return AuthResult(user=UserPublic.model_validate(user), token=token)


def register(db: Session, codec: TokenCodec, email: str, password: str, name: str) -> AuthResult:
    """
    Create an account and sign the new user in.

    Raises:
        DuplicateEmailError: If the email is already registered.
    """
    if user_repo.get_user_by_email(db, email):
        raise DuplicateEmailError()

    password_hash = get_password_hash(password)
    user = user_repo.create_user(db, email=email, password_hash=password_hash, name=name)
    logger.info("Registered user %s", user.id)
    return _issue(codec, user)


def login(db: Session, codec: TokenCodec, email: str, password: str) -> AuthResult:
    """
    Authenticate user by email and password, return a signed access token.

    Raises:
        InvalidCredentialsError: If email not found or password incorrect.
    """
    user = user_repo.get_user_by_email(db, email)
    if not user:
        # Unknown emails cost one bcrypt verify too, so timing does not reveal accounts
        dummy_verify_password()
        raise InvalidCredentialsError()
    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()

    return _issue(codec, user)


async def forgot_password(db: Session, email: str) -> ForgotPasswordResult:
    """
    Request password reset: create a ledger token and email the reset link.

    Always returns the same message whether or not the account exists.
    Delivery failures are logged, never raised. Outside production the link
    is also returned so the flow can be exercised without SMTP.
    """
    user = user_repo.get_user_by_email(db, email)
    if not user:
        return ForgotPasswordResult(message=FORGOT_PASSWORD_MESSAGE)

    token = reset_token_repo.create_token(
        db,
        user.id,
        lifetime=timedelta(minutes=settings.password_reset_token_expire_minutes),
    )
    reset_url = build_reset_url(token)

    try:
        await send_password_reset_email(user.email, reset_url)
    except (ValueError, aiosmtplib.SMTPException) as e:
        logger.error("Failed to send password reset email: %s", e)

    if settings.is_production:
        return ForgotPasswordResult(message=FORGOT_PASSWORD_MESSAGE)

    logger.info("Password reset link for user %s: %s", user.id, reset_url)
    return ForgotPasswordResult(message=FORGOT_PASSWORD_MESSAGE, reset_url=reset_url)


def validate_reset_token(db: Session, token: str) -> bool:
    """Report whether a reset token could be redeemed right now. Read-only."""
    return reset_token_repo.find_valid_token(db, token) is not None


def reset_password(db: Session, token: str, new_password: str) -> None:
    """
    Redeem a reset token: set the new password and consume the token in one commit.

    Raises:
        InvalidOrExpiredTokenError: If the token is unknown, used, expired, or
            its owner no longer exists.
    """
    password_hash = get_password_hash(new_password)

    reset_token = reset_token_repo.find_valid_token(db, token, lock=True)
    if reset_token is None:
        db.rollback()
        raise InvalidOrExpiredTokenError()

    user = user_repo.get_user_by_id(db, reset_token.user_id)
    if user is None:
        db.rollback()
        raise InvalidOrExpiredTokenError()

    user_repo.set_password_hash(db, user, password_hash)
    reset_token_repo.mark_as_used(db, token)
    logger.info("Password reset for user %s", user.id)


def verify_token(codec: TokenCodec, token: str) -> TokenClaim:
    """
    Decode an access token.

    Raises:
        TokenDecodeError: If the token is expired, forged or malformed.
    """
    return codec.decode(token)


def me(db: Session, user_id: int) -> UserPublic:
    """
    Get the public view of the authenticated user.

    Raises:
        NotFoundError: If the user behind a still-valid token no longer exists.
    """
    user = user_repo.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return UserPublic.model_validate(user)


def cleanup_reset_tokens(db: Session) -> int:
    """Remove used and expired reset tokens. Safe to run at any time."""
    deleted = reset_token_repo.cleanup_expired_tokens(db)
    logger.info("Removed %d used or expired password reset tokens", deleted)
    return deleted
