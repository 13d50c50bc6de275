import logging
from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import app.repositories.user as user_repo
from app.core.config import settings
from app.core.security import TokenClaim, TokenCodec, TokenCodecConfig, parse_duration
from app.db import SessionLocal
from app.errors import (
    AuthorizationCheckError,
    InsufficientRoleError,
    InvalidTokenError,
    MissingTokenError,
    TokenDecodeError,
    UnauthorizedError,
)
from app.services import auth as auth_service

logger = logging.getLogger(__name__)

# auto_error=False so a missing header surfaces as MissingTokenError instead of FastAPI's default
bearer_scheme = HTTPBearer(auto_error=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@lru_cache
def get_token_codec() -> TokenCodec:
    """Build the process-wide codec once from settings."""
    return TokenCodec(
        TokenCodecConfig(
            secret=settings.secret_key,
            expires_in=parse_duration(settings.access_token_expires_in),
            algorithm=settings.algorithm,
        )
    )


def authenticate(
    credentials: HTTPAuthorizationCredentials | None, codec: TokenCodec
) -> TokenClaim:
    """
    Turn bearer credentials into a verified claim.

    Raises:
        MissingTokenError: If there is no "Authorization: Bearer <token>" header.
        InvalidTokenError: If the token is expired, forged or malformed.
    """
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()

    try:
        return auth_service.verify_token(codec, credentials.credentials)
    except TokenDecodeError as e:
        logger.debug("Rejected access token: %s", e)
        raise InvalidTokenError() from e


def get_current_claim(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    codec: TokenCodec = Depends(get_token_codec),
) -> TokenClaim:
    """Authentication layer: the verified claim for the current request."""
    return authenticate(credentials, codec)


def authorize_admin(db: Session, claim: TokenClaim | None) -> TokenClaim:
    """
    Role gate: let the request through only if the claim belongs to an admin.

    Raises:
        UnauthorizedError: If authentication did not run first.
        InsufficientRoleError: If the user is not an admin (or no longer exists).
        AuthorizationCheckError: If the role lookup fails.
    """
    if claim is None:
        raise UnauthorizedError("Authentication required")

    try:
        allowed = user_repo.is_admin(db, claim.user_id)
    except SQLAlchemyError as e:
        logger.exception("Admin check failed for user %s", claim.user_id)
        raise AuthorizationCheckError() from e

    if not allowed:
        raise InsufficientRoleError()
    return claim


def require_admin(
    claim: TokenClaim = Depends(get_current_claim),
    db: Session = Depends(get_db),
) -> TokenClaim:
    """
    Dependency for admin-only routes.

    Example:
        Depends(require_admin)
    """
    return authorize_admin(db, claim)
