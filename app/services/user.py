import logging

from sqlalchemy.orm import Session

import app.repositories.user as user_repo
from app.db.models.user import User as UserModel
from app.errors import DomainValidationError, NotFoundError
from app.schemas.user import UserProfileUpdate

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> UserModel:
    """
    Get a user by ID.

    Raises:
        NotFoundError: If user doesn't exist
    """
    user = user_repo.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def get_all_users(db: Session) -> list[UserModel]:
    return user_repo.get_all_users(db)


def get_users_page(
    db: Session, page: int = 1, page_size: int = 100, name: str | None = None
) -> tuple[list[UserModel], int]:
    """
    Get all users with pagination.

    Admin-only functionality; the role gate is applied at the router.
    """
    return user_repo.get_all_users_paginated(db, page=page, page_size=page_size, name=name)


def update_profile(db: Session, user_id: int, data: UserProfileUpdate) -> UserModel:
    """
    Update the caller's own profile. Email, password and admin flag are not editable here.

    Raises:
        NotFoundError: If user doesn't exist
    """
    return user_repo.update_profile(db, user_id, **data.model_dump(exclude_unset=True))


def set_admin(db: Session, user_id: int, is_admin: bool, current_user_id: int) -> UserModel:
    """
    Grant or revoke admin access.

    Raises:
        NotFoundError: If user doesn't exist
        DomainValidationError: If an admin tries to revoke their own access
    """
    if user_id == current_user_id and not is_admin:
        raise DomainValidationError("You cannot revoke your own admin access")

    user = user_repo.set_admin(db, user_id, is_admin)
    logger.info(
        "User %s %s admin access by user %s",
        user_id,
        "granted" if is_admin else "revoked",
        current_user_id,
    )
    return user
