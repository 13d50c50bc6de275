from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models.user import User as UserModel
from app.errors import DuplicateEmailError, NotFoundError


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> UserModel | None:
    """Get a user by email (case-insensitive)."""
    return (
        db.query(UserModel)
        .filter(UserModel.email == normalize_email(email))
        .first()
    )


def get_user_by_id(db: Session, user_id: int) -> UserModel | None:
    """Get a user by ID."""
    return db.query(UserModel).filter(UserModel.id == user_id).first()


def lock_user(db: Session, user_id: int) -> UserModel | None:
    """Get a user with a row lock held until the current transaction ends."""
    return (
        db.query(UserModel)
        .filter(UserModel.id == user_id)
        .with_for_update()
        .first()
    )


def create_user(
    db: Session,
    email: str,
    password_hash: str,
    name: str,
) -> UserModel:
    """
    Create a new user in the database.

    Raises:
        DuplicateEmailError: If the email is already registered, including when a
            concurrent insert wins the race and trips the unique constraint.
    """
    email = normalize_email(email)
    if get_user_by_email(db, email):
        raise DuplicateEmailError()

    db_user = UserModel(
        email=email,
        name=name,
        password_hash=password_hash,
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateEmailError() from e
    db.refresh(db_user)
    return db_user


def is_admin(db: Session, user_id: int) -> bool:
    """Return True only if the user exists and has the admin flag."""
    flag = db.query(UserModel.is_admin).filter(UserModel.id == user_id).scalar()
    return flag is True


def set_password_hash(db: Session, user: UserModel, password_hash: str) -> None:
    """Stage a new password hash on the user. The caller commits."""
    user.password_hash = password_hash
    db.add(user)


def update_profile(db: Session, user_id: int, **fields) -> UserModel:
    """Update profile fields. Every field passed is written, so None clears a field."""
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    for field, value in fields.items():
        setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user


def set_admin(db: Session, user_id: int, is_admin_flag: bool) -> UserModel:
    """Grant or revoke the admin flag."""
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    user.is_admin = is_admin_flag
    db.commit()
    db.refresh(user)
    return user


def get_all_users(db: Session) -> list[UserModel]:
    """Get all users sorted by name."""
    return db.query(UserModel).order_by(UserModel.name).all()


def get_all_users_paginated(
    db: Session, page: int = 1, page_size: int = 100, name: str | None = None
) -> tuple[list[UserModel], int]:
    """
    Get all users with pagination, sorted by name for stable pagination.

    Args:
        page: Page number (1-indexed)
        page_size: Number of items per page
        name: Optional case-insensitive partial match on name

    Returns:
        Tuple of (list of users, total count)
    """
    query = db.query(UserModel)
    if name:
        query = query.filter(UserModel.name.ilike(f"%{name}%"))
    total = query.count()
    skip = (page - 1) * page_size
    users = query.order_by(UserModel.name, UserModel.id).offset(skip).limit(page_size).all()
    return users, total
