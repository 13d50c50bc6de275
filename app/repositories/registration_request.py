from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.db.models.registration_request import (
    APPROVED,
    REJECTED,
    RegistrationRequest as RegistrationRequestModel,
)
from app.db.models.user import User as UserModel
from app.errors import DuplicateEmailError, DuplicateResourceError
from app.repositories.user import get_user_by_email, normalize_email


def get_request_by_email(db: Session, email: str) -> RegistrationRequestModel | None:
    return (
        db.query(RegistrationRequestModel)
        .filter(RegistrationRequestModel.email == normalize_email(email))
        .first()
    )


def get_request(
    db: Session, request_id: int, lock: bool = False
) -> RegistrationRequestModel | None:
    """Get a registration request by ID, optionally holding a row lock until commit."""
    query = db.query(RegistrationRequestModel).filter(RegistrationRequestModel.id == request_id)
    if lock:
        query = query.with_for_update()
    return query.first()


def create_request(
    db: Session,
    email: str,
    password_hash: str,
    name: str,
    department: str | None = None,
    title: str | None = None,
) -> RegistrationRequestModel:
    """
    Store a pending registration request.

    Raises:
        DuplicateResourceError: If a request for this email already exists.
    """
    email = normalize_email(email)
    if get_request_by_email(db, email):
        raise DuplicateResourceError("A registration request for this email already exists")

    request = RegistrationRequestModel(
        email=email,
        password_hash=password_hash,
        name=name,
        department=department,
        title=title,
    )
    db.add(request)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateResourceError(
            "A registration request for this email already exists"
        ) from e
    db.refresh(request)
    return request


def get_all_requests(db: Session, status: str | None = None) -> list[RegistrationRequestModel]:
    """Get registration requests, newest first, optionally filtered by status."""
    query = db.query(RegistrationRequestModel).options(
        joinedload(RegistrationRequestModel.reviewer)
    )
    if status:
        query = query.filter(RegistrationRequestModel.status == status)
    return query.order_by(
        RegistrationRequestModel.created_at.desc(), RegistrationRequestModel.id.desc()
    ).all()


def approve_request(
    db: Session, request: RegistrationRequestModel, reviewer_id: int
) -> UserModel:
    """
    Create the user from the stored request and mark the request approved.

    Both writes commit together.

    Raises:
        DuplicateEmailError: If a user with the request's email already exists.
    """
    if get_user_by_email(db, request.email):
        db.rollback()
        raise DuplicateEmailError("A user with this email already exists")

    user = UserModel(
        email=request.email,
        password_hash=request.password_hash,
        name=request.name,
        department=request.department,
        title=request.title,
    )
    db.add(user)
    request.status = APPROVED
    request.reviewed_by = reviewer_id
    request.reviewed_at = datetime.now(timezone.utc)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateEmailError("A user with this email already exists") from e
    db.refresh(user)
    return user


def reject_request(
    db: Session, request: RegistrationRequestModel, reviewer_id: int, reason: str
) -> RegistrationRequestModel:
    request.status = REJECTED
    request.reviewed_by = reviewer_id
    request.reviewed_at = datetime.now(timezone.utc)
    request.rejection_reason = reason
    db.commit()
    db.refresh(request)
    return request


def delete_request(db: Session, request: RegistrationRequestModel) -> None:
    db.delete(request)
    db.commit()
