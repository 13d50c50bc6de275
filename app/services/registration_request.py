"""Registration request review: members ask for an account, an admin approves or rejects."""

import logging

from sqlalchemy.orm import Session

import app.repositories.registration_request as registration_repo
import app.repositories.user as user_repo
from app.core.security import get_password_hash
from app.db.models.registration_request import (
    PENDING,
    RegistrationRequest as RegistrationRequestModel,
)
from app.db.models.user import User as UserModel
from app.errors import DomainValidationError, DuplicateEmailError, NotFoundError
from app.schemas.registration_request import RegistrationSubmission

logger = logging.getLogger(__name__)


def _get_pending(db: Session, request_id: int) -> RegistrationRequestModel:
    request = registration_repo.get_request(db, request_id, lock=True)
    if request is None:
        db.rollback()
        raise NotFoundError("Registration request not found")
    if request.status != PENDING:
        db.rollback()
        raise DomainValidationError("Request has already been processed")
    return request


def submit(db: Session, data: RegistrationSubmission) -> RegistrationRequestModel:
    """
    Store a request for an account. The password is hashed now so approval never sees it.

    Raises:
        DuplicateEmailError: If a user with this email already exists.
        DuplicateResourceError: If a request for this email already exists.
    """
    if user_repo.get_user_by_email(db, data.email):
        raise DuplicateEmailError()

    request = registration_repo.create_request(
        db,
        email=data.email,
        password_hash=get_password_hash(data.password),
        name=data.name,
        department=data.department,
        title=data.title,
    )
    logger.info("Registration request %s submitted", request.id)
    return request


def list_requests(db: Session, status: str | None = None) -> list[RegistrationRequestModel]:
    return registration_repo.get_all_requests(db, status=status)


def approve(db: Session, request_id: int, reviewer_id: int) -> UserModel:
    """
    Create the account from a pending request.

    Raises:
        NotFoundError: If the request doesn't exist
        DomainValidationError: If the request was already approved or rejected
        DuplicateEmailError: If a user with the same email exists by now
    """
    request = _get_pending(db, request_id)
    user = registration_repo.approve_request(db, request, reviewer_id)
    logger.info(
        "Registration request %s approved by user %s, created user %s",
        request_id,
        reviewer_id,
        user.id,
    )
    return user


def reject(
    db: Session, request_id: int, reviewer_id: int, reason: str | None
) -> RegistrationRequestModel:
    """
    Reject a pending request with a reason shown to the applicant.

    Raises:
        DomainValidationError: If the reason is missing or the request was already processed
        NotFoundError: If the request doesn't exist
    """
    if not reason or not reason.strip():
        raise DomainValidationError("Rejection reason is required")

    request = _get_pending(db, request_id)
    request = registration_repo.reject_request(db, request, reviewer_id, reason.strip())
    logger.info("Registration request %s rejected by user %s", request_id, reviewer_id)
    return request


def delete(db: Session, request_id: int) -> None:
    """
    Remove a request in any status.

    Raises:
        NotFoundError: If the request doesn't exist
    """
    request = registration_repo.get_request(db, request_id)
    if request is None:
        raise NotFoundError("Registration request not found")
    registration_repo.delete_request(db, request)
    logger.info("Registration request %s deleted", request_id)
