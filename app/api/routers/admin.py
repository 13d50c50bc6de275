from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_admin
from app.core.security import TokenClaim
from app.schemas.pagination import PaginatedResponse
from app.schemas.registration_request import (
    RegistrationApproval,
    RegistrationRejection,
    RegistrationRequestOut,
    RegistrationStatus,
)
from app.schemas.user import Message, TokenCleanupResult, UserAdminUpdate, UserProfile, UserPublic
from app.services import auth as auth_service
from app.services import registration_request as registration_service
from app.services import user as user_service

# Every route here sits behind the role gate
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/registration-requests", response_model=list[RegistrationRequestOut])
def get_registration_requests(
    status: RegistrationStatus | None = Query(None, description="Only requests in this status"),
    db: Session = Depends(get_db),
):
    """List registration requests, newest first, with the reviewing admin's name."""
    return registration_service.list_requests(db, status=status)


@router.post("/registration-requests/{request_id}/approve", response_model=RegistrationApproval)
def approve_registration_request(
    request_id: int,
    db: Session = Depends(get_db),
    current: TokenClaim = Depends(require_admin),
):
    """Create the user account from a pending request."""
    user = registration_service.approve(db, request_id, current.user_id)
    return RegistrationApproval(
        message="User account created successfully",
        user=UserPublic.model_validate(user),
    )


@router.post("/registration-requests/{request_id}/reject", response_model=Message)
def reject_registration_request(
    request_id: int,
    data: RegistrationRejection,
    db: Session = Depends(get_db),
    current: TokenClaim = Depends(require_admin),
):
    registration_service.reject(db, request_id, current.user_id, data.reason)
    return Message(message="Registration request rejected")


@router.delete("/registration-requests/{request_id}", response_model=Message)
def delete_registration_request(request_id: int, db: Session = Depends(get_db)):
    registration_service.delete(db, request_id)
    return Message(message="Registration request deleted")


@router.get("/users", response_model=PaginatedResponse[UserProfile])
def get_all_users_paginated(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(100, ge=1, le=1000, description="Number of items per page"),
    name: str | None = Query(None, description="Filter users by name (partial match)"),
    db: Session = Depends(get_db),
):
    """Get all users with pagination, including admin flags."""
    users, total = user_service.get_users_page(db, page=page, page_size=page_size, name=name)
    return PaginatedResponse(
        items=[UserProfile.model_validate(user) for user in users],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.put("/users/{user_id}/admin", response_model=UserProfile)
def set_user_admin(
    user_id: int,
    data: UserAdminUpdate,
    db: Session = Depends(get_db),
    current: TokenClaim = Depends(require_admin),
):
    """Grant or revoke admin access. Admins cannot revoke their own access."""
    return user_service.set_admin(db, user_id, data.is_admin, current.user_id)


@router.post("/password-reset-tokens/cleanup", response_model=TokenCleanupResult)
def cleanup_password_reset_tokens(db: Session = Depends(get_db)):
    """Delete used and expired password reset tokens."""
    return TokenCleanupResult(deleted=auth_service.cleanup_reset_tokens(db))
