from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_claim, get_db
from app.core.security import TokenClaim
from app.schemas.user import UserProfile, UserProfileUpdate, UserSummary
from app.services import user as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserSummary])
def list_users(
    db: Session = Depends(get_db),
    claim: TokenClaim = Depends(get_current_claim),
):
    """List all users, sorted by name. Any authenticated user may call this."""
    return user_service.get_all_users(db)


@router.get("/profile", response_model=UserProfile)
def get_my_profile(
    db: Session = Depends(get_db),
    claim: TokenClaim = Depends(get_current_claim),
):
    """Get the current user's full profile."""
    return user_service.get_user(db, claim.user_id)


@router.put("/profile", response_model=UserProfile)
def update_my_profile(
    data: UserProfileUpdate,
    db: Session = Depends(get_db),
    claim: TokenClaim = Depends(get_current_claim),
):
    """
    Update the current user's profile.

    Only the fields present in the body are changed.
    """
    return user_service.update_profile(db, claim.user_id, data)


@router.get("/{user_id}", response_model=UserSummary)
def get_user_by_id(
    user_id: int,
    db: Session = Depends(get_db),
    claim: TokenClaim = Depends(get_current_claim),
):
    return user_service.get_user(db, user_id)
