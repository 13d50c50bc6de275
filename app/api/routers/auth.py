from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_claim, get_db, get_token_codec
from app.core.security import TokenClaim, TokenCodec
from app.schemas.registration_request import RegistrationRequestOut, RegistrationSubmission
from app.schemas.user import (
    AuthResult,
    ForgotPasswordResult,
    LoginRequest,
    Message,
    PasswordReset,
    PasswordResetRequest,
    RegisterRequest,
    ResetTokenValidity,
    UserEnvelope,
)
from app.services import auth as auth_service
from app.services import registration_request as registration_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResult, status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
):
    """Create an account and return the user with an access token."""
    return auth_service.register(db, codec, data.email, data.password, data.name)


@router.post("/login", response_model=AuthResult)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
):
    """Login endpoint - returns the user and a JWT access token."""
    return auth_service.login(db, codec, data.email, data.password)


@router.post(
    "/forgot-password",
    response_model=ForgotPasswordResult,
    response_model_exclude_none=True,
)
async def forgot_password(
    request: PasswordResetRequest,
    db: Session = Depends(get_db),
):
    """
    Request password reset - emails a single-use link.

    The response is identical whether or not the email is registered.
    """
    return await auth_service.forgot_password(db, request.email)


@router.post("/reset-password", response_model=Message)
def reset_password(reset_data: PasswordReset, db: Session = Depends(get_db)):
    """Reset password using the token from the emailed link."""
    auth_service.reset_password(db, reset_data.token, reset_data.password)
    return Message(message="Password has been reset successfully")


@router.get("/validate-reset-token/{token}", response_model=ResetTokenValidity)
def validate_reset_token(token: str, db: Session = Depends(get_db)):
    """Pre-flight check for the reset form. Does not consume the token."""
    return ResetTokenValidity(valid=auth_service.validate_reset_token(db, token))


@router.post(
    "/registration-requests",
    response_model=RegistrationRequestOut,
    status_code=status.HTTP_201_CREATED,
)
def submit_registration_request(data: RegistrationSubmission, db: Session = Depends(get_db)):
    """Ask for an account. An admin approves or rejects the request later."""
    return registration_service.submit(db, data)


@router.get("/verify", response_model=UserEnvelope)
def verify(
    claim: TokenClaim = Depends(get_current_claim),
    db: Session = Depends(get_db),
):
    """Verify the presented token and return the user it belongs to."""
    return UserEnvelope(user=auth_service.me(db, claim.user_id))


@router.get("/me", response_model=UserEnvelope)
def get_current_user_info(
    claim: TokenClaim = Depends(get_current_claim),
    db: Session = Depends(get_db),
):
    """Get current authenticated user information."""
    return UserEnvelope(user=auth_service.me(db, claim.user_id))
