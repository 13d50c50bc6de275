from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    is_admin: bool = False


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    role: str | None = None
    avatar_url: str | None = None
    created_at: datetime


class UserProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    role: str | None = None
    department: str | None = None
    title: str | None = None
    bio: str | None = None
    location: str | None = None
    phone: str | None = None
    avatar_url: str | None = None
    linkedin_url: str | None = None
    is_admin: bool = False
    created_at: datetime
    updated_at: datetime


class UserProfileUpdate(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=255)
    department: str | None = Field(None, max_length=255)
    title: str | None = Field(None, max_length=255)
    bio: str | None = None
    location: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    avatar_url: str | None = Field(None, max_length=2048)
    linkedin_url: str | None = Field(None, max_length=2048)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        # Omit name to keep it; it cannot be cleared
        if v is None:
            raise ValueError("Name cannot be null")
        return v


class UserAdminUpdate(BaseModel):
    is_admin: bool


class UserEnvelope(BaseModel):
    user: UserPublic


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=2, max_length=255)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordReset(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)


class AuthResult(BaseModel):
    user: UserPublic
    token: str


class ForgotPasswordResult(BaseModel):
    message: str
    # Only populated outside production
    reset_url: str | None = None


class ResetTokenValidity(BaseModel):
    valid: bool


class Message(BaseModel):
    message: str


class TokenCleanupResult(BaseModel):
    deleted: int
