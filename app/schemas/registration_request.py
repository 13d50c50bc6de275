from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.schemas.user import UserPublic

RegistrationStatus = Literal["pending", "approved", "rejected"]


class RegistrationSubmission(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=2, max_length=255)
    department: str | None = Field(None, max_length=255)
    title: str | None = Field(None, max_length=255)


class RegistrationRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    department: str | None = None
    title: str | None = None
    status: RegistrationStatus
    rejection_reason: str | None = None
    created_at: datetime
    reviewed_at: datetime | None = None
    reviewer_name: str | None = None


class RegistrationRejection(BaseModel):
    # Checked in the service so a blank reason gets the domain's 400
    reason: str | None = None


class RegistrationApproval(BaseModel):
    message: str
    user: UserPublic
