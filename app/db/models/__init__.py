from app.db.models.user import User
from app.db.models.password_reset_token import PasswordResetToken
from app.db.models.registration_request import RegistrationRequest

__all__ = ["User", "PasswordResetToken", "RegistrationRequest"]
