import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from app.errors import (
    ExpiredTokenError,
    InvalidSignatureError,
    MalformedTokenError,
)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)

ACCESS_TOKEN_TYPE = "access"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def dummy_verify_password() -> None:
    """Spend the time of one bcrypt verify without a real hash."""
    pwd_context.dummy_verify()


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def generate_reset_token() -> str:
    """Return 256 bits of CSPRNG output, hex encoded."""
    return secrets.token_hex(32)


def parse_duration(value: str) -> timedelta:
    """
    Parse a duration such as "24h", "30m", "7d", "45s" or "3600".

    A bare number is read as seconds.

    Raises:
        ValueError: If the value is not a positive duration.
    """
    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    delta = timedelta(**{_DURATION_UNITS[unit]: int(amount)})
    if delta <= timedelta(0):
        raise ValueError(f"Duration must be positive: {value!r}")
    return delta


@dataclass(frozen=True, slots=True)
class TokenClaim:
    """Identity carried by an access token."""

    user_id: int
    email: str


@dataclass(frozen=True, slots=True)
class TokenCodecConfig:
    secret: str
    expires_in: timedelta = timedelta(hours=24)
    algorithm: str = "HS256"


class TokenCodec:
    """Signs and verifies access tokens with a fixed configuration."""

    def __init__(self, config: TokenCodecConfig):
        if not config.secret:
            raise ValueError("Token signing secret must not be empty")
        self._config = config

    @property
    def config(self) -> TokenCodecConfig:
        return self._config

    def encode(self, claim: TokenClaim, issued_at: datetime | None = None) -> str:
        """Create a signed JWT for the claim, expiring after the configured window."""
        iat = issued_at or datetime.now(timezone.utc)
        payload = {
            "sub": str(claim.user_id),
            "email": claim.email,
            "type": ACCESS_TOKEN_TYPE,
            "iat": iat,
            "exp": iat + self._config.expires_in,
        }
        return jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)

    def decode(self, token: str) -> TokenClaim:
        """
        Verify a JWT and return its claim.

        Raises:
            InvalidSignatureError: If the signature does not match.
            ExpiredTokenError: If the token is past its expiry.
            MalformedTokenError: If the token cannot be parsed or lacks the expected claims.
        """
        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredTokenError("Token has expired") from e
        except jwt.InvalidSignatureError as e:
            raise InvalidSignatureError("Token signature is invalid") from e
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError("Token could not be parsed") from e

        # Only access tokens authenticate requests
        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise MalformedTokenError("Unexpected token type")

        email = payload.get("email")
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise MalformedTokenError("Token subject is not a user id") from e
        if not isinstance(email, str):
            raise MalformedTokenError("Token is missing the email claim")

        return TokenClaim(user_id=user_id, email=email)
