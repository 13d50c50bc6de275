from datetime import timedelta

from sqlalchemy.orm import Session

from app.core.security import generate_reset_token
from app.db.models.password_reset_token import PasswordResetToken as ResetTokenModel
from app.domain.reset_token_validity import ResetTokenValidityPolicy
from app.errors import NotFoundError
from app.repositories.user import lock_user


def create_token(db: Session, user_id: int, lifetime: timedelta) -> str:
    """
    Issue a new reset token for the user and retire every unused one.

    Both steps commit together. The user row is locked first so concurrent
    requests for the same user queue up instead of each leaving an active token.

    Returns:
        The raw token. This is the only time it is returned.

    Raises:
        NotFoundError: If the user does not exist.
    """
    try:
        if lock_user(db, user_id) is None:
            raise NotFoundError("User not found")

        policy = ResetTokenValidityPolicy.now()
        db.query(ResetTokenModel).filter(
            ResetTokenModel.user_id == user_id,
            ResetTokenModel.used.is_(False),
        ).update({ResetTokenModel.used: True}, synchronize_session=False)

        token = generate_reset_token()
        db.add(
            ResetTokenModel(
                user_id=user_id,
                token=token,
                expires_at=policy.as_of + lifetime,
                used=False,
                created_at=policy.as_of,
            )
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    return token


def find_valid_token(db: Session, token: str, lock: bool = False) -> ResetTokenModel | None:
    """
    Get a token row only if it is unused and unexpired.

    Unknown, used and expired tokens all come back as None.
    """
    policy = ResetTokenValidityPolicy.now()
    query = db.query(ResetTokenModel).filter(
        ResetTokenModel.token == token,
        policy.sqlalchemy_active_predicate(
            used_col=ResetTokenModel.used, expires_col=ResetTokenModel.expires_at
        ),
    )
    if lock:
        query = query.with_for_update()
    return query.first()


def mark_as_used(db: Session, token: str) -> None:
    """Mark a token used and commit. Marking a used or unknown token is a no-op."""
    db.query(ResetTokenModel).filter(
        ResetTokenModel.token == token,
        ResetTokenModel.used.is_(False),
    ).update({ResetTokenModel.used: True}, synchronize_session=False)
    db.commit()


def cleanup_expired_tokens(db: Session) -> int:
    """Delete used and expired tokens. Returns how many rows were removed."""
    policy = ResetTokenValidityPolicy.now()
    deleted = (
        db.query(ResetTokenModel)
        .filter(
            policy.sqlalchemy_disposable_predicate(
                used_col=ResetTokenModel.used, expires_col=ResetTokenModel.expires_at
            )
        )
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted
