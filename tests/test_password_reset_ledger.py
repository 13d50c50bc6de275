from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import Session

import app.repositories.password_reset_token as reset_token_repo
from app.db.models.password_reset_token import PasswordResetToken as ResetTokenModel
from app.domain.reset_token_validity import ResetTokenValidityPolicy
from app.errors import NotFoundError

ONE_HOUR = timedelta(hours=1)


def _expire(db: Session, token: str) -> None:
    db.query(ResetTokenModel).filter(ResetTokenModel.token == token).update(
        {ResetTokenModel.expires_at: datetime.now(timezone.utc) - timedelta(minutes=1)},
        synchronize_session=False,
    )
    db.commit()


# ============================================================================
# CREATE TOKEN TESTS
# ============================================================================


def test_create_token_returns_valid_token(db: Session, member_user: dict):
    token = reset_token_repo.create_token(db, member_user["id"], ONE_HOUR)

    row = reset_token_repo.find_valid_token(db, token)
    assert row is not None
    assert row.user_id == member_user["id"]
    assert row.used is False
    assert len(token) == 64


def test_create_token_sets_expiry_from_lifetime(db: Session, member_user: dict):
    before = datetime.now(timezone.utc)
    token = reset_token_repo.create_token(db, member_user["id"], ONE_HOUR)
    after = datetime.now(timezone.utc)

    row = db.query(ResetTokenModel).filter(ResetTokenModel.token == token).one()
    expires_at = row.expires_at.replace(tzinfo=timezone.utc) if row.expires_at.tzinfo is None else row.expires_at
    assert before + ONE_HOUR <= expires_at <= after + ONE_HOUR


def test_second_token_invalidates_first(db: Session, member_user: dict):
    """Issuing a new token retires every earlier unused token for that user."""
    first = reset_token_repo.create_token(db, member_user["id"], ONE_HOUR)
    second = reset_token_repo.create_token(db, member_user["id"], ONE_HOUR)

    assert first != second
    assert reset_token_repo.find_valid_token(db, first) is None
    assert reset_token_repo.find_valid_token(db, second) is not None

    rows = (
        db.query(ResetTokenModel)
        .filter(ResetTokenModel.user_id == member_user["id"])
        .order_by(ResetTokenModel.id)
        .all()
    )
    assert [row.used for row in rows] == [True, False]


def test_at_most_one_active_token_per_user(db: Session, member_user: dict):
    for _ in range(5):
        reset_token_repo.create_token(db, member_user["id"], ONE_HOUR)

    policy = ResetTokenValidityPolicy.now()
    mine = db.query(ResetTokenModel).filter(ResetTokenModel.user_id == member_user["id"])
    active = mine.filter(
        policy.sqlalchemy_active_predicate(
            used_col=ResetTokenModel.used, expires_col=ResetTokenModel.expires_at
        )
    )
    assert mine.count() == 5
    assert active.count() == 1


def test_new_token_does_not_touch_other_users(db: Session, member_user: dict, admin_user: dict):
    admin_token = reset_token_repo.create_token(db, admin_user["id"], ONE_HOUR)
    reset_token_repo.create_token(db, member_user["id"], ONE_HOUR)

    assert reset_token_repo.find_valid_token(db, admin_token) is not None


def test_create_token_for_unknown_user(db: Session):
    with pytest.raises(NotFoundError):
        reset_token_repo.create_token(db, 999999, ONE_HOUR)
    assert db.query(ResetTokenModel).count() == 0


# ============================================================================
# FIND / MARK AS USED TESTS
# ============================================================================


def test_find_valid_token_unknown(db: Session):
    assert reset_token_repo.find_valid_token(db, "0" * 64) is None


def test_find_valid_token_expired(db: Session, member_user: dict):
    token = reset_token_repo.create_token(db, member_user["id"], ONE_HOUR)
    _expire(db, token)

    # The row still exists but is indistinguishable from a missing one
    assert db.query(ResetTokenModel).filter(ResetTokenModel.token == token).count() == 1
    assert reset_token_repo.find_valid_token(db, token) is None


def test_mark_as_used(db: Session, member_user: dict):
    token = reset_token_repo.create_token(db, member_user["id"], ONE_HOUR)
    reset_token_repo.mark_as_used(db, token)

    assert reset_token_repo.find_valid_token(db, token) is None


def test_mark_as_used_is_idempotent(db: Session, member_user: dict):
    token = reset_token_repo.create_token(db, member_user["id"], ONE_HOUR)
    reset_token_repo.mark_as_used(db, token)
    reset_token_repo.mark_as_used(db, token)
    reset_token_repo.mark_as_used(db, "does-not-exist")

    row = db.query(ResetTokenModel).filter(ResetTokenModel.token == token).one()
    assert row.used is True


# ============================================================================
# CLEANUP TESTS
# ============================================================================


def test_cleanup_removes_used_and_expired_only(db: Session, member_user: dict, admin_user: dict):
    used = reset_token_repo.create_token(db, member_user["id"], ONE_HOUR)
    reset_token_repo.mark_as_used(db, used)
    expired = reset_token_repo.create_token(db, admin_user["id"], ONE_HOUR)
    _expire(db, expired)
    active = reset_token_repo.create_token(db, member_user["id"], ONE_HOUR)

    deleted = reset_token_repo.cleanup_expired_tokens(db)

    assert deleted == 2
    remaining = [row.token for row in db.query(ResetTokenModel).all()]
    assert remaining == [active]
    assert reset_token_repo.find_valid_token(db, active) is not None


def test_cleanup_with_nothing_to_do(db: Session, member_user: dict):
    reset_token_repo.create_token(db, member_user["id"], ONE_HOUR)
    assert reset_token_repo.cleanup_expired_tokens(db) == 0


# ============================================================================
# VALIDITY POLICY TESTS
# ============================================================================


def test_policy_boundaries(db: Session, member_user: dict):
    as_of = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)
    policy = ResetTokenValidityPolicy(as_of=as_of)
    rows = {
        "future": (False, as_of + timedelta(seconds=1)),
        "at_boundary": (False, as_of),
        "used": (True, as_of + ONE_HOUR),
        "past": (False, as_of - timedelta(seconds=1)),
    }
    for token, (used, expires_at) in rows.items():
        db.add(
            ResetTokenModel(
                user_id=member_user["id"],
                token=token,
                expires_at=expires_at,
                used=used,
                created_at=as_of - ONE_HOUR,
            )
        )
    db.commit()

    def matching(predicate) -> set[str]:
        return {
            row.token
            for row in db.query(ResetTokenModel).filter(
                predicate(used_col=ResetTokenModel.used, expires_col=ResetTokenModel.expires_at)
            )
        }

    # expires_at is exclusive for redemption but only strictly past rows are disposable
    assert matching(policy.sqlalchemy_active_predicate) == {"future"}
    assert matching(policy.sqlalchemy_disposable_predicate) == {"used", "past"}
