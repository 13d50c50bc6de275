from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True, slots=True)
class ResetTokenValidityPolicy:
    """Defines when a password reset token is redeemable "as of" a given instant.

    A token moves Active -> Used (explicit, terminal) or Active -> Expired
    (implicit, a function of time). It is active only if:
    - used is False
    - AND expires_at > as_of

    expires_at is exclusive: a token expiring exactly at as_of is already dead.
    Cleanup removes anything that is used or strictly past expiry.
    """

    as_of: datetime

    @classmethod
    def now(cls) -> ResetTokenValidityPolicy:
        return cls(as_of=datetime.now(timezone.utc))

    def sqlalchemy_active_predicate(self, *, used_col, expires_col):
        """Build a SQLAlchemy predicate implementing the active rule."""
        from sqlalchemy import and_

        return and_(used_col.is_(False), expires_col > self.as_of)

    def sqlalchemy_disposable_predicate(self, *, used_col, expires_col):
        """Rows that can never become active again and are safe to delete."""
        from sqlalchemy import or_

        return or_(expires_col < self.as_of, used_col.is_(True))
