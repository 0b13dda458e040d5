"""
AffiliateProfile model.

Payout preferences of an affiliate.
"""

from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.config.business_constants import (
    DEFAULT_WITHDRAWAL_DAY,
    MAX_WITHDRAWAL_DAY,
    MIN_WITHDRAWAL_DAY,
)
from app.models.base import Base


class AffiliateProfile(Base):
    """Affiliate payout configuration (withdrawal weekday 1=Mon .. 5=Fri)."""

    __tablename__ = "affiliate_profiles"
    __table_args__ = (
        CheckConstraint(
            f"withdrawal_day BETWEEN {MIN_WITHDRAWAL_DAY} AND {MAX_WITHDRAWAL_DAY}",
            name="check_affiliate_profiles_withdrawal_day",
        ),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    withdrawal_day: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_WITHDRAWAL_DAY
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AffiliateProfile(id={self.id}, "
            f"withdrawal_day={self.withdrawal_day})>"
        )
