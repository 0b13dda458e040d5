"""
UnifiedUser model.

Cross-product identity of an end user reported by an external product.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class UnifiedUser(Base):
    """
    UnifiedUser entity.

    Identity (external_user_id, product_id) is immutable; the affiliate
    linkage and subscription-tracking fields are overwritten by every sync
    (last write wins).

    Attributes:
        id: Primary key
        external_user_id: User id inside the external product
        product_id: Product that reported the user
        email: Contact email
        affiliate_code: Referral code used at signup
        affiliate_id: Direct referring affiliate
        plan_id / status / trial_end / current_period_*: subscription tracking
    """

    __tablename__ = "unified_users"
    __table_args__ = (
        UniqueConstraint(
            "external_user_id", "product_id",
            name="uq_unified_users_external_product",
        ),
        Index("idx_unified_users_affiliate", "affiliate_id"),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Identity
    external_user_id: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    product_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )

    # Contact data
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    cpf: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Affiliate linkage
    affiliate_code: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    affiliate_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )

    # Subscription tracking
    environment: Mapped[str | None] = mapped_column(String(20), nullable=True)
    plan_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    cancel_at_period_end: Mapped[bool | None] = mapped_column(
        Boolean, nullable=True
    )
    trial_end: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    current_period_start: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    current_period_end: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Timestamps
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
            f"<UnifiedUser(id={self.id}, external_user_id={self.external_user_id}, "
            f"product_id={self.product_id}, affiliate_id={self.affiliate_id})>"
        )
