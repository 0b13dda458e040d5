"""
UnifiedPayment model.

One paid invoice reported by an external product, plus the tracking
fields the ledger writer and reconciliation maintain.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import MoneyType


class UnifiedPayment(Base):
    """
    UnifiedPayment entity.

    Invoice identity and amount never change after creation; only the
    tracking fields (processed, processed_at, commissions_generated,
    last_error) are updated.

    Attributes:
        id: Primary key
        external_payment_id: Payment id inside the external product (optional)
        unified_user_id: Paying unified user
        product_id / plan_id: What was bought
        stripe_invoice_id: Provider invoice id
        amount / currency: Invoice total
        billing_reason: subscription_create, subscription_cycle, one_time_purchase...
        payment_date: When the invoice was paid
        affiliate_id: Direct affiliate recorded on the payment (hierarchy fallback)
        processed: Commission processing finished
        commissions_generated: Number of commission rows for this payment
        last_error: Last processing failure, cleared on success
    """

    __tablename__ = "unified_payments"
    __table_args__ = (
        UniqueConstraint(
            "external_payment_id", "product_id",
            name="uq_unified_payments_external_product",
        ),
        Index("idx_unified_payments_invoice", "stripe_invoice_id", "product_id"),
        Index("idx_unified_payments_pending", "processed", "created_at"),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Identity
    external_payment_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    unified_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("unified_users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[str] = mapped_column(String(64), nullable=False)
    plan_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    stripe_invoice_id: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    stripe_subscription_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    # Money
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    currency: Mapped[str] = mapped_column(
        String(10), nullable=False, default="brl"
    )

    billing_reason: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default="paid"
    )
    payment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Affiliate attribution carried by the payment itself
    affiliate_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )
    affiliate_coupon_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    environment: Mapped[str] = mapped_column(
        String(20), nullable=False, default="production"
    )
    payment_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=dict,
    )

    # Commission processing tracking
    processed: Mapped[bool | None] = mapped_column(
        Boolean, nullable=True, default=False
    )
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    commissions_generated: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

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
            f"<UnifiedPayment(id={self.id}, invoice={self.stripe_invoice_id}, "
            f"amount={self.amount}, processed={self.processed})>"
        )
