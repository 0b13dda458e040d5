"""
Commission model.

Ledger entry: one commission earned by one affiliate at one level
for one paid invoice.
"""

from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import CommissionStatus, CommissionType
from app.models.types import MoneyType, PercentType, enum_column


class Commission(Base):
    """
    Commission entity.

    Exactly one row per (unified_payment_id, affiliate_id, level); the
    unique constraint is what keeps retries and concurrent runs from
    paying twice. Amounts are never edited in place.

    Attributes:
        id: Primary key
        affiliate_id: Affiliate earning the commission
        product_id: Product of the source payment
        unified_payment_id: Source payment
        unified_user_id: Paying unified user
        amount: payment.amount * percentage / 100, rounded to minor units
        percentage: Rate applied (fixed at computation time)
        level: Hierarchy level (1 = direct referrer)
        commission_type: primeira_venda, renovacao or venda_avulsa
        status: pending, available, paid or rejected
        payment_date: Invoice payment timestamp
        reference_month: First day of the invoice month
        available_date: When the commission matured
        notes: Human-readable origin
    """

    __tablename__ = "commissions"
    __table_args__ = (
        UniqueConstraint(
            "unified_payment_id", "affiliate_id", "level",
            name="uq_commissions_payment_affiliate_level",
        ),
        Index("idx_commissions_status_payment_date", "status", "payment_date"),
        Index("idx_commissions_affiliate_status", "affiliate_id", "status"),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    affiliate_id: Mapped[str] = mapped_column(String(64), nullable=False)
    product_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Source references
    unified_payment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("unified_payments.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    unified_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("unified_users.id", ondelete="RESTRICT"),
        nullable=False,
    )

    # Amount
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    percentage: Mapped[Decimal] = mapped_column(PercentType, nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False)

    commission_type: Mapped[CommissionType] = mapped_column(
        enum_column(CommissionType), nullable=False
    )
    status: Mapped[CommissionStatus] = mapped_column(
        enum_column(CommissionStatus),
        nullable=False,
        default=CommissionStatus.PENDING,
    )

    # Dates
    payment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    reference_month: Mapped[date] = mapped_column(Date, nullable=False)
    available_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

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
            f"<Commission(id={self.id}, affiliate_id={self.affiliate_id}, "
            f"payment_id={self.unified_payment_id}, level={self.level}, "
            f"amount={self.amount}, status={self.status.value})>"
        )
