"""
ProductCommissionLevel model.

Commission rate table keyed by product, affiliate plan type and level.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import PlanType
from app.models.types import PercentType, enum_column


class ProductCommissionLevel(Base):
    """Commission percentage for (product, plan type, level)."""

    __tablename__ = "product_commission_levels"
    __table_args__ = (
        UniqueConstraint(
            "product_id", "plan_type", "level",
            name="uq_product_commission_levels_key",
        ),
        CheckConstraint(
            "percentage >= 0 AND percentage <= 100",
            name="check_product_commission_levels_percentage_range",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    product_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    plan_type: Mapped[PlanType] = mapped_column(
        enum_column(PlanType, length=10), nullable=False
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    percentage: Mapped[Decimal] = mapped_column(PercentType, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
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
            f"<ProductCommissionLevel(product={self.product_id}, "
            f"plan={self.plan_type.value}, level={self.level}, "
            f"percentage={self.percentage}, active={self.is_active})>"
        )
