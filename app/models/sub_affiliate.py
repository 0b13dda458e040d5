"""
SubAffiliate model.

Referral hierarchy edge: parent affiliate -> descendant at a given level.
Maintained by the referral-signup flow; read-only for the commission engine.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class SubAffiliate(Base):
    """Hierarchy edge (ancestor, descendant, level >= 1)."""

    __tablename__ = "sub_affiliates"
    __table_args__ = (
        UniqueConstraint(
            "parent_affiliate_id", "sub_affiliate_id",
            name="uq_sub_affiliates_parent_child",
        ),
        CheckConstraint("level >= 1", name="check_sub_affiliates_level_positive"),
        Index("idx_sub_affiliates_child_level", "sub_affiliate_id", "level"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    parent_affiliate_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    # Descendant: an affiliate id or the external user id of an end user
    sub_affiliate_id: Mapped[str] = mapped_column(String(255), nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<SubAffiliate(parent={self.parent_affiliate_id}, "
            f"child={self.sub_affiliate_id}, level={self.level})>"
        )
