"""
SubAffiliate repository.

Data access layer for the referral hierarchy.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.sub_affiliate import SubAffiliate
from app.repositories.base import BaseRepository


class SubAffiliateRepository(BaseRepository[SubAffiliate]):
    """SubAffiliate repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize sub-affiliate repository."""
        super().__init__(SubAffiliate, session)

    async def get_ancestors(
        self, descendant_id: str, max_level: int
    ) -> list[SubAffiliate]:
        """
        Get hierarchy edges above a descendant.

        Args:
            descendant_id: Paying user's external id (or affiliate id)
            max_level: Deepest level to return

        Returns:
            Edges ordered by level ascending
        """
        stmt = (
            select(SubAffiliate)
            .where(
                SubAffiliate.sub_affiliate_id == descendant_id,
                SubAffiliate.level <= max_level,
            )
            .order_by(SubAffiliate.level, SubAffiliate.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
