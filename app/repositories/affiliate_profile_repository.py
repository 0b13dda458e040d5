"""
AffiliateProfile repository.

Data access layer for affiliate payout preferences.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.affiliate_profile import AffiliateProfile
from app.repositories.base import BaseRepository


class AffiliateProfileRepository(BaseRepository[AffiliateProfile]):
    """AffiliateProfile repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize affiliate profile repository."""
        super().__init__(AffiliateProfile, session)

    async def get_withdrawal_days(
        self, affiliate_ids: list[str]
    ) -> dict[str, int]:
        """
        Get withdrawal weekday for several affiliates in one query.

        Args:
            affiliate_ids: Affiliate IDs

        Returns:
            Mapping affiliate_id -> withdrawal_day (missing profiles omitted)
        """
        if not affiliate_ids:
            return {}

        stmt = select(
            AffiliateProfile.id, AffiliateProfile.withdrawal_day
        ).where(AffiliateProfile.id.in_(affiliate_ids))
        result = await self.session.execute(stmt)
        return {row.id: row.withdrawal_day for row in result.all()}
