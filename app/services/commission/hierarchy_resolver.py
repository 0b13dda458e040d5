"""
Hierarchy resolver.

Resolves the chain of referring affiliates above a paying user.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.sub_affiliate_repository import SubAffiliateRepository
from app.utils.db_decorators import lookup_guard


@dataclass(frozen=True)
class AffiliateEdge:
    """One ancestor affiliate and its distance from the paying user."""

    affiliate_id: str
    level: int
    direct_fallback: bool = False


class HierarchyResolver:
    """
    Resolves referral chains from the sub_affiliates table.

    Lookups are bounded by `timeout`; an unreachable store raises
    LookupUnavailable, which callers must never read as "no affiliate".
    """

    def __init__(
        self, session: AsyncSession, max_depth: int, timeout: float
    ) -> None:
        """
        Initialize hierarchy resolver.

        Args:
            session: Async database session
            max_depth: Deepest level returned
            timeout: Per-lookup timeout in seconds
        """
        self.session = session
        self.max_depth = max_depth
        self.timeout = timeout
        self.sub_affiliate_repo = SubAffiliateRepository(session)

    @lookup_guard
    async def resolve(self, descendant_id: str) -> list[AffiliateEdge]:
        """
        Get referral chain for a descendant.

        Args:
            descendant_id: Paying user's external id

        Returns:
            Edges with level ascending from 1; empty for direct signups
        """
        rows = await self.sub_affiliate_repo.get_ancestors(
            descendant_id, self.max_depth
        )

        edges: list[AffiliateEdge] = []
        seen_levels: set[int] = set()
        for row in rows:
            # One ancestor per level; extra rows at a level are data errors
            if row.level in seen_levels:
                logger.warning(
                    "Duplicate hierarchy level ignored",
                    extra={
                        "descendant_id": descendant_id,
                        "level": row.level,
                        "affiliate_id": row.parent_affiliate_id,
                    },
                )
                continue
            seen_levels.add(row.level)
            edges.append(AffiliateEdge(row.parent_affiliate_id, row.level))

        logger.debug(
            "Referral chain resolved",
            extra={
                "descendant_id": descendant_id,
                "max_depth": self.max_depth,
                "chain_length": len(edges),
            },
        )

        return edges

    async def resolve_with_fallback(
        self, descendant_id: str | None, direct_affiliate_id: str | None
    ) -> list[AffiliateEdge]:
        """
        Get referral chain, falling back to the payment's own affiliate.

        Hierarchy edges always win. Only when there are none and the
        payment carries an affiliate_id is that affiliate used as a
        single level-1 edge (payments recorded before hierarchy tracking).

        Args:
            descendant_id: Paying user's external id (None if unknown)
            direct_affiliate_id: affiliate_id recorded on the payment or user

        Returns:
            Edges to pay, possibly empty
        """
        edges: list[AffiliateEdge] = []
        if descendant_id:
            edges = await self.resolve(descendant_id)

        if edges:
            return edges

        if direct_affiliate_id:
            logger.info(
                "No hierarchy found, using payment affiliate as level 1",
                extra={
                    "descendant_id": descendant_id,
                    "affiliate_id": direct_affiliate_id,
                },
            )
            return [AffiliateEdge(direct_affiliate_id, 1, direct_fallback=True)]

        return []
