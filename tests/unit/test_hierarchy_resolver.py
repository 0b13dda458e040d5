"""
Unit tests for HierarchyResolver.

Tests cover:
- Edge ordering and depth
- Direct-affiliate fallback precedence
- Store failures surfacing as LookupUnavailable
"""

import asyncio
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from app.services.commission.hierarchy_resolver import AffiliateEdge
from app.utils.exceptions import LookupUnavailable


def edge_row(parent: str, level: int) -> SimpleNamespace:
    """Stand-in for a SubAffiliate row."""
    return SimpleNamespace(parent_affiliate_id=parent, level=level)


class TestResolve:
    """Test hierarchy resolution."""

    @pytest.mark.asyncio
    async def test_returns_edges_in_level_order(self, resolver):
        resolver.sub_affiliate_repo.get_ancestors.return_value = [
            edge_row("A1", 1),
            edge_row("A2", 2),
            edge_row("A3", 3),
        ]

        edges = await resolver.resolve("U1")

        assert edges == [
            AffiliateEdge("A1", 1),
            AffiliateEdge("A2", 2),
            AffiliateEdge("A3", 3),
        ]
        resolver.sub_affiliate_repo.get_ancestors.assert_awaited_once_with("U1", 3)

    @pytest.mark.asyncio
    async def test_no_edges_is_valid(self, resolver):
        resolver.sub_affiliate_repo.get_ancestors.return_value = []
        assert await resolver.resolve("U1") == []

    @pytest.mark.asyncio
    async def test_duplicate_level_keeps_first(self, resolver):
        resolver.sub_affiliate_repo.get_ancestors.return_value = [
            edge_row("A1", 1),
            edge_row("B1", 1),
        ]

        edges = await resolver.resolve("U1")

        assert edges == [AffiliateEdge("A1", 1)]


class TestFallback:
    """Test direct-affiliate fallback."""

    @pytest.mark.asyncio
    async def test_edges_win_over_payment_affiliate(self, resolver):
        resolver.sub_affiliate_repo.get_ancestors.return_value = [edge_row("A1", 1)]

        edges = await resolver.resolve_with_fallback("U1", "OTHER")

        assert edges == [AffiliateEdge("A1", 1)]

    @pytest.mark.asyncio
    async def test_payment_affiliate_used_when_no_edges(self, resolver):
        resolver.sub_affiliate_repo.get_ancestors.return_value = []

        edges = await resolver.resolve_with_fallback("U1", "A9")

        assert edges == [AffiliateEdge("A9", 1, direct_fallback=True)]

    @pytest.mark.asyncio
    async def test_nothing_to_pay(self, resolver):
        resolver.sub_affiliate_repo.get_ancestors.return_value = []
        assert await resolver.resolve_with_fallback("U1", None) == []


class TestLookupUnavailable:
    """Store failures must never read as "no affiliate"."""

    @pytest.mark.asyncio
    async def test_connection_error(self, resolver):
        resolver.sub_affiliate_repo.get_ancestors.side_effect = OperationalError(
            "SELECT", {}, ConnectionRefusedError("connection refused")
        )

        with pytest.raises(LookupUnavailable):
            await resolver.resolve("U1")

    @pytest.mark.asyncio
    async def test_fallback_not_used_on_failure(self, resolver):
        """An unreachable store is an error, not an empty chain."""
        resolver.sub_affiliate_repo.get_ancestors.side_effect = OperationalError(
            "SELECT", {}, ConnectionRefusedError("connection refused")
        )

        with pytest.raises(LookupUnavailable):
            await resolver.resolve_with_fallback("U1", "A9")

    @pytest.mark.asyncio
    async def test_timeout(self, resolver):
        async def hang(*args, **kwargs):
            await asyncio.sleep(5)

        resolver.sub_affiliate_repo.get_ancestors.side_effect = hang

        with pytest.raises(LookupUnavailable):
            await resolver.resolve("U1")

    @pytest.mark.asyncio
    async def test_programming_errors_propagate(self, resolver):
        resolver.sub_affiliate_repo.get_ancestors.side_effect = ValueError("bug")

        with pytest.raises(ValueError):
            await resolver.resolve("U1")
