"""
Shared fixtures for unit tests.

This module provides common fixtures used across multiple test modules:
- Mock database session
- HierarchyResolver / CommissionRateTable with mocked repositories
"""

from unittest.mock import AsyncMock

import pytest

from app.services.commission.hierarchy_resolver import HierarchyResolver
from app.services.commission.rate_table import CommissionRateTable


@pytest.fixture
def mock_session():
    """
    Mock async database session.

    Returns:
        AsyncMock: Mocked async session for database operations
    """
    return AsyncMock()


@pytest.fixture
def resolver(mock_session):
    """
    HierarchyResolver with a mocked sub-affiliate repository.

    Returns:
        HierarchyResolver: max_depth=3, timeout=0.05s
    """
    resolver = HierarchyResolver(mock_session, max_depth=3, timeout=0.05)
    resolver.sub_affiliate_repo = AsyncMock()
    return resolver


@pytest.fixture
def rate_table(mock_session):
    """
    CommissionRateTable with mocked repositories.

    Returns:
        CommissionRateTable: timeout=0.05s
    """
    table = CommissionRateTable(mock_session, timeout=0.05)
    table.subscription_repo = AsyncMock()
    table.level_repo = AsyncMock()
    return table

