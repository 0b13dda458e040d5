"""
Unit tests for model mappings.
"""

import pytest
from sqlalchemy import inspect

from app.models import Plan, Subscription, UnifiedPayment, UnifiedUser


class TestMappings:
    """Models are plain tables; services query by id, never through relationships."""

    @pytest.mark.parametrize(
        "model", [UnifiedUser, UnifiedPayment, Plan, Subscription]
    )
    def test_no_relationships(self, model):
        assert list(inspect(model).relationships) == []

    def test_payment_references_user_by_foreign_key(self):
        [fk] = UnifiedPayment.__table__.c.unified_user_id.foreign_keys
        assert fk.target_fullname == "unified_users.id"
