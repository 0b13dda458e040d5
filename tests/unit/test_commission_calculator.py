"""
Unit tests for commission calculation logic.

Tests cover:
- Amount rounding to the currency minor unit
- Commission type mapping from billing reason
- Reference month and weekday normalization
- Notes text
"""

from datetime import UTC, date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.models.enums import CommissionType, PlanType
from app.services.commission.calculator import (
    build_commission_notes,
    calculate_commission_amount,
    commission_type_for,
    minor_unit_quantum,
    reference_month_for,
)
from app.utils.datetime_utils import business_weekday, end_of_day, ensure_utc


class TestCommissionAmount:
    """Test commission amount calculation."""

    def test_rounds_half_up_to_cents(self):
        """199.90 at 30% is 59.97, not 59.969999 or 60.00."""
        result = calculate_commission_amount(
            Decimal("199.90"), Decimal("30"), "brl"
        )
        assert result == Decimal("59.97")
        assert str(result) == "59.97"

    def test_half_cent_rounds_up(self):
        """0.005 rounds away from zero."""
        # 10.05 * 50% = 5.025
        result = calculate_commission_amount(Decimal("10.05"), Decimal("50"))
        assert result == Decimal("5.03")

    def test_fractional_percentage(self):
        """Test fractional rate such as 7.5%."""
        result = calculate_commission_amount(Decimal("97.00"), Decimal("7.50"))
        # 97 * 7.5 / 100 = 7.275 -> 7.28
        assert result == Decimal("7.28")

    def test_zero_decimal_currency(self):
        """JPY has no minor unit."""
        result = calculate_commission_amount(Decimal("1999"), Decimal("15"), "JPY")
        # 299.85 -> 300
        assert result == Decimal("300")

    def test_three_decimal_currency(self):
        """KWD keeps three decimals."""
        result = calculate_commission_amount(Decimal("10.000"), Decimal("12.345"), "kwd")
        assert result == Decimal("1.235")

    @pytest.mark.parametrize(
        "amount,percentage",
        [
            (Decimal("0"), Decimal("30")),
            (Decimal("100"), Decimal("0")),
            (Decimal("-10"), Decimal("30")),
        ],
    )
    def test_non_positive_inputs_give_zero(self, amount, percentage):
        """Test zero result for non-positive amount or rate."""
        assert calculate_commission_amount(amount, percentage) == Decimal("0")

    def test_unknown_currency_uses_two_decimals(self):
        """Unknown or missing currency falls back to cents."""
        assert minor_unit_quantum("xyz") == Decimal("0.01")
        assert minor_unit_quantum(None) == Decimal("0.01")


class TestCommissionType:
    """Test billing reason mapping."""

    def test_subscription_create_is_first_sale(self):
        assert commission_type_for("subscription_create") == CommissionType.FIRST_SALE
        assert CommissionType.FIRST_SALE.value == "primeira_venda"

    def test_one_time_purchase(self):
        assert commission_type_for("one_time_purchase") == CommissionType.ONE_TIME

    @pytest.mark.parametrize(
        "reason", ["subscription_cycle", "subscription_update", "manual", None]
    )
    def test_everything_else_is_renewal(self, reason):
        assert commission_type_for(reason) == CommissionType.RENEWAL


class TestDates:
    """Test reference month and weekday helpers."""

    def test_reference_month_is_first_day(self):
        paid = datetime(2026, 3, 31, 23, 59, tzinfo=UTC)
        assert reference_month_for(paid) == date(2026, 3, 1)

    def test_reference_month_uses_utc(self):
        """A payment late on the 31st in UTC-3 belongs to the next UTC month."""
        brt = timezone(timedelta(hours=-3))
        paid = datetime(2026, 1, 31, 22, 0, tzinfo=brt)
        assert reference_month_for(paid) == date(2026, 2, 1)

    def test_naive_datetime_is_utc(self):
        naive = datetime(2026, 3, 2, 10, 0)
        assert ensure_utc(naive).tzinfo == UTC

    @pytest.mark.parametrize(
        "day,expected",
        [
            (date(2026, 3, 2), 1),  # Monday
            (date(2026, 3, 4), 3),  # Wednesday
            (date(2026, 3, 6), 5),  # Friday
            (date(2026, 2, 28), 1),  # Saturday counts as Monday
            (date(2026, 3, 1), 1),  # Sunday counts as Monday
        ],
    )
    def test_business_weekday(self, day, expected):
        assert business_weekday(day) == expected

    def test_end_of_day_is_next_midnight(self):
        assert end_of_day(date(2026, 3, 2)) == datetime(2026, 3, 3, tzinfo=UTC)


class TestNotes:
    """Test commission notes."""

    def test_plain_notes(self):
        notes = build_commission_notes(1, PlanType.PRO, "P1")
        assert notes == "Commission L1 (PRO) - product P1"

    def test_reprocessed_direct_notes(self):
        notes = build_commission_notes(
            1, PlanType.FREE, "P1", reprocessed=True, direct=True
        )
        assert "(reprocessed, direct)" in notes
