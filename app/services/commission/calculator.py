"""
Commission calculator.

Pure computations shared by the ledger writer and reconciliation.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from loguru import logger

from app.config.business_constants import CURRENCY_MINOR_UNITS, DEFAULT_MINOR_UNITS
from app.models.enums import BillingReason, CommissionType, PlanType
from app.utils.datetime_utils import first_day_of_month


def minor_unit_quantum(currency: str | None) -> Decimal:
    """
    Smallest representable amount of a currency.

    Args:
        currency: ISO 4217 code, any case (None -> 2 decimals)

    Returns:
        Quantum such as Decimal("0.01") or Decimal("1")
    """
    digits = CURRENCY_MINOR_UNITS.get(
        (currency or "").lower(), DEFAULT_MINOR_UNITS
    )
    return Decimal(1).scaleb(-digits)


def calculate_commission_amount(
    payment_amount: Decimal, percentage: Decimal, currency: str | None = None
) -> Decimal:
    """
    Calculate commission amount for one level.

    Formula: payment_amount * percentage / 100, rounded half-up to the
    currency's minor unit.

    Args:
        payment_amount: Invoice amount
        percentage: Commission rate (e.g., 30 = 30%)
        currency: Invoice currency

    Returns:
        Rounded commission amount (0 for non-positive inputs)

    Example:
        >>> calculate_commission_amount(Decimal("199.90"), Decimal("30"), "brl")
        Decimal("59.97")
    """
    if payment_amount <= 0 or percentage <= 0:
        logger.debug(
            "Non-positive input for commission calculation",
            extra={"amount": str(payment_amount), "percentage": str(percentage)},
        )
        return Decimal("0")

    raw = Decimal(payment_amount) * Decimal(percentage) / Decimal(100)
    return raw.quantize(minor_unit_quantum(currency), rounding=ROUND_HALF_UP)


def commission_type_for(billing_reason: str | None) -> CommissionType:
    """
    Map provider billing reason to commission type.

    subscription_create -> primeira_venda, one_time_purchase -> venda_avulsa,
    anything else (cycles, updates, unknown) -> renovacao.
    """
    if billing_reason == BillingReason.SUBSCRIPTION_CREATE:
        return CommissionType.FIRST_SALE
    if billing_reason == BillingReason.ONE_TIME_PURCHASE:
        return CommissionType.ONE_TIME
    return CommissionType.RENEWAL


def reference_month_for(payment_date: datetime) -> date:
    """First day of the invoice's calendar month (UTC)."""
    return first_day_of_month(payment_date)


def build_commission_notes(
    level: int,
    plan_type: PlanType,
    product_id: str,
    reprocessed: bool = False,
    direct: bool = False,
) -> str:
    """Human-readable origin stored with the commission."""
    markers = []
    if reprocessed:
        markers.append("reprocessed")
    if direct:
        markers.append("direct")
    suffix = f" ({', '.join(markers)})" if markers else ""
    return f"Commission L{level} ({plan_type.value}){suffix} - product {product_id}"
