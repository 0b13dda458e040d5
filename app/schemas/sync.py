"""
Schemas for POST /sync-unified-data.

External products push users, subscriptions and paid invoices through
one endpoint; the action field selects which blocks are required.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import Field, field_validator

from app.models.enums import SyncAction
from app.schemas.base import BaseRequestSchema, BaseResponseSchema, JsonDecimal


# ============================================================================
# Requests
# ============================================================================

class SyncUserData(BaseRequestSchema):
    """User block of a sync request."""

    external_user_id: str = Field(..., min_length=1, max_length=255)
    product_id: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., min_length=1, max_length=255)
    name: str | None = None
    phone: str | None = None
    cpf: str | None = None
    affiliate_code: str | None = None
    affiliate_id: str | None = None
    # Subscription tracking
    environment: str | None = None
    plan_id: str | None = None
    cancel_at_period_end: bool | None = None
    trial_end: datetime | None = None
    status: str | None = None
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None


class SyncSubscriptionData(BaseRequestSchema):
    """Subscription block; only fields present in the body are written."""

    external_user_id: str = Field(..., min_length=1, max_length=255)
    product_id: str = Field(..., min_length=1, max_length=64)
    environment: str | None = None
    plan_id: str | None = None
    cancel_at_period_end: bool | None = None
    trial_end: datetime | None = None
    status: str | None = None
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None

    def tracking_fields(self) -> dict[str, Any]:
        """Subscription fields explicitly sent by the caller."""
        return self.model_dump(
            exclude={"external_user_id", "product_id"}, exclude_unset=True
        )


class SyncPaymentData(BaseRequestSchema):
    """Payment block of a sync request."""

    external_payment_id: str | None = None
    external_user_id: str = Field(..., min_length=1, max_length=255)
    product_id: str = Field(..., min_length=1, max_length=64)
    plan_id: str | None = None
    stripe_invoice_id: str = Field(..., min_length=1, max_length=255)
    stripe_subscription_id: str | None = None
    amount: Decimal = Field(..., gt=0, max_digits=18, decimal_places=4)
    currency: str | None = Field(default=None, max_length=10)
    billing_reason: str | None = None
    status: str | None = None
    payment_date: datetime | None = None
    affiliate_id: str | None = None
    affiliate_coupon_id: str | None = None
    environment: str | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("currency")
    @classmethod
    def lowercase_currency(cls, v: str | None) -> str | None:
        """Currencies are stored lowercase (ISO 4217 code)."""
        return v.lower() if v else v


class SyncRequest(BaseRequestSchema):
    """Body of POST /sync-unified-data."""

    action: SyncAction
    user: SyncUserData | None = None
    payment: SyncPaymentData | None = None
    subscription: SyncSubscriptionData | None = None


# ============================================================================
# Responses
# ============================================================================

class UnifiedUserResponse(BaseResponseSchema):
    """Stored unified user."""

    id: int
    external_user_id: str
    product_id: str
    email: str
    name: str | None = None
    phone: str | None = None
    cpf: str | None = None
    affiliate_code: str | None = None
    affiliate_id: str | None = None
    environment: str | None = None
    plan_id: str | None = None
    status: str | None = None
    cancel_at_period_end: bool | None = None
    trial_end: datetime | None = None
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    created_at: datetime
    updated_at: datetime


class UnifiedPaymentResponse(BaseResponseSchema):
    """Stored unified payment with commission tracking."""

    id: int
    external_payment_id: str | None = None
    unified_user_id: int
    product_id: str
    plan_id: str | None = None
    stripe_invoice_id: str
    stripe_subscription_id: str | None = None
    amount: JsonDecimal
    currency: str
    billing_reason: str | None = None
    status: str
    payment_date: datetime
    affiliate_id: str | None = None
    affiliate_coupon_id: str | None = None
    environment: str
    metadata: dict[str, Any] | None = Field(
        default=None, validation_alias="payment_metadata"
    )
    processed: bool | None = None
    processed_at: datetime | None = None
    commissions_generated: int
    last_error: str | None = None
    created_at: datetime
    updated_at: datetime
