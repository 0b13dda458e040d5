"""
Unified data sync service.

Receives users, subscriptions and paid invoices pushed by external
products and hands every newly stored payment to the commission ledger.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    DEFAULT_CURRENCY,
    DEFAULT_ENVIRONMENT,
    DEFAULT_PAYMENT_STATUS,
)
from app.models.enums import SyncAction
from app.models.unified_payment import UnifiedPayment
from app.models.unified_user import UnifiedUser
from app.repositories.unified_payment_repository import UnifiedPaymentRepository
from app.repositories.unified_user_repository import UnifiedUserRepository
from app.schemas.commission import CommissionSyncResult
from app.schemas.sync import (
    SyncPaymentData,
    SyncRequest,
    SyncSubscriptionData,
    SyncUserData,
)
from app.services.base_service import BaseService, transaction
from app.services.commission.config import CommissionConfig
from app.services.commission.ledger_writer import (
    CommissionLedgerWriter,
    LedgerResult,
)
from app.utils.datetime_utils import utc_now
from app.utils.exceptions import ValidationError


@dataclass
class SyncOutcome:
    """Records touched by one sync request."""

    action: SyncAction
    user: UnifiedUser | None = None
    subscription: UnifiedUser | None = None
    payment: UnifiedPayment | None = None
    commissions: CommissionSyncResult | None = None


class UnifiedSyncService(BaseService):
    """
    Payment intake.

    The only place that triggers the ledger writer for a fresh payment.
    """

    def __init__(self, session: AsyncSession, config: CommissionConfig) -> None:
        """
        Initialize sync service.

        Args:
            session: Async database session
            config: Commission config snapshot for this request
        """
        super().__init__(session)
        self.config = config
        self.user_repo = UnifiedUserRepository(session)
        self.payment_repo = UnifiedPaymentRepository(session)

    async def sync(self, request: SyncRequest) -> SyncOutcome:
        """
        Apply a sync request.

        Args:
            request: Validated request body

        Returns:
            SyncOutcome

        Raises:
            ValidationError: Missing block or unknown user
            LookupUnavailable: Store unreachable
        """
        action = request.action
        outcome = SyncOutcome(action=action)

        if action in (SyncAction.SYNC_USER, SyncAction.SYNC_BOTH):
            if request.user is None:
                raise ValidationError(
                    "User data is required for sync_user action"
                )
            outcome.user = await self.sync_user(request.user)

        if action == SyncAction.SYNC_SUBSCRIPTION:
            if request.subscription is None:
                raise ValidationError(
                    "Subscription data is required for sync_subscription action"
                )
            outcome.subscription = await self.sync_subscription(
                request.subscription
            )

        if action in (SyncAction.SYNC_PAYMENT, SyncAction.SYNC_BOTH):
            if request.payment is None:
                raise ValidationError(
                    "Payment data is required for sync_payment action"
                )
            payment = await self.sync_payment(request.payment)
            result = await self.process_commissions(payment)
            # A ledger rollback expires everything loaded in this session
            await self.session.refresh(payment)
            if outcome.user is not None:
                await self.session.refresh(outcome.user)
            outcome.payment = payment
            outcome.commissions = self._commission_summary(payment, result)

        return outcome

    @transaction
    async def sync_user(self, data: SyncUserData) -> UnifiedUser:
        """
        Create or refresh a unified user (last write wins).

        Args:
            data: User block

        Returns:
            Stored user
        """
        user = await self.user_repo.upsert_user(**data.model_dump())

        self.logger.info(
            "User synced",
            extra={
                "unified_user_id": user.id,
                "external_user_id": user.external_user_id,
                "product_id": user.product_id,
                "affiliate_id": user.affiliate_id,
            },
        )
        return user

    @transaction
    async def sync_subscription(self, data: SyncSubscriptionData) -> UnifiedUser:
        """
        Update subscription-tracking fields of an existing user.

        Args:
            data: Subscription block

        Returns:
            Updated user

        Raises:
            ValidationError: User was never synced
        """
        user = await self.user_repo.update_subscription(
            data.external_user_id, data.product_id, **data.tracking_fields()
        )
        if user is None:
            raise ValidationError(
                "Unified user not found. Please sync user first. "
                f"External ID: {data.external_user_id}"
            )

        self.logger.info(
            "Subscription synced",
            extra={
                "unified_user_id": user.id,
                "plan_id": user.plan_id,
                "status": user.status,
            },
        )
        return user

    @transaction
    async def sync_payment(self, data: SyncPaymentData) -> UnifiedPayment:
        """
        Record a paid invoice for a known user.

        Args:
            data: Payment block

        Returns:
            Stored payment

        Raises:
            ValidationError: User was never synced
        """
        user = await self.user_repo.get_by_external_id(
            data.external_user_id, data.product_id
        )
        if user is None:
            raise ValidationError(
                "Unified user not found. Please sync user first. "
                f"External ID: {data.external_user_id}"
            )

        payment, created = await self.payment_repo.upsert_payment(
            external_payment_id=data.external_payment_id,
            unified_user_id=user.id,
            product_id=data.product_id,
            plan_id=data.plan_id,
            stripe_invoice_id=data.stripe_invoice_id,
            stripe_subscription_id=data.stripe_subscription_id,
            amount=data.amount,
            currency=data.currency or DEFAULT_CURRENCY,
            billing_reason=data.billing_reason,
            status=data.status or DEFAULT_PAYMENT_STATUS,
            payment_date=data.payment_date or utc_now(),
            affiliate_id=data.affiliate_id,
            affiliate_coupon_id=data.affiliate_coupon_id,
            environment=data.environment or DEFAULT_ENVIRONMENT,
            payment_metadata=data.metadata or {},
        )

        self.logger.info(
            "Payment synced",
            extra={
                "payment_id": payment.id,
                "stripe_invoice_id": payment.stripe_invoice_id,
                "amount": str(payment.amount),
                "created": created,
            },
        )
        return payment

    async def process_commissions(self, payment: UnifiedPayment) -> LedgerResult:
        """
        Run the ledger writer unless the payment is already processed.

        Args:
            payment: Stored payment

        Returns:
            LedgerResult
        """
        if payment.processed:
            return LedgerResult(
                payment_id=payment.id,
                success=True,
                commissions_count=payment.commissions_generated,
                already_processed=True,
            )

        writer = CommissionLedgerWriter(self.session, self.config)
        return await writer.process_payment(payment)

    @staticmethod
    def _commission_summary(
        payment: UnifiedPayment, result: LedgerResult
    ) -> CommissionSyncResult:
        if not result.success:
            status = "error"
        elif result.already_processed:
            status = "already_processed"
        else:
            status = "processed"

        return CommissionSyncResult(
            status=status,
            commissions_count=result.commissions_count,
            error=result.error_message or payment.last_error,
        )
