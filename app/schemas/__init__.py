"""Request and response schemas for the HTTP API."""

from app.schemas.base import BaseRequestSchema, BaseResponseSchema
from app.schemas.commission import (
    CommissionSyncResult,
    MaturationTriggerRequest,
    ReprocessRequest,
)
from app.schemas.sync import (
    SyncPaymentData,
    SyncRequest,
    SyncSubscriptionData,
    SyncUserData,
    UnifiedPaymentResponse,
    UnifiedUserResponse,
)


__all__ = [
    "BaseRequestSchema",
    "BaseResponseSchema",
    "CommissionSyncResult",
    "MaturationTriggerRequest",
    "ReprocessRequest",
    "SyncPaymentData",
    "SyncRequest",
    "SyncSubscriptionData",
    "SyncUserData",
    "UnifiedPaymentResponse",
    "UnifiedUserResponse",
]
