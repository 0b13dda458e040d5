"""
Schemas for the commission endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.base import BaseRequestSchema


class ReprocessRequest(BaseRequestSchema):
    """Body of POST /reprocess-commissions."""

    payment_ids: list[int] | None = Field(default=None, max_length=1000)
    process_all_pending: bool = False


class MaturationTriggerRequest(BaseRequestSchema):
    """Optional body of POST /process-commission-status."""

    triggered_at: datetime | None = None


class CommissionSyncResult(BaseModel):
    """Ledger outcome attached to a payment sync response."""

    status: str
    commissions_count: int = 0
    error: str | None = None

