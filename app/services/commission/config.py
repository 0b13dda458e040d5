"""
Commission engine configuration.

Typed snapshot of the commission settings, read once per job or request
and passed down the call chain.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    SETTING_CHECK_SCHEDULE,
    SETTING_DAYS_TO_AVAILABLE,
    SETTING_MIN_WITHDRAWAL,
)
from app.config.settings import Settings, settings as app_settings
from app.repositories.app_setting_repository import AppSettingRepository


HOURLY_SCHEDULE = "hourly"
_TIME_OF_DAY = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


@dataclass(frozen=True)
class CommissionConfig:
    """Commission settings for one invocation."""

    holding_period_days: int
    minimum_withdrawal_amount: Decimal
    max_depth: int
    batch_size: int
    worker_pool_size: int
    store_timeout: float
    check_schedule: str = HOURLY_SCHEDULE

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "CommissionConfig":
        """Build config from process settings only (no store access)."""
        source = source or app_settings
        return cls(
            holding_period_days=source.default_holding_period_days,
            minimum_withdrawal_amount=Decimal(source.default_minimum_withdrawal),
            max_depth=source.referral_depth,
            batch_size=source.reconciliation_batch_size,
            worker_pool_size=source.worker_pool_size,
            store_timeout=source.store_timeout_seconds,
            check_schedule=parse_check_schedule(source.default_check_schedule),
        )


async def load_commission_config(
    session: AsyncSession, source: Settings | None = None
) -> CommissionConfig:
    """
    Load commission config from app_settings with settings fallbacks.

    Args:
        session: Database session
        source: Process settings (defaults to global settings)

    Returns:
        CommissionConfig snapshot
    """
    defaults = CommissionConfig.from_settings(source)

    repo = AppSettingRepository(session)
    values = await repo.get_values(
        [SETTING_DAYS_TO_AVAILABLE, SETTING_MIN_WITHDRAWAL, SETTING_CHECK_SCHEDULE]
    )

    holding_days = _parse_days(
        values.get(SETTING_DAYS_TO_AVAILABLE), defaults.holding_period_days
    )
    min_withdrawal = _parse_amount(
        values.get(SETTING_MIN_WITHDRAWAL), defaults.minimum_withdrawal_amount
    )
    raw_schedule = values.get(SETTING_CHECK_SCHEDULE)
    schedule = (
        parse_check_schedule(raw_schedule)
        if raw_schedule
        else defaults.check_schedule
    )

    config = CommissionConfig(
        holding_period_days=holding_days,
        minimum_withdrawal_amount=min_withdrawal,
        max_depth=defaults.max_depth,
        batch_size=defaults.batch_size,
        worker_pool_size=defaults.worker_pool_size,
        store_timeout=defaults.store_timeout,
        check_schedule=schedule,
    )

    logger.debug(
        "Commission config loaded",
        extra={
            "holding_period_days": config.holding_period_days,
            "minimum_withdrawal_amount": str(config.minimum_withdrawal_amount),
            "check_schedule": config.check_schedule,
        },
    )

    return config


def parse_check_schedule(value: str | None) -> str:
    """
    Normalize commission_check_schedule.

    Args:
        value: "hourly" or "HH:MM"

    Returns:
        "hourly" or zero-padded "HH:MM"; invalid values fall back to hourly
    """
    if not value:
        return HOURLY_SCHEDULE

    value = value.strip().lower()
    if value == HOURLY_SCHEDULE:
        return HOURLY_SCHEDULE

    match = _TIME_OF_DAY.match(value)
    if not match:
        logger.warning(
            f"Invalid {SETTING_CHECK_SCHEDULE} value {value!r}, using hourly"
        )
        return HOURLY_SCHEDULE

    return f"{int(match.group(1)):02d}:{match.group(2)}"


def _parse_days(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        days = int(value.strip())
    except ValueError:
        logger.warning(
            f"Invalid {SETTING_DAYS_TO_AVAILABLE} value {value!r}, using {default}"
        )
        return default
    if days < 0:
        logger.warning(
            f"Negative {SETTING_DAYS_TO_AVAILABLE} value {value!r}, using {default}"
        )
        return default
    return days


def _parse_amount(value: str | None, default: Decimal) -> Decimal:
    if value is None or value == "":
        return default
    try:
        amount = Decimal(value.strip().replace(",", "."))
    except InvalidOperation:
        logger.warning(
            f"Invalid {SETTING_MIN_WITHDRAWAL} value {value!r}, using {default}"
        )
        return default
    if not amount.is_finite() or amount < 0:
        logger.warning(
            f"Out of range {SETTING_MIN_WITHDRAWAL} value {value!r}, using {default}"
        )
        return default
    return amount
