"""
Standard type definitions for database models.

Provides consistent types for monetary and percentage fields across all models.
"""

from enum import Enum

from sqlalchemy import DECIMAL
from sqlalchemy import Enum as SAEnum

# Standard money type for invoice and commission amounts
# Precision: 18 digits total, 4 after decimal point
# Suitable for: 2- and 3-decimal currencies after rounding to minor units
# Range: up to 99,999,999,999,999.9999
MoneyType = DECIMAL(18, 4)

# Standard percentage type for commission rates
# Precision: 5 digits total, 2 after decimal point
# Suitable for: commission percentages (e.g., 30.00%, 7.50%)
# Range: 0.00 to 999.99
PercentType = DECIMAL(5, 2)


def enum_column(enum_cls: type[Enum], length: int = 20) -> SAEnum:
    """
    String-backed enum column storing member values.

    Rows carry plain strings ("pending", "primeira_venda"), while mapped
    attributes are resolved to enum members at load time.
    """
    return SAEnum(
        enum_cls,
        native_enum=False,
        create_constraint=False,
        length=length,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )
