"""
Declarative base.

All models inherit from Base so metadata can be created in one place.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all database models."""
