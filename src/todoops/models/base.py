"""Base SQLAlchemy model for the todoops service.

This module defines the DeclarativeBase that all ORM models inherit from.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models.

    Its metadata is the target for schema creation and Alembic autogenerate.
    """
    pass
