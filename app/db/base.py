"""
Declarative base - every ORM model inherits from Base.

Models register themselves on Base.metadata when app.models is imported
(the package __init__ imports every model module).
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 declarative base class."""
    pass
