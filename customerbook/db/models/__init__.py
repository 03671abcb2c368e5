# customerbook/db/models/__init__.py

from customerbook.db.base import Base

from .customers import Customer

__all__ = [
    "Base",
    "Customer",
]
