# customerbook/db/__init__.py

from .base import Base
from .session import Database
from . import models  # noqa: F401  # ensure models are imported so Base.metadata is populated

__all__ = [
    "Base",
    "Database",
    "models",
]
