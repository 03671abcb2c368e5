from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, Text, func

from customerbook.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    address = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_customers_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Customer id={self.id} name={self.name!r}>"
