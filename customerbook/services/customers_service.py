from __future__ import annotations

import logging
from contextlib import contextmanager
from collections.abc import Generator, Mapping
from typing import Any, Optional, TypeVar, Union

import pydantic
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from customerbook.db.models.customers import Customer
from customerbook.db.session import Database
from customerbook.errors import NotFoundError, StorageError, ValidationError
from customerbook.schemas.customers import (
    CustomerCreate,
    CustomerItem,
    CustomerSearch,
    CustomerUpdate,
)

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 10

# ids are stored as signed 64-bit integers on every supported backend
_MAX_ID = 2**63 - 1

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def _coerce(model: type[ModelT], data: Union[ModelT, Mapping[str, Any]]) -> ModelT:
    if isinstance(data, model):
        return data
    try:
        if isinstance(data, pydantic.BaseModel):
            # keep only the fields the caller actually set
            data = data.model_dump(exclude_unset=True)
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


class CustomerStore:
    """
    Durable storage and retrieval of customer records.

    Every operation runs in its own transaction on a session taken from the
    injected Database, and returns detached CustomerItem snapshots.
    """

    def __init__(self, database: Database, *, recent_limit: int = DEFAULT_RECENT_LIMIT) -> None:
        self.database = database
        self.recent_limit = recent_limit

    @contextmanager
    def _transaction(self, action: str) -> Generator[Session, None, None]:
        try:
            with self.database.session_scope() as s:
                yield s
        except SQLAlchemyError as exc:
            logger.exception("Customer store failed to %s", action)
            raise StorageError(f"Could not {action}.") from exc

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, data: Union[CustomerCreate, Mapping[str, Any]]) -> CustomerItem:
        payload = _coerce(CustomerCreate, data)

        with self._transaction("create customer") as s:
            customer = Customer(
                name=payload.name,
                email=payload.email,
                phone=payload.phone,
                address=payload.address,
            )
            s.add(customer)
            s.flush()
            # reload so created_at comes back exactly as the backend stored it
            s.refresh(customer)
            item = CustomerItem.model_validate(customer)

        logger.info("Created customer id=%s", item.id)
        return item

    def update(self, data: Union[CustomerUpdate, Mapping[str, Any]]) -> CustomerItem:
        """
        Apply a partial update: only fields present in `data` replace stored values.

        Raises NotFoundError when no customer has `data.id`.
        """
        payload = _coerce(CustomerUpdate, data)
        changes = payload.changes()

        with self._transaction("update customer") as s:
            customer = None
            if 0 < payload.id <= _MAX_ID:
                stmt = select(Customer).where(Customer.id == payload.id).with_for_update()
                customer = s.execute(stmt).scalars().first()
            if customer is None:
                raise NotFoundError(payload.id)

            for field, value in changes.items():
                setattr(customer, field, value)
            s.flush()
            item = CustomerItem.model_validate(customer)

        if changes:
            logger.info("Updated customer id=%s fields=%s", item.id, ",".join(changes))
        else:
            logger.debug("No-op update for customer id=%s", item.id)
        return item

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, customer_id: int) -> Optional[CustomerItem]:
        """
        Return the customer with `customer_id`, or None when there is none.
        """
        if not 0 < customer_id <= _MAX_ID:
            return None

        with self._transaction("fetch customer") as s:
            stmt = select(Customer).where(Customer.id == customer_id)
            customer = s.execute(stmt).scalars().first()
            item = CustomerItem.model_validate(customer) if customer else None

        logger.debug("Fetched customer id=%s found=%s", customer_id, item is not None)
        return item

    def list_all(self) -> list[CustomerItem]:
        with self._transaction("list customers") as s:
            stmt = select(Customer).order_by(Customer.id.asc())
            items = [CustomerItem.model_validate(c) for c in s.execute(stmt).scalars()]

        logger.debug("Listed %d customers", len(items))
        return items

    def list_recent(self, limit: Optional[int] = None) -> list[CustomerItem]:
        """
        The `limit` most recently created customers, newest first.
        """
        if limit is None:
            limit = self.recent_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError(
                "Limit must be a positive integer.",
                [{"field": "limit", "message": "must be a positive integer"}],
            )

        with self._transaction("list recent customers") as s:
            stmt = (
                select(Customer)
                .order_by(Customer.created_at.desc(), Customer.id.desc())
                .limit(limit)
            )
            items = [CustomerItem.model_validate(c) for c in s.execute(stmt).scalars()]

        logger.debug("Listed %d recent customers (limit=%d)", len(items), limit)
        return items

    def search(self, query: Union[str, CustomerSearch]) -> list[CustomerItem]:
        """
        Customers whose name or email contains `query`, ignoring case.

        Wildcard characters in the query match literally; phone and address
        are not searched.
        """
        if isinstance(query, str):
            query = {"query": query}
        term = _coerce(CustomerSearch, query).query
        # lower() on both sides, not ILIKE. PostgreSQL lower() follows LC_CTYPE:
        # the database must be UTF-8 with a C.UTF-8 or ICU ctype.
        needle = term.lower()

        with self._transaction("search customers") as s:
            stmt = (
                select(Customer)
                .where(
                    or_(
                        func.lower(Customer.name).contains(needle, autoescape=True),
                        func.lower(Customer.email).contains(needle, autoescape=True),
                    )
                )
                .order_by(Customer.id.asc())
            )
            items = [CustomerItem.model_validate(c) for c in s.execute(stmt).scalars()]

        logger.debug("Search q=%r matched %d customers", term, len(items))
        return items
