from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator


def _require_text(value: str) -> str:
    # blank is checked on the trimmed value, the value itself is stored as given
    if not value.strip():
        raise ValueError("must not be empty")
    return value


class CustomerCreate(BaseModel):
    """
    Payload for creating a customer. Every field is required.
    """
    model_config = ConfigDict(extra="forbid")

    name: str
    email: EmailStr
    phone: str
    address: str

    @field_validator("name", "phone", "address")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        return _require_text(value)


class CustomerPatch(BaseModel):
    """
    Partial update body. Only the fields present in the payload are applied;
    `model_fields_set` tells an omitted field apart from one sent as "".
    """
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    # Defaults are not validated, so this only fires for explicitly provided values.
    @field_validator("name", "email", "phone", "address")
    @classmethod
    def _reject_null_or_blank(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return _require_text(value)

    def changes(self) -> dict[str, str]:
        """
        The fields explicitly provided, ready to be applied to a stored record.
        """
        return {
            field: getattr(self, field)
            for field in sorted(self.model_fields_set)
            if field != "id"
        }


class CustomerUpdate(CustomerPatch):
    """
    Partial update addressed to one customer.
    """
    id: int


class CustomerSearch(BaseModel):
    """
    The query is matched exactly as given; it only has to contain something
    other than whitespace.
    """
    query: str

    @field_validator("query")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        return _require_text(value)


class CustomerItem(BaseModel):
    """
    A single stored customer, as returned to callers.
    """
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str
    email: str
    phone: str
    address: str
    created_at: datetime


class CustomerListResponse(BaseModel):
    items: list[CustomerItem]
    total: int
