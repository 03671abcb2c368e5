"""Customer store exceptions.

Raised by the service layer when an operation cannot be satisfied.
The API layer and the CLI catch these and translate them into
HTTP responses or exit codes.
"""

from __future__ import annotations

from typing import Any, Optional


class CustomerStoreError(Exception):
    """Base class for every error raised by the customer store."""


class ValidationError(CustomerStoreError):
    """Malformed or missing input (empty field, bad email, empty query).

    ``errors`` holds one ``{"field": ..., "message": ...}`` entry per problem.
    """

    def __init__(self, message: str, errors: Optional[list[dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, exc: Any, *, skip_sources: bool = False) -> "ValidationError":
        errors = []
        for err in exc.errors():
            parts = list(err.get("loc", ()))
            # request errors are located as ("body", "name"), ("query", "q"), ...
            if skip_sources and parts and parts[0] in ("body", "query", "path", "header", "cookie"):
                parts = parts[1:]
            loc = ".".join(str(part) for part in parts) or None
            errors.append({"field": loc, "message": err.get("msg", "invalid value")})
        fields = ", ".join(e["field"] for e in errors if e["field"]) or "input"
        return cls(f"Invalid {fields}.", errors)


class NotFoundError(CustomerStoreError):
    """A mutation referenced a customer id that does not exist."""

    def __init__(self, customer_id: int) -> None:
        super().__init__(f"Customer with id {customer_id} not found.")
        self.customer_id = customer_id


class StorageError(CustomerStoreError):
    """The underlying database failed (connectivity, constraint violation, timeout)."""
