from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from customerbook.schemas.customers import (
    CustomerCreate,
    CustomerItem,
    CustomerListResponse,
    CustomerPatch,
    CustomerUpdate,
)
from customerbook.services.customers_service import CustomerStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["customers"])


def get_store(request: Request) -> CustomerStore:
    return request.app.state.customer_store


@router.get("", response_model=CustomerListResponse, summary="List all customers")
def list_customers(store: CustomerStore = Depends(get_store)) -> CustomerListResponse:
    items = store.list_all()
    return CustomerListResponse(items=items, total=len(items))


@router.post("", response_model=CustomerItem, status_code=201, summary="Create customer")
def create_customer(payload: CustomerCreate, store: CustomerStore = Depends(get_store)) -> CustomerItem:
    return store.create(payload)


@router.get("/recent", response_model=CustomerListResponse, summary="Most recently created customers")
def list_recent_customers(
    limit: int | None = Query(default=None, ge=1, le=500, description="Defaults to RECENT_LIMIT"),
    store: CustomerStore = Depends(get_store),
) -> CustomerListResponse:
    items = store.list_recent(limit)
    return CustomerListResponse(items=items, total=len(items))


@router.get("/search", response_model=CustomerListResponse, summary="Search by name or email")
def search_customers(
    q: str = Query(..., description="Case-insensitive substring of name or email"),
    store: CustomerStore = Depends(get_store),
) -> CustomerListResponse:
    items = store.search(q)
    return CustomerListResponse(items=items, total=len(items))


@router.get("/{customer_id}", response_model=CustomerItem, summary="Get customer")
def get_customer(customer_id: int, store: CustomerStore = Depends(get_store)) -> CustomerItem:
    customer = store.get(customer_id)
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.patch("/{customer_id}", response_model=CustomerItem, summary="Partially update customer")
def update_customer(
    customer_id: int,
    payload: CustomerPatch,
    store: CustomerStore = Depends(get_store),
) -> CustomerItem:
    update = CustomerUpdate(id=customer_id, **payload.changes())
    return store.update(update)
