"""Customer endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from invoicedesk.core.dependencies import get_customer_service
from invoicedesk.schemas.customers import CustomerCreateRequest, CustomerResponse
from invoicedesk.services.customer_service import CustomerService

router = APIRouter(prefix="/customers", tags=["customers"])


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreateRequest,
    customers: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    return CustomerResponse.model_validate(customers.create_customer(name=payload.name, email=payload.email))


@router.get("", response_model=list[CustomerResponse])
def list_customers(customers: CustomerService = Depends(get_customer_service)) -> list[CustomerResponse]:
    return [CustomerResponse.model_validate(customer) for customer in customers.list_customers()]


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, customers: CustomerService = Depends(get_customer_service)) -> CustomerResponse:
    return CustomerResponse.model_validate(customers.require_customer(customer_id))


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(customer_id: int, customers: CustomerService = Depends(get_customer_service)) -> Response:
    customers.delete_customer(customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
