"""Customer service for CRUD operations."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from invoicedesk.core.exceptions import ConflictError, NotFoundError
from invoicedesk.models import Customer, Invoice
from invoicedesk.services.base_service import BaseService, violates_unique

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CustomerService(BaseService):
    """Service for customer creation, lookup and deletion."""

    def create_customer(self, name: str, email: str) -> Customer:
        email = normalize_email(email)
        if self.find_by_email(email) is not None:
            raise ConflictError("Customer with this email already exists.")

        customer = Customer(name=name.strip(), email=email, created_at=self.clock.now())
        self.db.add(customer)
        try:
            self.commit()
        except IntegrityError as exc:
            if violates_unique(exc, "email"):
                raise ConflictError("Customer with this email already exists.") from exc
            raise
        self.db.refresh(customer)
        logger.info("customer.created", extra={"event": "customer.created", "customer_id": customer.id})
        return customer

    def get_customer(self, customer_id: int) -> Customer | None:
        return self.db.get(Customer, customer_id)

    def require_customer(self, customer_id: int) -> Customer:
        customer = self.get_customer(customer_id)
        if customer is None:
            raise NotFoundError("Customer not found.")
        return customer

    def find_by_email(self, email: str) -> Customer | None:
        stmt = select(Customer).where(Customer.email == normalize_email(email))
        return self.db.execute(stmt).scalar_one_or_none()

    def list_customers(self) -> list[Customer]:
        return list(self.db.execute(select(Customer).order_by(Customer.id)).scalars())

    def count_customers(self) -> int:
        return self.db.execute(select(func.count(Customer.id))).scalar_one()

    def delete_customer(self, customer_id: int) -> None:
        customer = self.require_customer(customer_id)
        invoice_count = self.db.execute(
            select(func.count(Invoice.id)).where(Invoice.customer_id == customer_id)
        ).scalar_one()
        if invoice_count:
            raise ConflictError(f"Customer is referenced by {invoice_count} invoice(s) and cannot be deleted.")

        self.db.delete(customer)
        try:
            self.commit()
        except IntegrityError as exc:
            # An invoice was created for this customer between the check and the delete.
            raise ConflictError("Customer is referenced by invoices and cannot be deleted.") from exc
        logger.info("customer.deleted", extra={"event": "customer.deleted", "customer_id": customer_id})
