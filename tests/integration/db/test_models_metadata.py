from __future__ import annotations

from sqlalchemy import inspect

from invoicedesk.models import Base


def test_model_metadata_contains_target_tables():
    assert {"customers", "users", "invoices", "invoice_items"}.issubset(set(Base.metadata.tables.keys()))


def test_schema_enforces_unique_invoice_numbers_and_emails(engine):
    inspector = inspect(engine)
    invoice_uniques = {tuple(c["column_names"]) for c in inspector.get_unique_constraints("invoices")}
    customer_uniques = {tuple(c["column_names"]) for c in inspector.get_unique_constraints("customers")}
    user_uniques = {tuple(c["column_names"]) for c in inspector.get_unique_constraints("users")}
    assert ("invoice_number",) in invoice_uniques
    assert ("email",) in customer_uniques
    assert ("email",) in user_uniques


def test_invoice_items_cascade_from_invoices(engine):
    foreign_keys = inspect(engine).get_foreign_keys("invoice_items")
    assert foreign_keys[0]["referred_table"] == "invoices"
    assert foreign_keys[0]["options"].get("ondelete") == "CASCADE"
