from __future__ import annotations

INVOICE_BODY = {
    "issueDate": "2026-03-01",
    "dueDate": "2026-03-31",
    "taxRate": "10",
    "discountAmount": "1.00",
    "items": [
        {"description": "Design", "quantity": 2, "unitPrice": "10.00"},
        {"description": "Hosting", "quantity": 1, "unitPrice": "5.00", "unit": "month"},
    ],
}


def _create_customer(client, headers, email="ap@initech.test"):
    response = client.post("/api/customers", headers=headers, json={"name": "Initech", "email": email})
    assert response.status_code == 201
    return response.json()


def _create_invoice(client, headers, customer_id, **overrides):
    body = {**INVOICE_BODY, "customerId": customer_id, **overrides}
    return client.post("/api/invoices", headers=headers, json=body)


def test_create_invoice_returns_exact_totals(client, auth_headers):
    customer = _create_customer(client, auth_headers)
    response = _create_invoice(client, auth_headers, customer["id"])

    assert response.status_code == 201
    body = response.json()
    assert body["invoiceNumber"] == "INV-0001"
    assert body["status"] == "draft"
    assert body["subtotal"] == "25.00"
    assert body["taxAmount"] == "2.50"
    assert body["discountAmount"] == "1.00"
    assert body["totalAmount"] == "26.50"
    assert body["isOverdue"] is False
    assert body["customer"]["email"] == "ap@initech.test"
    assert [item["lineTotal"] for item in body["items"]] == ["20.00", "5.00"]


def test_create_invoice_by_customer_email(client, auth_headers):
    _create_customer(client, auth_headers)
    body = {**INVOICE_BODY, "customerEmail": "ap@initech.test"}
    assert client.post("/api/invoices", headers=auth_headers, json=body).status_code == 201


def test_create_invoice_validation(client, auth_headers):
    customer = _create_customer(client, auth_headers)
    bad_quantity = _create_invoice(
        client, auth_headers, customer["id"], items=[{"description": "X", "quantity": 0, "unitPrice": "1.00"}]
    )
    assert bad_quantity.status_code == 400
    assert _create_invoice(client, auth_headers, customer["id"], taxRate="100.01").status_code == 400
    assert _create_invoice(client, auth_headers, customer["id"], discountAmount="99.00").status_code == 400
    assert _create_invoice(client, auth_headers, customer["id"], dueDate="2026-02-01").status_code == 400
    assert _create_invoice(client, auth_headers, customer["id"], status="paid").status_code == 400
    assert _create_invoice(client, auth_headers, 999).status_code == 404
    assert client.get("/api/invoices", headers=auth_headers).json() == []


def test_update_invoice_transitions_and_recalculates(client, auth_headers):
    customer = _create_customer(client, auth_headers)
    invoice_id = _create_invoice(client, auth_headers, customer["id"]).json()["id"]

    sent = client.put(f"/api/invoices/{invoice_id}", headers=auth_headers, json={"status": "sent"})
    assert sent.status_code == 200
    assert sent.json()["status"] == "sent"

    back_to_draft = client.put(f"/api/invoices/{invoice_id}", headers=auth_headers, json={"status": "draft"})
    assert back_to_draft.status_code == 400
    assert back_to_draft.json()["error_code"] == "invalid_transition"

    repriced = client.put(
        f"/api/invoices/{invoice_id}",
        headers=auth_headers,
        json={"items": [{"description": "Retainer", "quantity": 1, "unitPrice": "100.00"}], "discountAmount": None},
    )
    body = repriced.json()
    assert body["subtotal"] == "100.00"
    assert body["taxAmount"] == "10.00"
    assert body["discountAmount"] is None
    assert body["totalAmount"] == "110.00"
    assert body["invoiceNumber"] == "INV-0001"


def test_overdue_listing_and_flag(client, auth_headers):
    customer = _create_customer(client, auth_headers)
    late = _create_invoice(client, auth_headers, customer["id"], issueDate="2026-02-01", dueDate="2026-03-01").json()
    _create_invoice(client, auth_headers, customer["id"])

    overdue = client.get("/api/invoices/overdue", headers=auth_headers)
    assert overdue.status_code == 200
    assert [invoice["id"] for invoice in overdue.json()] == [late["id"]]
    assert client.get(f"/api/invoices/{late['id']}", headers=auth_headers).json()["isOverdue"] is True


def test_list_filters(client, auth_headers):
    customer = _create_customer(client, auth_headers)
    first = _create_invoice(client, auth_headers, customer["id"]).json()
    second = _create_invoice(client, auth_headers, customer["id"], status="sent").json()

    listed = client.get("/api/invoices", headers=auth_headers).json()
    assert [invoice["id"] for invoice in listed] == [second["id"], first["id"]]
    sent_only = client.get("/api/invoices", headers=auth_headers, params={"status": "sent"}).json()
    assert [invoice["id"] for invoice in sent_only] == [second["id"]]
    by_customer = client.get("/api/invoices", headers=auth_headers, params={"customerId": customer["id"]}).json()
    assert len(by_customer) == 2
    assert client.get("/api/invoices", headers=auth_headers, params={"status": "bogus"}).status_code == 400


def test_pdf_download(client, auth_headers):
    customer = _create_customer(client, auth_headers)
    invoice_id = _create_invoice(client, auth_headers, customer["id"]).json()["id"]

    response = client.get(f"/api/invoices/{invoice_id}/pdf", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "invoice_INV-0001.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_delete_invoice_then_customer(client, auth_headers):
    customer = _create_customer(client, auth_headers)
    invoice_id = _create_invoice(client, auth_headers, customer["id"]).json()["id"]

    blocked = client.delete(f"/api/customers/{customer['id']}", headers=auth_headers)
    assert blocked.status_code == 409

    assert client.delete(f"/api/invoices/{invoice_id}", headers=auth_headers).status_code == 204
    assert client.get(f"/api/invoices/{invoice_id}", headers=auth_headers).status_code == 404
    assert client.delete(f"/api/customers/{customer['id']}", headers=auth_headers).status_code == 204


def test_create_invoice_rejects_amounts_beyond_storage(client, auth_headers):
    customer = _create_customer(client, auth_headers)
    too_many = _create_invoice(
        client,
        auth_headers,
        customer["id"],
        items=[{"description": "X", "quantity": 123456789, "unitPrice": "12345678.91"}],
    )
    assert too_many.status_code == 400
    assert too_many.json()["error_code"] == "validation_error"

    line_too_large = _create_invoice(
        client, auth_headers, customer["id"], items=[{"description": "X", "quantity": 1000000, "unitPrice": "100.00"}]
    )
    assert line_too_large.status_code == 400
    assert line_too_large.json()["error_code"] == "validation_error"

    at_limit = _create_invoice(
        client,
        auth_headers,
        customer["id"],
        taxRate=None,
        discountAmount=None,
        items=[{"description": "X", "quantity": 1000000, "unitPrice": "99.99"}],
    )
    assert at_limit.status_code == 201
    assert at_limit.json()["totalAmount"] == "99990000.00"
